"""
User model.

Represents a registered account and its balance projection.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

import bcrypt
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import UserRole
from app.models.types import MoneyType

if TYPE_CHECKING:
    from app.models.investment import Investment
    from app.models.transaction import Transaction


class User(Base):
    """User model - platform accounts."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'balance >= 0', name='check_user_balance_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), default=UserRole.USER.value, nullable=False, index=True
    )

    # External wallet identifier used for peer transfers (e.g. MCT23A)
    wallet_id: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    crypto_wallet: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Balance
    balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    investments: Mapped[list["Investment"]] = relationship(
        "Investment",
        back_populates="user",
        foreign_keys="Investment.user_id",
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="user",
        foreign_keys="Transaction.user_id",
    )

    @property
    def full_name(self) -> str:
        """Display name."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        """Check admin role."""
        return self.role == UserRole.ADMIN.value

    def set_password(self, password: str) -> None:
        """
        Set password with bcrypt hashing.

        Args:
            password: Plain text password to hash and store
        """
        self.password_hash = bcrypt.hashpw(
            password.encode(), bcrypt.gensalt()
        ).decode()

    def verify_password(self, password: str) -> bool:
        """
        Verify password against stored hash.

        Args:
            password: Plain text password to verify

        Returns:
            True if password matches, False otherwise
        """
        if not self.password_hash:
            return False
        return bcrypt.checkpw(
            password.encode(), self.password_hash.encode()
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, wallet_id={self.wallet_id}, "
            f"balance={self.balance})>"
        )
