"""
Investment model.

A user's committed principal against a package, with accruing value.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import InvestmentStatus
from app.models.types import MoneyType

if TYPE_CHECKING:
    from app.models.investment_package import InvestmentPackage
    from app.models.user import User


class Investment(Base):
    """Investment model - user positions in packages."""

    __tablename__ = "investments"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_investment_amount_positive'
        ),
        CheckConstraint(
            'total_returns >= 0',
            name='check_investment_total_returns_non_negative'
        ),
        Index('idx_investment_user_status', 'user_id', 'status'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    package_id: Mapped[int] = mapped_column(
        ForeignKey("investment_packages.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Principal
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Term
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    # Valuation (current_value = amount + total_returns)
    current_value: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    daily_return: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_returns: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    last_calculated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=InvestmentStatus.PENDING.value,
        nullable=False,
        index=True
    )  # pending, active, completed, cancelled

    # Admin audit
    approved_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="investments",
        foreign_keys=[user_id],
    )
    package: Mapped["InvestmentPackage"] = relationship(
        "InvestmentPackage",
        back_populates="investments",
        lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        """Check if investment is accruing."""
        return self.status == InvestmentStatus.ACTIVE.value

    @property
    def is_terminal(self) -> bool:
        """Completed and cancelled investments never change again."""
        return self.status in (
            InvestmentStatus.COMPLETED.value,
            InvestmentStatus.CANCELLED.value,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Investment(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
