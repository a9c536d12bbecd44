"""
Transaction model.

Append-only ledger of every balance-affecting event.
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
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import TransactionStatus, TransactionType
from app.models.types import MoneyType

if TYPE_CHECKING:
    from app.models.investment import Investment
    from app.models.user import User


class Transaction(Base):
    """Transaction model - ledger entries."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            'amount >= 0', name='check_transaction_amount_non_negative'
        ),
        CheckConstraint(
            'fee >= 0', name='check_transaction_fee_non_negative'
        ),
        CheckConstraint(
            'fee <= amount', name='check_transaction_fee_not_exceeds_amount'
        ),
        Index('idx_transaction_user_type_status', 'user_id', 'type', 'status'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    type: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # deposit, withdrawal, investment, return, bonus, transfer_out, transfer_in
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    fee: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    net_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=TransactionStatus.PENDING.value,
        nullable=False,
        index=True
    )
    method: Mapped[str] = mapped_column(String(20), nullable=False)

    reference: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False
    )
    wallet_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    investment_id: Mapped[int | None] = mapped_column(
        ForeignKey("investments.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Admin processing audit
    processed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(
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

    user: Mapped["User"] = relationship(
        "User",
        back_populates="transactions",
        foreign_keys=[user_id],
    )
    investment: Mapped["Investment | None"] = relationship("Investment")

    @property
    def is_pending(self) -> bool:
        """Only pending entries may still be processed."""
        return self.status == TransactionStatus.PENDING.value

    @property
    def is_withdrawal(self) -> bool:
        """Check withdrawal type."""
        return self.type == TransactionType.WITHDRAWAL.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount={self.amount}, status={self.status})>"
        )
