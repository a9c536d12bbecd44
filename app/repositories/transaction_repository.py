"""
Transaction repository.

Data access layer for the append-only ledger.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import TransactionStatus, TransactionType
from app.models.transaction import Transaction
from app.repositories.base import BaseRepository
from app.utils.identifiers import generate_transaction_reference


@dataclass(frozen=True)
class TransactionGroupTotals:
    """Aggregated figures for one (type, status) pair."""

    type: str
    status: str
    count: int
    total_amount: Decimal
    total_fee: Decimal


class TransactionRepository(BaseRepository[Transaction]):
    """Ledger queries. Entries are only ever inserted or status-updated."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def create_entry(
        self,
        user_id: int,
        type: TransactionType,
        amount: Decimal,
        status: TransactionStatus,
        method: str,
        fee: Decimal = Decimal("0"),
        **data: Any,
    ) -> Transaction:
        """
        Append a ledger entry with a fresh reference.

        Args:
            user_id: Owning account
            type: Entry type
            amount: Gross amount
            status: Initial status
            method: Payment method value
            fee: Fee withheld (withdrawals only)
            **data: Optional columns (description, investment_id, ...)

        Returns:
            Created entry (flushed, not committed)
        """
        return await self.create(
            user_id=user_id,
            type=type.value,
            amount=amount,
            fee=fee,
            net_amount=amount - fee,
            status=status.value,
            method=method,
            reference=generate_transaction_reference(type.value),
            **data,
        )

    async def get_by_reference(self, reference: str) -> Transaction | None:
        """Get entry by its unique reference."""
        return await self.get_by(reference=reference)

    async def get_pending_withdrawals_total(self, user_id: int) -> Decimal:
        """
        Sum of the user's withdrawal requests still awaiting approval.

        Args:
            user_id: Account ID

        Returns:
            Total gross amount of pending withdrawals
        """
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.user_id == user_id,
            Transaction.type == TransactionType.WITHDRAWAL.value,
            Transaction.status == TransactionStatus.PENDING.value,
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def sum_amount(
        self,
        type: TransactionType,
        status: TransactionStatus,
        user_id: int | None = None,
    ) -> Decimal:
        """
        Sum amounts of entries with a given type and status.

        Args:
            type: Entry type
            status: Entry status
            user_id: Restrict to one account (all if None)

        Returns:
            Sum of amount
        """
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.type == type.value,
            Transaction.status == status.value,
        )
        if user_id is not None:
            stmt = stmt.where(Transaction.user_id == user_id)

        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def totals_by_type_and_status(
        self, user_id: int | None = None
    ) -> list[TransactionGroupTotals]:
        """
        Group entries by (type, status) with count and sums.

        Args:
            user_id: Restrict to one account (all if None)

        Returns:
            One entry per (type, status) pair present
        """
        stmt = select(
            Transaction.type,
            Transaction.status,
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.amount), 0),
            func.coalesce(func.sum(Transaction.fee), 0),
        ).group_by(Transaction.type, Transaction.status)
        if user_id is not None:
            stmt = stmt.where(Transaction.user_id == user_id)

        result = await self.session.execute(stmt)
        return [
            TransactionGroupTotals(
                type=type_,
                status=status,
                count=count,
                total_amount=Decimal(str(amount)),
                total_fee=Decimal(str(fee)),
            )
            for type_, status, count, amount, fee in result.all()
        ]

    async def find_for_investment(
        self, investment_id: int, type: TransactionType | None = None
    ) -> list[Transaction]:
        """Entries linked to an investment, oldest first."""
        stmt = select(Transaction).where(
            Transaction.investment_id == investment_id
        )
        if type is not None:
            stmt = stmt.where(Transaction.type == type.value)
        stmt = stmt.order_by(Transaction.id.asc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())
