"""
Investment repository.

Data access layer for Investment model.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import NON_TERMINAL_INVESTMENT_STATUSES
from app.models.investment import Investment
from app.repositories.base import BaseRepository


@dataclass(frozen=True)
class InvestmentStatusTotals:
    """Aggregated figures for one investment status."""

    status: str
    count: int
    total_amount: Decimal
    total_current_value: Decimal
    total_returns: Decimal


class InvestmentRepository(BaseRepository[Investment]):
    """Investment repository with accrual and statistics queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize investment repository."""
        super().__init__(Investment, session)

    async def get_with_package(
        self, investment_id: int, for_update: bool = False
    ) -> Investment | None:
        """
        Get investment with its package loaded.

        Args:
            investment_id: Investment ID
            for_update: Lock the investment row until commit/rollback

        Returns:
            Investment or None
        """
        stmt = (
            select(Investment)
            .where(Investment.id == investment_id)
            .options(selectinload(Investment.package))
            .execution_options(populate_existing=True)
        )
        if for_update:
            # Only the investment row; the package is read-only here
            stmt = stmt.with_for_update(of=Investment)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_non_terminal_ids(self) -> list[int]:
        """
        Get IDs of every investment the accrual pass must look at.

        Returns:
            IDs of pending and active investments, oldest first
        """
        stmt = (
            select(Investment.id)
            .where(Investment.status.in_(NON_TERMINAL_INVESTMENT_STATUSES))
            .order_by(Investment.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_user_investments(self, user_id: int) -> list[Investment]:
        """Get a user's investments with packages, newest first."""
        stmt = select(Investment).where(Investment.user_id == user_id)
        stmt = stmt.order_by(Investment.created_at.desc(), Investment.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self, status: str) -> int:
        """Count investments in one status."""
        return await self.count(status=status)

    async def total_invested(self) -> Decimal:
        """Sum of principal over all investments."""
        stmt = select(func.coalesce(func.sum(Investment.amount), 0))
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def totals_by_status(
        self, user_id: int | None = None
    ) -> list[InvestmentStatusTotals]:
        """
        Group investments by status with count and sums.

        Args:
            user_id: Restrict to one user (all users if None)

        Returns:
            One entry per status present
        """
        stmt = select(
            Investment.status,
            func.count(Investment.id),
            func.coalesce(func.sum(Investment.amount), 0),
            func.coalesce(func.sum(Investment.current_value), 0),
            func.coalesce(func.sum(Investment.total_returns), 0),
        ).group_by(Investment.status)
        if user_id is not None:
            stmt = stmt.where(Investment.user_id == user_id)

        result = await self.session.execute(stmt)
        return [
            InvestmentStatusTotals(
                status=status,
                count=count,
                total_amount=Decimal(str(amount)),
                total_current_value=Decimal(str(current_value)),
                total_returns=Decimal(str(returns)),
            )
            for status, count, amount, current_value, returns in result.all()
        ]
