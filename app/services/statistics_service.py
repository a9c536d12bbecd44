"""
Statistics service.

Typed aggregations over investments, the ledger and accounts for user
dashboards and the admin overview.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import InvestmentStatus, TransactionStatus, TransactionType
from app.repositories.investment_repository import (
    InvestmentRepository,
    InvestmentStatusTotals,
)
from app.repositories.transaction_repository import (
    TransactionGroupTotals,
    TransactionRepository,
)
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, log_operation
from app.utils.datetime_utils import start_of_month, utc_now


@dataclass(frozen=True)
class InvestmentStats:
    """Investment totals for one user (or everyone)."""

    total_investments: int
    total_invested: Decimal
    total_current_value: Decimal
    total_returns: Decimal
    active_investments: int
    by_status: dict[str, InvestmentStatusTotals] = field(default_factory=dict)


@dataclass(frozen=True)
class TransactionStats:
    """Ledger totals for one user."""

    total_deposits: Decimal
    total_withdrawals: Decimal
    total_returns: Decimal
    total_transactions: int
    groups: list[TransactionGroupTotals] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardStats:
    """Admin overview figures."""

    total_users: int
    active_users: int
    new_users_this_month: int
    total_investments: int
    active_investments: int
    total_invested: Decimal
    pending_transactions: int
    total_deposits: Decimal
    total_withdrawals: Decimal


class StatisticsService(BaseService):
    """Read-only aggregate queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize statistics service."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.investment_repo = InvestmentRepository(session)
        self.transaction_repo = TransactionRepository(session)

    async def get_investment_stats(
        self, user_id: int | None = None
    ) -> InvestmentStats:
        """
        Investment totals grouped by status.

        Args:
            user_id: Restrict to one user (all users if None)

        Returns:
            InvestmentStats
        """
        groups = await self.investment_repo.totals_by_status(user_id)
        by_status = {group.status: group for group in groups}
        active = by_status.get(InvestmentStatus.ACTIVE.value)

        return InvestmentStats(
            total_investments=sum(g.count for g in groups),
            total_invested=sum((g.total_amount for g in groups), Decimal("0")),
            total_current_value=sum(
                (g.total_current_value for g in groups), Decimal("0")
            ),
            total_returns=sum((g.total_returns for g in groups), Decimal("0")),
            active_investments=active.count if active else 0,
            by_status=by_status,
        )

    async def get_transaction_stats(self, user_id: int) -> TransactionStats:
        """
        Ledger totals for one user.

        Deposit, withdrawal and return totals count approved entries only.
        """
        groups = await self.transaction_repo.totals_by_type_and_status(user_id)

        def approved_sum(type_: TransactionType) -> Decimal:
            return sum(
                (
                    g.total_amount
                    for g in groups
                    if g.type == type_.value
                    and g.status == TransactionStatus.APPROVED.value
                ),
                Decimal("0"),
            )

        return TransactionStats(
            total_deposits=approved_sum(TransactionType.DEPOSIT),
            total_withdrawals=approved_sum(TransactionType.WITHDRAWAL),
            total_returns=approved_sum(TransactionType.RETURN),
            total_transactions=sum(g.count for g in groups),
            groups=groups,
        )

    @log_operation
    async def get_dashboard_stats(
        self, now: datetime | None = None
    ) -> DashboardStats:
        """Platform-wide figures for the admin dashboard."""
        now = now or utc_now()

        return DashboardStats(
            total_users=await self.user_repo.count(),
            active_users=await self.user_repo.count_active(),
            new_users_this_month=await self.user_repo.count_created_since(
                start_of_month(now)
            ),
            total_investments=await self.investment_repo.count(),
            active_investments=await self.investment_repo.count_by_status(
                InvestmentStatus.ACTIVE.value
            ),
            total_invested=await self.investment_repo.total_invested(),
            pending_transactions=await self.transaction_repo.count(
                status=TransactionStatus.PENDING.value
            ),
            total_deposits=await self.transaction_repo.sum_amount(
                TransactionType.DEPOSIT, TransactionStatus.APPROVED
            ),
            total_withdrawals=await self.transaction_repo.sum_amount(
                TransactionType.WITHDRAWAL, TransactionStatus.APPROVED
            ),
        )
