"""
Investment service.

User-facing investment creation and reads, plus administrative
lifecycle actions (approve, cancel, force revaluation).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.enums import (
    InvestmentStatus,
    TransactionMethod,
    TransactionStatus,
    TransactionType,
)
from app.models.investment import Investment
from app.repositories.investment_repository import InvestmentRepository
from app.repositories.package_repository import InvestmentPackageRepository
from app.repositories.transaction_repository import TransactionRepository
from app.services.balance_manager import BalanceManager
from app.services.base_service import BaseService, log_operation, transaction
from app.services.investment.accrual_processor import InvestmentAccrualProcessor
from app.services.investment.valuation import (
    ValuationResult,
    calculate_investment_returns,
)
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import add_days, utc_now
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError
from app.validators import normalize_pagination, require_positive_amount, sanitize_text


class InvestmentService(BaseService):
    """Investment lifecycle operations."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: NotificationService | None = None,
    ) -> None:
        """
        Initialize investment service.

        Args:
            session: Database session
            notifier: Notification collaborator
        """
        super().__init__(session)
        self.investment_repo = InvestmentRepository(session)
        self.package_repo = InvestmentPackageRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.balance_manager = BalanceManager(session)
        self.processor = InvestmentAccrualProcessor(session, notifier)

    @transaction
    async def create_investment(
        self,
        user_id: int,
        package_id: int,
        amount: Decimal | str,
        now: datetime | None = None,
    ) -> Investment:
        """
        Invest part of a user's balance in a package.

        The principal is debited immediately and an approved
        ``investment`` ledger entry is written in the same transaction.

        Args:
            user_id: Investor account ID
            package_id: Package to invest in
            amount: Principal
            now: Creation moment (defaults to current UTC time)

        Returns:
            Created investment (pending, or active with auto-activation)

        Raises:
            NotFoundError: Account or package missing
            ValidationError: Package inactive, amount out of bounds,
                account deactivated
            InsufficientBalanceError: Balance below amount
        """
        now = now or utc_now()
        amount = require_positive_amount(amount)

        user = await self.balance_manager.lock_account(
            user_id, require_active=True
        )

        package = await self.package_repo.get_by_id(package_id)
        if package is None:
            raise NotFoundError(f"Package {package_id} not found")
        if not package.is_active:
            raise ValidationError("Package is not available for investment")
        if amount < package.min_amount or amount > package.max_amount:
            raise ValidationError(
                f"Amount must be between {package.min_amount} "
                f"and {package.max_amount}"
            )

        self.balance_manager.debit(user, amount, "investment")

        auto_activate = settings.investment_auto_activate
        returns = calculate_investment_returns(
            amount, package.roi, package.duration, 0
        )
        investment = await self.investment_repo.create(
            user_id=user.id,
            package_id=package.id,
            amount=amount,
            start_date=now,
            end_date=add_days(now, package.duration),
            current_value=amount,
            daily_return=returns.daily_return,
            total_returns=Decimal("0"),
            last_calculated=now,
            status=(
                InvestmentStatus.ACTIVE.value
                if auto_activate
                else InvestmentStatus.PENDING.value
            ),
            approved_at=now if auto_activate else None,
        )

        await self.transaction_repo.create_entry(
            user_id=user.id,
            type=TransactionType.INVESTMENT,
            amount=amount,
            status=TransactionStatus.APPROVED,
            method=TransactionMethod.INTERNAL.value,
            description=f"Investment in {package.name}",
            investment_id=investment.id,
            processed_at=now,
        )

        self.logger.info(
            "Investment created",
            extra={
                "investment_id": investment.id,
                "user_id": user.id,
                "package_id": package.id,
                "amount": str(amount),
                "status": investment.status,
            },
        )
        return investment

    async def get_user_investments(
        self,
        user_id: int,
        status: str | None = None,
        now: datetime | None = None,
    ) -> list[Investment]:
        """
        List a user's investments, revaluing each open one first.

        Args:
            user_id: Owner account ID
            status: Optional status filter (applied after revaluation)
            now: Valuation moment

        Returns:
            Investments, newest first
        """
        investments = await self.investment_repo.find_user_investments(user_id)
        for investment in investments:
            if not investment.is_terminal:
                # Reloads the row in place under lock and commits
                await self.processor.process_investment(investment.id, now)

        if status:
            return [
                investment
                for investment in investments
                if investment.status == status
            ]
        return investments

    async def get_investment(
        self,
        investment_id: int,
        user_id: int | None = None,
        now: datetime | None = None,
    ) -> Investment:
        """
        Get one investment, revaluing it first if still open.

        Args:
            investment_id: Investment ID
            user_id: Owner check (skipped if None)
            now: Valuation moment

        Returns:
            Investment

        Raises:
            NotFoundError: Missing, or owned by another user
        """
        investment = await self.investment_repo.get_by_id(investment_id)
        if investment is None or (
            user_id is not None and investment.user_id != user_id
        ):
            raise NotFoundError(f"Investment {investment_id} not found")

        if not investment.is_terminal:
            await self.processor.process_investment(investment.id, now)
        return investment

    @log_operation
    async def revalue_investment(
        self, investment_id: int, now: datetime | None = None
    ) -> ValuationResult:
        """
        Force a valuation pass on one investment (admin).

        Settles it if the pass completes it.
        """
        return await self.processor.process_investment(investment_id, now)

    @transaction
    async def approve_investment(
        self,
        investment_id: int,
        admin_id: int,
        now: datetime | None = None,
    ) -> Investment:
        """
        Move a pending investment to active.

        Dates are left as set at creation; accrual counts from start_date.

        Args:
            investment_id: Investment ID
            admin_id: Approving administrator
            now: Approval moment

        Returns:
            Updated investment

        Raises:
            NotFoundError: Investment missing
            ConflictError: Investment is not pending
            ValidationError: Acting user is not an administrator
        """
        now = now or utc_now()
        await self._require_admin(admin_id)
        investment = await self.investment_repo.get_for_update(investment_id)
        if investment is None:
            raise NotFoundError(f"Investment {investment_id} not found")
        if investment.status != InvestmentStatus.PENDING.value:
            raise ConflictError(
                f"Investment {investment_id} is {investment.status}, not pending"
            )

        investment.status = InvestmentStatus.ACTIVE.value
        investment.approved_by = admin_id
        investment.approved_at = now
        await self.session.flush()

        self.logger.info(
            "Investment approved",
            extra={"investment_id": investment_id, "admin_id": admin_id},
        )
        return investment

    @transaction
    async def cancel_investment(
        self,
        investment_id: int,
        admin_id: int,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Investment:
        """
        Cancel an open investment and refund its principal.

        The refund is a ``return`` ledger entry for the principal only;
        accrued returns are forfeited.

        Args:
            investment_id: Investment ID
            admin_id: Cancelling administrator
            reason: Note stored on the refund entry
            now: Cancellation moment

        Returns:
            Cancelled investment

        Raises:
            NotFoundError: Investment missing
            ConflictError: Investment already completed or cancelled
            ValidationError: Acting user is not an administrator
        """
        now = now or utc_now()
        await self._require_admin(admin_id)
        investment = await self.investment_repo.get_with_package(
            investment_id, for_update=True
        )
        if investment is None:
            raise NotFoundError(f"Investment {investment_id} not found")
        if investment.is_terminal:
            raise ConflictError(
                f"Investment {investment_id} is already {investment.status}"
            )

        user = await self.balance_manager.lock_account(investment.user_id)
        self.balance_manager.credit(
            user, investment.amount, "investment refund"
        )

        investment.status = InvestmentStatus.CANCELLED.value
        investment.cancelled_at = now

        await self.transaction_repo.create_entry(
            user_id=user.id,
            type=TransactionType.RETURN,
            amount=investment.amount,
            status=TransactionStatus.APPROVED,
            method=TransactionMethod.INTERNAL.value,
            description=(
                f"Refund for cancelled investment in {investment.package.name}"
            ),
            admin_notes=sanitize_text(reason),
            investment_id=investment.id,
            processed_by=admin_id,
            processed_at=now,
        )

        self.logger.warning(
            "Investment cancelled by admin",
            extra={
                "investment_id": investment_id,
                "admin_id": admin_id,
                "refund": str(investment.amount),
            },
        )
        return investment

    async def list_investments(
        self,
        page: int = 1,
        per_page: int = 10,
        status: str | None = None,
        user_id: int | None = None,
    ) -> tuple[list[Investment], int]:
        """
        List all investments for administration.

        Args:
            page: Page number (1-indexed)
            per_page: Items per page
            status: Optional status filter
            user_id: Optional owner filter

        Returns:
            Tuple of (investments, total_count)
        """
        page, per_page = normalize_pagination(page, per_page)
        return await self.investment_repo.find_paginated(
            page, per_page, status=status, user_id=user_id
        )
