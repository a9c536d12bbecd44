"""
Investment accrual processor.

Revalues investments and settles completed ones. The status check, the
balance credit and the ``return`` ledger entry for an investment happen
under the investment's row lock in a single database transaction, so a
completion is settled exactly once no matter how many scheduler passes
or reads race on it.
"""

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    InvestmentStatus,
    TransactionMethod,
    TransactionStatus,
    TransactionType,
)
from app.repositories.investment_repository import InvestmentRepository
from app.repositories.transaction_repository import TransactionRepository
from app.services.balance_manager import BalanceManager
from app.services.investment.valuation import ValuationResult, valuate
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import NotFoundError, must_log


@dataclass
class AccrualPassResult:
    """Counters reported by one accrual pass."""

    examined: int = 0
    completed: int = 0
    failed: int = 0
    failed_ids: list[int] = field(default_factory=list)


class InvestmentAccrualProcessor:
    """Runs valuation and settlement for one or many investments."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: NotificationService | None = None,
    ) -> None:
        """
        Initialize accrual processor.

        Args:
            session: Database session
            notifier: Notification collaborator (default service if None)
        """
        self.session = session
        self.investment_repo = InvestmentRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.balance_manager = BalanceManager(session)
        self.notifier = notifier or NotificationService()

    async def settle(
        self, investment_id: int, now: datetime | None = None
    ) -> ValuationResult:
        """
        Lock, revalue and, on completion, settle one investment.

        Flushes but does not commit; the caller owns the transaction.

        Args:
            investment_id: Investment ID
            now: Valuation moment (defaults to current UTC time)

        Returns:
            ValuationResult of the pass

        Raises:
            NotFoundError: Investment does not exist
        """
        now = now or utc_now()

        investment = await self.investment_repo.get_with_package(
            investment_id, for_update=True
        )
        if investment is None:
            raise NotFoundError(f"Investment {investment_id} not found")

        package = investment.package
        result = valuate(investment, package, now)

        if result.completed_now:
            # Status was read under the row lock, so only one caller gets here
            user = await self.balance_manager.lock_account(investment.user_id)
            self.balance_manager.credit(
                user, investment.current_value, "investment return"
            )
            investment.completed_at = now

            await self.transaction_repo.create_entry(
                user_id=user.id,
                type=TransactionType.RETURN,
                amount=investment.current_value,
                status=TransactionStatus.APPROVED,
                method=TransactionMethod.INTERNAL.value,
                description=f"Investment return from {package.name}",
                investment_id=investment.id,
                processed_at=now,
            )

            logger.info(
                "Investment completed and settled",
                extra={
                    "investment_id": investment.id,
                    "user_id": user.id,
                    "package": package.name,
                    "amount": str(investment.amount),
                    "payout": str(investment.current_value),
                },
            )

        await self.session.flush()
        return result

    async def process_investment(
        self, investment_id: int, now: datetime | None = None
    ) -> ValuationResult:
        """
        Settle one investment in its own transaction.

        Commits on success, rolls back and re-raises on failure. A
        completion notification is sent after the commit.

        Args:
            investment_id: Investment ID
            now: Valuation moment

        Returns:
            ValuationResult of the pass
        """
        try:
            result = await self.settle(investment_id, now)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        if result.completed_now:
            await self._notify_completion(investment_id)

        return result

    async def run_accrual_pass(
        self, now: datetime | None = None
    ) -> AccrualPassResult:
        """
        Revalue every pending and active investment.

        Each investment is processed in its own transaction; a failure
        is logged and skipped so it cannot block the rest of the pass.

        Args:
            now: Valuation moment shared by the whole pass

        Returns:
            AccrualPassResult with examined/completed/failed counts
        """
        now = now or utc_now()
        pass_result = AccrualPassResult()

        investment_ids = await self.investment_repo.get_non_terminal_ids()
        # Release the snapshot before per-item transactions start
        await self.session.commit()

        for investment_id in investment_ids:
            pass_result.examined += 1
            try:
                result = await self.process_investment(investment_id, now)
            except Exception as e:
                pass_result.failed += 1
                pass_result.failed_ids.append(investment_id)
                if must_log(e):
                    logger.warning(
                        f"Skipping investment {investment_id}: store unavailable",
                        extra={"investment_id": investment_id, "error": str(e)},
                    )
                else:
                    logger.opt(exception=e).error(
                        f"Accrual failed for investment {investment_id}"
                    )
                continue

            if result.completed_now:
                pass_result.completed += 1

        logger.info(
            f"Accrual pass finished: examined={pass_result.examined}, "
            f"completed={pass_result.completed}, failed={pass_result.failed}"
        )
        return pass_result

    async def _notify_completion(self, investment_id: int) -> None:
        # Settlement is already committed; a failure here only loses the email
        try:
            investment = await self.investment_repo.get_with_package(
                investment_id
            )
            if investment is None:
                return
            await self.notifier.notify_investment_completed(
                user_id=investment.user_id,
                package_name=investment.package.name,
                amount=investment.amount,
                payout=investment.current_value,
            )
        except Exception as e:
            logger.warning(
                f"Completion notification skipped for investment {investment_id}",
                extra={"investment_id": investment_id, "error": str(e)},
            )
