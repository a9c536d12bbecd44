"""
Investment accrual task.

Periodic revaluation of all pending and active investments, with
settlement of the ones that reached their end date. Scheduled by
jobs/scheduler.py every ACCRUAL_INTERVAL_HOURS and once at startup.
"""

from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.operational_constants import (
    ACCRUAL_LOCK_KEY,
    BLOCKING_TIMEOUT_DEFAULT,
    LOCK_TIMEOUT_LONG,
)
from app.config.settings import settings
from app.services.investment.accrual_processor import (
    AccrualPassResult,
    InvestmentAccrualProcessor,
)
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.distributed_lock import DistributedLock

# Most recent pass, exposed on the health endpoint
last_run_at: datetime | None = None
last_result: AccrualPassResult | None = None


async def run_investment_accrual(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    lock: DistributedLock | None = None,
    notifier: NotificationService | None = None,
    now: datetime | None = None,
) -> AccrualPassResult | None:
    """
    Run one accrual pass unless another one is in progress.

    Args:
        session_maker: Session factory (application default if None)
        lock: Lock guarding against overlapping passes
        notifier: Notification collaborator
        now: Valuation moment for the whole pass

    Returns:
        Pass counters, or None if skipped (emergency stop or lock busy)
    """
    global last_run_at, last_result

    if settings.emergency_stop_accrual:
        logger.warning("Investment accrual skipped: emergency stop is active")
        return None

    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker

    lock = lock or DistributedLock()

    async with lock.lock(
        ACCRUAL_LOCK_KEY,
        timeout=LOCK_TIMEOUT_LONG,
        blocking_timeout=BLOCKING_TIMEOUT_DEFAULT,
    ) as acquired:
        if not acquired:
            logger.info("Investment accrual already running, skipping this run")
            return None

        logger.info("Starting investment accrual pass")
        async with session_maker() as session:
            processor = InvestmentAccrualProcessor(session, notifier)
            result = await processor.run_accrual_pass(now or utc_now())

    last_run_at = utc_now()
    last_result = result

    if result.failed:
        logger.warning(
            f"Investment accrual finished with {result.failed} failures",
            extra={"failed_ids": result.failed_ids},
        )
    return result
