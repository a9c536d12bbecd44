"""
Accrual scheduler process.

Runs the investment accrual pass on a fixed interval (and once at
startup) inside an AsyncIOScheduler, with a health check server.

Usage:
    python -m jobs.scheduler
"""

import asyncio
import signal
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from app.config.operational_constants import (
    ACCRUAL_JOB_ID,
    ACCRUAL_MISFIRE_GRACE_SECONDS,
)
from app.config.settings import settings
from app.tasks.investment_accrual_task import run_investment_accrual
from app.utils.datetime_utils import utc_now
from app.utils.distributed_lock import DistributedLock, create_redis_client
from app.utils.logging_config import setup_logging
from jobs.health import set_scheduler, start_health_server, stop_health_server


def create_scheduler(lock: DistributedLock | None = None) -> AsyncIOScheduler:
    """
    Build the scheduler with the accrual job registered.

    Args:
        lock: Lock shared by every accrual run

    Returns:
        Configured, not yet started scheduler
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    job_options: dict[str, Any] = {
        "id": ACCRUAL_JOB_ID,
        "name": "Investment accrual",
        "kwargs": {"lock": lock},
        "max_instances": 1,
        "coalesce": True,
        "misfire_grace_time": ACCRUAL_MISFIRE_GRACE_SECONDS,
        "replace_existing": True,
    }
    if settings.accrual_run_on_startup:
        job_options["next_run_time"] = utc_now()

    scheduler.add_job(
        run_investment_accrual,
        IntervalTrigger(hours=settings.accrual_interval_hours),
        **job_options,
    )

    logger.info(
        f"Investment accrual scheduled every {settings.accrual_interval_hours}h"
        f"{' (first run now)' if settings.accrual_run_on_startup else ''}"
    )
    return scheduler


async def main() -> None:
    """Run the scheduler until SIGINT/SIGTERM."""
    setup_logging("scheduler")

    redis_client = create_redis_client()
    lock = DistributedLock(redis_client=redis_client)

    scheduler = create_scheduler(lock)
    scheduler.start()
    set_scheduler(scheduler)

    health_runner = await start_health_server(port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=False)
        set_scheduler(None)
        await stop_health_server(health_runner)
        await redis_client.aclose()
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
