"""
Health check server for the accrual scheduler.

Exposes /health, /readiness and /liveness for process supervisors.
"""

import asyncio

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from app.tasks import investment_accrual_task

# Scheduler reference for health checks
_scheduler: AsyncIOScheduler | None = None


def set_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """
    Register the scheduler instance to report on.

    Args:
        scheduler: Running AsyncIOScheduler (None to unregister)
    """
    global _scheduler
    _scheduler = scheduler
    logger.info("Scheduler registered for health checks")


def _last_accrual_info() -> dict | None:
    result = investment_accrual_task.last_result
    if result is None:
        return None
    last_run_at = investment_accrual_task.last_run_at
    return {
        "finished_at": last_run_at.isoformat() if last_run_at else None,
        "examined": result.examined,
        "completed": result.completed,
        "failed": result.failed,
    }


async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with scheduler status, jobs and last accrual pass
    """
    if _scheduler is None:
        return web.json_response(
            {
                "status": "unhealthy",
                "error": "Scheduler not initialized",
            },
            status=503,
        )

    is_running = _scheduler.running
    jobs = [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": (
                job.next_run_time.isoformat() if job.next_run_time else None
            ),
        }
        for job in _scheduler.get_jobs()
    ]

    return web.json_response(
        {
            "status": "healthy" if is_running else "stopped",
            "scheduler_running": is_running,
            "jobs_count": len(jobs),
            "jobs": jobs,
            "last_accrual": _last_accrual_info(),
        },
        status=200 if is_running else 503,
    )


async def readiness_handler(request: web.Request) -> web.Response:
    """Ready once the scheduler is running."""
    if _scheduler is None or not _scheduler.running:
        return web.json_response(
            {"status": "not_ready", "ready": False},
            status=503,
        )

    return web.json_response({"status": "ready", "ready": True})


async def liveness_handler(request: web.Request) -> web.Response:
    """Process is alive."""
    return web.json_response({"status": "alive", "alive": True})


def create_health_app() -> web.Application:
    """Build the aiohttp application with health routes."""
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    host: str = "0.0.0.0",
    port: int = 8081,
) -> web.AppRunner:
    """
    Start health check server.

    Args:
        host: Host to bind to
        port: Port to bind to

    Returns:
        AppRunner for cleanup
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Health check server started on {host}:{port}")
    return runner


async def stop_health_server(
    runner: web.AppRunner,
    timeout: int = 5,
) -> None:
    """
    Stop health check server gracefully.

    Args:
        runner: AppRunner to cleanup
        timeout: Maximum time to wait for cleanup in seconds
    """
    logger.info("Stopping health check server...")
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        logger.info("Health check server stopped")
    except TimeoutError:
        logger.warning(f"Health check server cleanup timed out after {timeout}s")
