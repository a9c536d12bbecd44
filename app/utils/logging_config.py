"""
Logging configuration.

Configures loguru sinks for long-running processes.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(process_name: str = "scheduler") -> None:
    """
    Configure stderr and rotating file sinks.

    Args:
        process_name: Name shown in the startup line
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
    )

    logger.info(f"Starting investment {process_name} ({settings.environment})...")
