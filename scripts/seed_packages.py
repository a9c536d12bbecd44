#!/usr/bin/env python3
"""Seed the default investment package catalog.

Skips packages whose name already exists, so it is safe to re-run.
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402

from app.config.database import async_engine, async_session_maker  # noqa: E402
from app.repositories.package_repository import (  # noqa: E402
    InvestmentPackageRepository,
)
from app.services.package_service import PackageService  # noqa: E402

logger.remove()
logger.add(sys.stderr, level="INFO")

DEFAULT_PACKAGES = [
    {
        "name": "Starter Package",
        "description": (
            "Perfect for beginners looking to start their investment "
            "journey with guaranteed daily returns."
        ),
        "min_amount": Decimal("100"),
        "max_amount": Decimal("1999"),
        "duration": 5,
        "roi": Decimal("5"),
        "risk_level": "low",
        "features": ["24/7 Support", "1% Daily Returns", "Low Risk", "5 Day Duration"],
    },
    {
        "name": "Professional Package",
        "description": (
            "For experienced investors seeking higher daily returns with "
            "professional portfolio management."
        ),
        "min_amount": Decimal("2000"),
        "max_amount": Decimal("5999"),
        "duration": 5,
        "roi": Decimal("10"),
        "risk_level": "medium",
        "features": [
            "Priority Support",
            "2% Daily Returns",
            "Portfolio Management",
            "5 Day Duration",
        ],
    },
    {
        "name": "Advance Package",
        "description": (
            "Advanced investment package with premium returns for serious investors."
        ),
        "min_amount": Decimal("6000"),
        "max_amount": Decimal("9999"),
        "duration": 5,
        "roi": Decimal("15"),
        "risk_level": "medium",
        "features": [
            "VIP Support",
            "3% Daily Returns",
            "Advanced Analytics",
            "5 Day Duration",
        ],
    },
    {
        "name": "Elite Package",
        "description": (
            "Premium package with maximum daily returns for VIP investors "
            "with exclusive benefits."
        ),
        "min_amount": Decimal("10000"),
        "max_amount": Decimal("49999"),
        "duration": 5,
        "roi": Decimal("20"),
        "risk_level": "high",
        "features": [
            "VIP Support",
            "4% Daily Returns",
            "Personal Account Manager",
            "Exclusive Insights",
            "5 Day Duration",
        ],
    },
]


async def seed_packages() -> None:
    """Create missing default packages."""
    async with async_session_maker() as session:
        existing = {
            package.name
            for package in await InvestmentPackageRepository(session).list_packages()
        }
        service = PackageService(session)

        created = 0
        for data in DEFAULT_PACKAGES:
            if data["name"] in existing:
                logger.info(f"Package exists, skipping: {data['name']}")
                continue
            await service.create_package(**data)
            created += 1

    await async_engine.dispose()
    logger.success(f"Seeded {created} package(s)")


if __name__ == "__main__":
    asyncio.run(seed_packages())
