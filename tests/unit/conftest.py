"""
Shared fixtures for unit tests.

This module provides in-memory (unsaved) model instances for the
valuation engine tests:
- A 10% / 5 day package
- A 1000 principal investment started at a fixed moment
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from app.models import Investment, InvestmentPackage, InvestmentStatus
from app.utils.datetime_utils import add_days


@pytest.fixture
def start() -> datetime:
    """Investment start moment."""
    return datetime(2026, 9, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def package() -> InvestmentPackage:
    """
    Package with roi=10, duration=5.

    Returns:
        InvestmentPackage: Unsaved package
    """
    return InvestmentPackage(
        id=1,
        name="Professional Package",
        min_amount=Decimal("100"),
        max_amount=Decimal("10000"),
        duration=5,
        roi=Decimal("10"),
        is_active=True,
    )


@pytest.fixture
def investment(package, start) -> Investment:
    """
    Active investment of 1000 in the package.

    Default values:
    - amount: 1000
    - current_value: 1000 (no accrual yet)
    - end_date: start + 5 days

    Returns:
        Investment: Unsaved investment
    """
    return Investment(
        id=1,
        user_id=1,
        package_id=package.id,
        amount=Decimal("1000"),
        start_date=start,
        end_date=add_days(start, package.duration),
        current_value=Decimal("1000"),
        daily_return=Decimal("0"),
        total_returns=Decimal("0"),
        last_calculated=start,
        status=InvestmentStatus.ACTIVE.value,
    )
