"""Pytest configuration and shared fixtures for all tests."""

import itertools
import os
import sys
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

# Minimal environment for Settings; must be set before app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("REDIS_HOST", "localhost")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.models import (  # noqa: E402
    Base,
    Investment,
    InvestmentPackage,
    InvestmentStatus,
    User,
    UserRole,
)
from app.services.notification_service import NotificationService  # noqa: E402
from app.utils.datetime_utils import add_days  # noqa: E402


@pytest.fixture
def now() -> datetime:
    """Fixed 'current' moment used by service calls."""
    return datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """File-backed SQLite engine with the full schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker):
    """Database session for one test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def notifier():
    """Notification collaborator that records calls."""
    mock = AsyncMock(spec=NotificationService)
    mock.notify_investment_completed.return_value = True
    mock.notify_transaction_processed.return_value = True
    mock.notify_transfer_received.return_value = True
    return mock


@pytest.fixture
def make_user(db_session):
    """Factory creating committed users."""
    counter = itertools.count(10)

    async def _make(
        balance: str = "0",
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        n = next(counter)
        user = User(
            email=f"user{n}@example.com",
            password_hash="not-a-real-hash",
            first_name="Test",
            last_name=f"User{n}",
            role=role.value,
            wallet_id=f"MCT{n}T",
            balance=Decimal(balance),
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    """Administrator account."""
    return await make_user(role=UserRole.ADMIN)


@pytest.fixture
def make_package(db_session):
    """Factory creating committed packages."""

    async def _make(
        roi: str = "10",
        duration: int = 5,
        min_amount: str = "100",
        max_amount: str = "10000",
        is_active: bool = True,
        name: str = "Professional Package",
    ) -> InvestmentPackage:
        package = InvestmentPackage(
            name=name,
            description="",
            min_amount=Decimal(min_amount),
            max_amount=Decimal(max_amount),
            duration=duration,
            roi=Decimal(roi),
            is_active=is_active,
            features=[],
        )
        db_session.add(package)
        await db_session.commit()
        return package

    return _make


@pytest.fixture
def make_investment(db_session):
    """Factory creating committed investments without touching balances."""

    async def _make(
        user: User,
        package: InvestmentPackage,
        amount: str = "1000",
        start: datetime | None = None,
        status: InvestmentStatus = InvestmentStatus.ACTIVE,
    ) -> Investment:
        start = start or datetime(2026, 9, 1, tzinfo=UTC)
        investment = Investment(
            user_id=user.id,
            package_id=package.id,
            amount=Decimal(amount),
            start_date=start,
            end_date=add_days(start, package.duration),
            current_value=Decimal(amount),
            daily_return=Decimal("0"),
            total_returns=Decimal("0"),
            last_calculated=start,
            status=status.value,
        )
        db_session.add(investment)
        await db_session.commit()
        return investment

    return _make


@pytest.fixture
def mock_redis_client():
    """Mock Redis client for lock tests."""
    client = MagicMock()
    client.lock = MagicMock()
    return client
