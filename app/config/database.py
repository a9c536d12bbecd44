"""
Database configuration.

Async SQLAlchemy engine and session factory shared by services and tasks.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config.settings import settings


def create_engine():
    """Create async engine from settings."""
    kwargs = {"echo": settings.database_echo}
    if settings.database_url.startswith("postgresql"):
        kwargs.update(pool_size=10, max_overflow=20, pool_pre_ping=True)
    return create_async_engine(settings.database_url, **kwargs)


async_engine = create_engine()

async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)
