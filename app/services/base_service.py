"""
Base service class.

Provides common functionality for all service classes including session management,
logging, and the commit/rollback decorator every write path goes through.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.utils.exceptions import (
    NotFoundError,
    ServiceError,
    TransientError,
    ValidationError,
)


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Transaction helpers
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback current transaction."""
        await self.session.rollback()

    async def _require_admin(self, admin_id: int) -> User:
        """
        Load the acting user and check the admin role.

        Raises:
            NotFoundError: No such user
            ValidationError: User is not an administrator
        """
        admin = await UserRepository(self.session).get_by_id(admin_id)
        if admin is None:
            raise NotFoundError(f"Admin {admin_id} not found")
        if not admin.is_admin:
            raise ValidationError(f"User {admin_id} is not an administrator")
        return admin


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to wrap method in transaction with automatic commit/rollback.

    Commits on success, rolls back on exception. Balance changes and
    their ledger entries are flushed inside the wrapped method, so they
    become durable together or not at all.

    Store-level failures (lock timeouts, lost connections) are re-raised
    as TransientError; business failures propagate unchanged.

    Usage:
        @transaction
        async def my_service_method(self, ...):
            # Your code here
            pass

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
            return result
        except ServiceError as e:
            await self.rollback()
            self.logger.info(
                f"{func.__name__} rejected: {e.error_code}",
                extra={"function": func.__name__, "reason": e.message},
            )
            raise
        except OperationalError as e:
            await self.rollback()
            self.logger.warning(
                f"Store unavailable in {func.__name__}",
                extra={"function": func.__name__, "error": str(e)},
            )
            raise TransientError("Store temporarily unavailable") from e
        except Exception:
            await self.rollback()
            self.logger.exception(f"Transaction failed in {func.__name__}")
            raise

    return wrapper


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method entry/exit with timing.

    Usage:
        @log_operation
        async def my_service_method(self, user_id: int):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()

        self.logger.debug(
            f"Starting {func.__name__}",
            extra={
                "function": func.__name__,
                "args_count": len(args),
                "kwargs_keys": list(kwargs.keys()),
            },
        )

        try:
            result = await func(self, *args, **kwargs)
        except Exception:
            duration = time.time() - start_time
            self.logger.warning(
                f"Failed {func.__name__} after {duration:.3f}s",
                extra={"function": func.__name__, "success": False},
            )
            raise

        duration = time.time() - start_time
        self.logger.info(
            f"Completed {func.__name__}",
            extra={
                "function": func.__name__,
                "duration_seconds": round(duration, 3),
                "success": True,
            },
        )
        return result

    return wrapper
