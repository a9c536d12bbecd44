"""
Exception types for service-layer failures.

Callers map these to their own responses; services never return
error strings for money movements.
"""

from sqlalchemy.exc import OperationalError


class ServiceError(Exception):
    """Base class for expected service failures."""

    error_code = "SERVICE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Account, package, investment or transaction is missing."""

    error_code = "NOT_FOUND"


class ValidationError(ServiceError):
    """Input violates a business rule (bounds, target, state)."""

    error_code = "VALIDATION_FAILED"


class InsufficientBalanceError(ValidationError):
    """Debit would take the balance below zero."""

    error_code = "INSUFFICIENT_BALANCE"

    def __init__(self, message: str = "Insufficient balance") -> None:
        super().__init__(message)


class ConflictError(ServiceError):
    """Entity was already processed and cannot change again."""

    error_code = "CONFLICT"


class TransientError(ServiceError):
    """Store unavailable or lock not obtained; safe to retry."""

    error_code = "TRANSIENT"


# Exception categories based on handling strategy

# Must log but can continue - the scheduler skips the item
MUST_LOG = (
    OperationalError,
    TransientError,
)

# Must raise - validation issues surface to the caller
MUST_RAISE = (
    NotFoundError,
    ValidationError,
    ConflictError,
)


def must_log(exc: Exception) -> bool:
    """
    Check if exception must be logged and skipped.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a transient store failure
    """
    return isinstance(exc, MUST_LOG)


def must_raise(exc: Exception) -> bool:
    """
    Check if exception must be surfaced to the caller.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a business rule failure
    """
    return isinstance(exc, MUST_RAISE)


def is_lock_conflict(exc: OperationalError) -> bool:
    """Check whether a DB error is a NOWAIT row lock conflict."""
    error_str = str(exc).lower()
    return "could not obtain lock" in error_str or "lock_not_available" in error_str
