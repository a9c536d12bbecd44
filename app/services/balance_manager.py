"""
Balance manager.

Locked debit/credit primitives shared by every money-moving service.
Callers lock the account, mutate it here, append the ledger entry and
commit, all inside one database transaction.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.utils.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)


class BalanceManager:
    """Applies balance mutations to row-locked accounts."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize balance manager.

        Args:
            session: Database session
        """
        self.session = session
        self.user_repo = UserRepository(session)

    async def lock_account(
        self, user_id: int, require_active: bool = False
    ) -> User:
        """
        Load an account with a row lock held until commit/rollback.

        Args:
            user_id: Account ID
            require_active: Reject deactivated accounts

        Returns:
            Locked user

        Raises:
            NotFoundError: Account does not exist
            ValidationError: Account is deactivated and require_active is set
        """
        user = await self.user_repo.get_for_update(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        if require_active and not user.is_active:
            raise ValidationError("Account is deactivated")
        return user

    def debit(self, user: User, amount: Decimal, reason: str) -> None:
        """
        Debit a locked account.

        Args:
            user: Account returned by lock_account
            amount: Amount to take (> 0)
            reason: Short label for the log line

        Raises:
            InsufficientBalanceError: Balance is below amount
        """
        if user.balance < amount:
            logger.warning(
                "Insufficient balance for debit",
                extra={
                    "user_id": user.id,
                    "reason": reason,
                    "available": str(user.balance),
                    "requested": str(amount),
                },
            )
            raise InsufficientBalanceError()

        balance_before = user.balance
        user.balance = balance_before - amount

        logger.info(
            f"Balance debited ({reason})",
            extra={
                "user_id": user.id,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(user.balance),
            },
        )

    def credit(self, user: User, amount: Decimal, reason: str) -> None:
        """
        Credit a locked account.

        Args:
            user: Account returned by lock_account
            amount: Amount to add (>= 0)
            reason: Short label for the log line
        """
        balance_before = user.balance
        user.balance = balance_before + amount

        logger.info(
            f"Balance credited ({reason})",
            extra={
                "user_id": user.id,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(user.balance),
            },
        )
