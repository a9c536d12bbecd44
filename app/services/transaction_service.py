"""
Transaction service.

User-submitted deposit and withdrawal requests and ledger reads.
Neither request moves money at submission; an administrator's
approval does (see AdminService.process_transaction).
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import calculate_withdrawal_fee
from app.models.enums import TransactionMethod, TransactionStatus, TransactionType
from app.models.transaction import Transaction
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.balance_manager import BalanceManager
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from app.utils.security import mask_address
from app.validators import normalize_pagination, require_positive_amount, sanitize_text

_METHODS = {method.value for method in TransactionMethod}


def _validate_method(method: str) -> str:
    method = (method or "").strip().lower()
    if method not in _METHODS or method == TransactionMethod.INTERNAL.value:
        raise ValidationError(f"Unsupported payment method: {method or 'empty'}")
    return method


class TransactionService(BaseService):
    """Deposit/withdrawal requests and ledger queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction service."""
        super().__init__(session)
        self.transaction_repo = TransactionRepository(session)
        self.user_repo = UserRepository(session)
        self.balance_manager = BalanceManager(session)

    @transaction
    async def create_deposit(
        self,
        user_id: int,
        amount: Decimal | str,
        method: str,
        wallet_address: str | None = None,
        description: str | None = None,
    ) -> Transaction:
        """
        Submit a deposit request.

        Created pending; the balance is credited only on approval.

        Args:
            user_id: Depositing account
            amount: Deposit amount
            method: Payment method (crypto, paypal, bank_transfer, ...)
            wallet_address: Source address for crypto deposits
            description: Optional note

        Returns:
            Pending deposit entry
        """
        amount = require_positive_amount(amount)
        method = _validate_method(method)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        entry = await self.transaction_repo.create_entry(
            user_id=user.id,
            type=TransactionType.DEPOSIT,
            amount=amount,
            status=TransactionStatus.PENDING,
            method=method,
            wallet_address=wallet_address,
            description=sanitize_text(description) or f"Deposit via {method}",
        )

        self.logger.info(
            "Deposit request created",
            extra={
                "transaction_id": entry.id,
                "user_id": user.id,
                "amount": str(amount),
                "method": method,
            },
        )
        return entry

    @transaction
    async def create_withdrawal(
        self,
        user_id: int,
        amount: Decimal | str,
        method: str,
        wallet_address: str | None = None,
        description: str | None = None,
    ) -> Transaction:
        """
        Submit a withdrawal request.

        The balance is not debited until approval, but the request is
        rejected when it does not fit in the balance left after the
        user's other pending withdrawals.

        Args:
            user_id: Withdrawing account
            amount: Gross amount (fee is withheld from it)
            method: Payout method
            wallet_address: Destination address (defaults to the
                account's crypto wallet)
            description: Optional note

        Returns:
            Pending withdrawal entry with fee and net amount

        Raises:
            InsufficientBalanceError: Amount exceeds available balance
        """
        amount = require_positive_amount(amount)
        method = _validate_method(method)

        # Lock serializes concurrent requests against the pending total
        user = await self.balance_manager.lock_account(
            user_id, require_active=True
        )

        pending_total = await self.transaction_repo.get_pending_withdrawals_total(
            user.id
        )
        available = user.balance - pending_total
        if available < amount:
            self.logger.warning(
                "Withdrawal exceeds available balance",
                extra={
                    "user_id": user.id,
                    "balance": str(user.balance),
                    "pending": str(pending_total),
                    "requested": str(amount),
                },
            )
            raise InsufficientBalanceError()

        fee, net_amount = calculate_withdrawal_fee(amount)
        destination = wallet_address or user.crypto_wallet

        entry = await self.transaction_repo.create_entry(
            user_id=user.id,
            type=TransactionType.WITHDRAWAL,
            amount=amount,
            fee=fee,
            status=TransactionStatus.PENDING,
            method=method,
            wallet_address=destination,
            description=sanitize_text(description) or f"Withdrawal via {method}",
        )

        self.logger.info(
            "Withdrawal request created",
            extra={
                "transaction_id": entry.id,
                "user_id": user.id,
                "amount": str(amount),
                "fee": str(fee),
                "net_amount": str(net_amount),
                "wallet": mask_address(destination),
            },
        )
        return entry

    async def get_transaction(
        self, transaction_id: int, user_id: int | None = None
    ) -> Transaction:
        """
        Get one ledger entry.

        Args:
            transaction_id: Entry ID
            user_id: Owner check (skipped if None)

        Raises:
            NotFoundError: Missing, or owned by another user
        """
        entry = await self.transaction_repo.get_by_id(transaction_id)
        if entry is None or (user_id is not None and entry.user_id != user_id):
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return entry

    async def list_user_transactions(
        self,
        user_id: int,
        page: int = 1,
        per_page: int = 10,
        type: str | None = None,
        status: str | None = None,
    ) -> tuple[list[Transaction], int]:
        """List a user's ledger entries, newest first."""
        page, per_page = normalize_pagination(page, per_page)
        return await self.transaction_repo.find_paginated(
            page, per_page, user_id=user_id, type=type, status=status
        )

    async def list_transactions(
        self,
        page: int = 1,
        per_page: int = 10,
        type: str | None = None,
        status: str | None = None,
    ) -> tuple[list[Transaction], int]:
        """List all ledger entries for administration, newest first."""
        page, per_page = normalize_pagination(page, per_page)
        return await self.transaction_repo.find_paginated(
            page, per_page, type=type, status=status
        )
