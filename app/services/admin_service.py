"""
Admin service.

Administrative money actions: approving or rejecting pending deposit
and withdrawal requests, manual balance adjustments, account
activation and the account listing.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    BalanceAdjustmentType,
    TransactionMethod,
    TransactionStatus,
    TransactionType,
)
from app.models.transaction import Transaction
from app.models.user import User
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.balance_manager import BalanceManager
from app.services.base_service import BaseService, transaction
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError
from app.validators import (
    normalize_pagination,
    require_positive_amount,
    sanitize_text,
)


@dataclass(frozen=True)
class BalanceAdjustmentResult:
    """Outcome of a manual balance adjustment."""

    user_id: int
    balance_before: Decimal
    balance_after: Decimal
    transaction_id: int | None  # None for silent adjustments


class AdminService(BaseService):
    """Administrative operations on accounts and the ledger."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: NotificationService | None = None,
    ) -> None:
        """
        Initialize admin service.

        Args:
            session: Database session
            notifier: Notification collaborator
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.balance_manager = BalanceManager(session)
        self.notifier = notifier or NotificationService()

    async def process_transaction(
        self,
        transaction_id: int,
        admin_id: int,
        approve: bool,
        admin_notes: str | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        """
        Approve or reject a pending ledger entry.

        Approving a deposit credits its amount; approving a withdrawal
        debits its gross amount (the fee stays with the platform).
        Rejection moves no money. A processed entry never changes again.

        Args:
            transaction_id: Entry ID
            admin_id: Processing administrator
            approve: True to approve, False to reject
            admin_notes: Optional note stored on the entry
            now: Processing moment

        Returns:
            Processed entry

        Raises:
            NotFoundError: Entry or admin missing
            ConflictError: Entry is no longer pending
            InsufficientBalanceError: Withdrawal no longer covered by balance
        """
        entry = await self._process_transaction(
            transaction_id, admin_id, approve, admin_notes, now
        )

        await self.notifier.notify_transaction_processed(
            user_id=entry.user_id,
            transaction_type=entry.type,
            amount=entry.amount,
            status=entry.status,
            reference=entry.reference,
        )
        return entry

    @transaction
    async def _process_transaction(
        self,
        transaction_id: int,
        admin_id: int,
        approve: bool,
        admin_notes: str | None,
        now: datetime | None,
    ) -> Transaction:
        now = now or utc_now()
        await self._require_admin(admin_id)

        entry = await self.transaction_repo.get_for_update(transaction_id)
        if entry is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        if not entry.is_pending:
            raise ConflictError(
                f"Transaction {transaction_id} was already {entry.status}"
            )

        if approve:
            if entry.type == TransactionType.DEPOSIT.value:
                user = await self.balance_manager.lock_account(entry.user_id)
                self.balance_manager.credit(user, entry.amount, "deposit approved")
            elif entry.type == TransactionType.WITHDRAWAL.value:
                user = await self.balance_manager.lock_account(entry.user_id)
                self.balance_manager.debit(
                    user, entry.amount, "withdrawal approved"
                )
            entry.status = TransactionStatus.APPROVED.value
        else:
            entry.status = TransactionStatus.REJECTED.value

        entry.processed_by = admin_id
        entry.processed_at = now
        if admin_notes:
            entry.admin_notes = sanitize_text(admin_notes)

        await self.session.flush()

        self.logger.info(
            f"Transaction {entry.status}",
            extra={
                "transaction_id": entry.id,
                "type": entry.type,
                "user_id": entry.user_id,
                "amount": str(entry.amount),
                "admin_id": admin_id,
            },
        )
        return entry

    @transaction
    async def adjust_balance(
        self,
        user_id: int,
        amount: Decimal | str,
        adjustment_type: BalanceAdjustmentType,
        admin_id: int,
        reason: str | None = None,
        silent: bool = False,
        now: datetime | None = None,
    ) -> BalanceAdjustmentResult:
        """
        Manually add to or subtract from an account balance.

        Writes an approved ledger entry (``bonus`` for add,
        ``withdrawal`` for subtract) unless ``silent`` is set. Silent
        adjustments bypass the ledger and are always logged as warnings.

        Args:
            user_id: Target account
            amount: Adjustment amount (> 0)
            adjustment_type: ADD or SUBTRACT
            admin_id: Acting administrator
            reason: Description stored on the entry
            silent: Skip the ledger entry
            now: Adjustment moment

        Returns:
            BalanceAdjustmentResult

        Raises:
            InsufficientBalanceError: Subtraction exceeds balance
        """
        now = now or utc_now()
        amount = require_positive_amount(amount)
        adjustment_type = BalanceAdjustmentType(adjustment_type)
        await self._require_admin(admin_id)

        user = await self.balance_manager.lock_account(user_id)
        balance_before = user.balance

        if adjustment_type == BalanceAdjustmentType.ADD:
            self.balance_manager.credit(user, amount, "admin adjustment")
            entry_type = TransactionType.BONUS
        else:
            self.balance_manager.debit(user, amount, "admin adjustment")
            entry_type = TransactionType.WITHDRAWAL

        transaction_id = None
        if silent:
            self.logger.warning(
                "Silent balance adjustment, no ledger entry written",
                extra={
                    "user_id": user.id,
                    "admin_id": admin_id,
                    "type": adjustment_type.value,
                    "amount": str(amount),
                    "reason": reason,
                },
            )
        else:
            entry = await self.transaction_repo.create_entry(
                user_id=user.id,
                type=entry_type,
                amount=amount,
                status=TransactionStatus.APPROVED,
                method=TransactionMethod.BANK_TRANSFER.value,
                description=(
                    sanitize_text(reason)
                    or f"Admin balance adjustment ({adjustment_type.value})"
                ),
                processed_by=admin_id,
                processed_at=now,
            )
            transaction_id = entry.id

        await self.session.flush()
        return BalanceAdjustmentResult(
            user_id=user.id,
            balance_before=balance_before,
            balance_after=user.balance,
            transaction_id=transaction_id,
        )

    @transaction
    async def set_user_status(
        self, user_id: int, is_active: bool, admin_id: int
    ) -> User:
        """
        Activate or deactivate an account.

        Deactivated accounts keep their balance but cannot invest,
        withdraw or send transfers.
        """
        await self._require_admin(admin_id)
        if user_id == admin_id and not is_active:
            raise ValidationError("Administrators cannot deactivate themselves")

        user = await self.user_repo.update(
            user_id, for_update=True, is_active=is_active
        )
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        self.logger.info(
            f"User {user_id} {'activated' if is_active else 'deactivated'}",
            extra={"user_id": user_id, "admin_id": admin_id},
        )
        return user

    async def list_users(
        self,
        search: str | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[User], int]:
        """
        List regular accounts for administration.

        Args:
            search: Case-insensitive match on first name, last name or email
            status: "active" or "inactive"; anything else is ignored
            page: Page number (1-indexed)
            per_page: Items per page

        Returns:
            Tuple of (users, total_count), newest first
        """
        page, per_page = normalize_pagination(page, per_page)
        is_active = {"active": True, "inactive": False}.get(status or "")
        return await self.user_repo.find_users(
            search=sanitize_text(search),
            is_active=is_active,
            page=page,
            per_page=per_page,
        )
