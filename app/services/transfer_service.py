"""
Transfer service.

Peer-to-peer balance transfers addressed by wallet ID.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import TransactionMethod, TransactionStatus, TransactionType
from app.models.transaction import Transaction
from app.models.user import User
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.balance_manager import BalanceManager
from app.services.base_service import BaseService, transaction
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.identifiers import normalize_wallet_id
from app.validators import require_positive_amount, sanitize_text


@dataclass(frozen=True)
class TransferResult:
    """Both ledger sides of a transfer."""

    outgoing: Transaction
    incoming: Transaction


class TransferService(BaseService):
    """Moves balance between two accounts."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: NotificationService | None = None,
    ) -> None:
        """
        Initialize transfer service.

        Args:
            session: Database session
            notifier: Notification collaborator
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.balance_manager = BalanceManager(session)
        self.notifier = notifier or NotificationService()

    async def lookup_recipient(self, sender_id: int, wallet_id: str) -> User:
        """
        Resolve a transfer recipient by wallet ID.

        Args:
            sender_id: Account that will send
            wallet_id: Recipient wallet ID (any case)

        Returns:
            Recipient user

        Raises:
            NotFoundError: No account with that wallet ID
            ValidationError: Wallet ID belongs to the sender
        """
        recipient = await self.user_repo.get_by_wallet_id(
            normalize_wallet_id(wallet_id)
        )
        if recipient is None:
            raise NotFoundError("Recipient not found")
        if recipient.id == sender_id:
            raise ValidationError("Cannot transfer to yourself")
        return recipient

    async def transfer(
        self,
        sender_id: int,
        recipient_wallet_id: str,
        amount: Decimal | str,
        description: str | None = None,
        now: datetime | None = None,
    ) -> TransferResult:
        """
        Transfer balance to another account.

        Debit, credit and both ledger entries commit together.

        Args:
            sender_id: Sending account
            recipient_wallet_id: Recipient wallet ID
            amount: Amount to move (> 0)
            description: Optional note
            now: Transfer moment

        Returns:
            TransferResult with transfer_out and transfer_in entries

        Raises:
            NotFoundError: Sender or recipient missing
            ValidationError: Self-transfer or deactivated sender
            InsufficientBalanceError: Sender balance below amount
        """
        result = await self._transfer(
            sender_id, recipient_wallet_id, amount, description, now
        )

        sender = await self.user_repo.get_by_id(sender_id)
        await self.notifier.notify_transfer_received(
            user_id=result.incoming.user_id,
            sender_wallet_id=sender.wallet_id if sender else "",
            amount=result.incoming.amount,
        )
        return result

    @transaction
    async def _transfer(
        self,
        sender_id: int,
        recipient_wallet_id: str,
        amount: Decimal | str,
        description: str | None,
        now: datetime | None,
    ) -> TransferResult:
        now = now or utc_now()
        amount = require_positive_amount(amount)
        recipient = await self.lookup_recipient(sender_id, recipient_wallet_id)

        accounts = await self.user_repo.lock_many([sender_id, recipient.id])
        sender = accounts.get(sender_id)
        if sender is None:
            raise NotFoundError(f"User {sender_id} not found")
        recipient = accounts[recipient.id]

        if not sender.is_active:
            raise ValidationError("Account is deactivated")

        self.balance_manager.debit(sender, amount, "transfer out")
        self.balance_manager.credit(recipient, amount, "transfer in")

        note = sanitize_text(description)
        outgoing = await self.transaction_repo.create_entry(
            user_id=sender.id,
            type=TransactionType.TRANSFER_OUT,
            amount=amount,
            status=TransactionStatus.APPROVED,
            method=TransactionMethod.INTERNAL.value,
            description=note or f"Transfer to {recipient.wallet_id}",
            processed_at=now,
        )
        incoming = await self.transaction_repo.create_entry(
            user_id=recipient.id,
            type=TransactionType.TRANSFER_IN,
            amount=amount,
            status=TransactionStatus.APPROVED,
            method=TransactionMethod.INTERNAL.value,
            description=note or f"Transfer from {sender.wallet_id}",
            processed_at=now,
        )

        self.logger.info(
            "Transfer completed",
            extra={
                "sender_id": sender.id,
                "recipient_id": recipient.id,
                "amount": str(amount),
                "outgoing_id": outgoing.id,
                "incoming_id": incoming.id,
            },
        )
        return TransferResult(outgoing=outgoing, incoming=incoming)
