"""
Notification service.

Queues account emails on the task broker. Delivery is fire-and-forget:
queueing failures are logged and swallowed, so they never undo a
committed balance change.
"""

import asyncio
from decimal import Decimal

from loguru import logger

from app.config.settings import settings


class NotificationService:
    """Enqueues email notifications for account holders."""

    def __init__(self, enabled: bool | None = None) -> None:
        """
        Initialize notification service.

        Args:
            enabled: Override settings.notifications_enabled
        """
        self.enabled = (
            settings.notifications_enabled if enabled is None else enabled
        )
        self.logger = logger.bind(service=self.__class__.__name__)

    async def notify_investment_completed(
        self,
        user_id: int,
        package_name: str,
        amount: Decimal,
        payout: Decimal,
    ) -> bool:
        """
        Tell a user their investment matured and was paid out.

        Returns:
            True if the email was queued
        """
        return await self._enqueue(
            user_id,
            "Your investment has completed",
            f"Your {package_name} investment of {amount} has completed. "
            f"{payout} has been credited to your balance.",
        )

    async def notify_transaction_processed(
        self,
        user_id: int,
        transaction_type: str,
        amount: Decimal,
        status: str,
        reference: str,
    ) -> bool:
        """
        Tell a user an administrator processed their request.

        Returns:
            True if the email was queued
        """
        return await self._enqueue(
            user_id,
            f"Your {transaction_type} request was {status}",
            f"Your {transaction_type} of {amount} (reference {reference}) "
            f"was {status}.",
        )

    async def notify_transfer_received(
        self, user_id: int, sender_wallet_id: str, amount: Decimal
    ) -> bool:
        """
        Tell a recipient that funds arrived from another user.

        Returns:
            True if the email was queued
        """
        return await self._enqueue(
            user_id,
            "You received a transfer",
            f"You received {amount} from wallet {sender_wallet_id}.",
        )

    async def _enqueue(self, user_id: int, subject: str, body: str) -> bool:
        if not self.enabled:
            self.logger.debug(f"Notifications disabled, skipping: {subject}")
            return False

        try:
            # Imported lazily: loading the actor configures the Redis broker
            from jobs.tasks.notifications import send_email_notification

            await asyncio.to_thread(
                send_email_notification.send, user_id, subject, body
            )
        except Exception as e:
            self.logger.warning(
                f"Failed to queue notification for user {user_id}",
                extra={"user_id": user_id, "subject": subject, "error": str(e)},
            )
            return False

        return True
