"""
Tests for NotificationService.

Queueing is fire-and-forget: failures are reported as False, never raised.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from app.services.notification_service import NotificationService


@pytest.fixture
def email_actor(monkeypatch):
    """Replace the actor's send() so nothing reaches the broker."""
    from jobs.tasks import notifications

    send = MagicMock()
    monkeypatch.setattr(notifications.send_email_notification, "send", send)
    return send


@pytest.mark.asyncio
async def test_disabled_does_not_enqueue(email_actor):
    """Disabled notifier returns False and never touches the broker."""
    notifier = NotificationService(enabled=False)

    queued = await notifier.notify_transfer_received(1, "MCT12A", Decimal("5"))

    assert queued is False
    email_actor.assert_not_called()


@pytest.mark.asyncio
async def test_investment_completed_message(email_actor):
    """Completion email names the package and the payout."""
    notifier = NotificationService(enabled=True)

    queued = await notifier.notify_investment_completed(
        user_id=7,
        package_name="Elite Package",
        amount=Decimal("10000"),
        payout=Decimal("12000"),
    )

    assert queued is True
    user_id, subject, body = email_actor.call_args.args
    assert user_id == 7
    assert subject == "Your investment has completed"
    assert "Elite Package" in body
    assert "12000" in body


@pytest.mark.asyncio
async def test_transaction_processed_message(email_actor):
    """Processing email carries type, status and reference."""
    notifier = NotificationService(enabled=True)

    await notifier.notify_transaction_processed(
        user_id=3,
        transaction_type="withdrawal",
        amount=Decimal("100"),
        status="approved",
        reference="WITHDRAWAL-1-ABC123",
    )

    _, subject, body = email_actor.call_args.args
    assert subject == "Your withdrawal request was approved"
    assert "WITHDRAWAL-1-ABC123" in body


@pytest.mark.asyncio
async def test_broker_failure_is_swallowed(email_actor):
    """Broker errors are logged, not raised."""
    email_actor.side_effect = ConnectionError("redis down")
    notifier = NotificationService(enabled=True)

    queued = await notifier.notify_transfer_received(1, "MCT12A", Decimal("5"))

    assert queued is False
