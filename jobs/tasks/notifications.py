"""
Email notification task.

Delivers account notifications (investment completed, transaction
processed, transfer received) outside the request path. When no SMTP
server is configured the message is only logged.
"""

import smtplib
from email.message import EmailMessage

import dramatiq
from loguru import logger

from app.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_SHORT,
    NOTIFICATION_MAX_RETRIES,
)
from app.config.settings import settings
from app.repositories.user_repository import UserRepository
from app.utils.security import mask_email
from jobs.async_runner import create_local_session, run_async
from jobs.broker import broker  # noqa: F401  registers the Redis broker


@dramatiq.actor(
    max_retries=NOTIFICATION_MAX_RETRIES, time_limit=DRAMATIQ_TIME_LIMIT_SHORT
)
def send_email_notification(user_id: int, subject: str, body: str) -> None:
    """
    Send one email to an account holder.

    Args:
        user_id: Recipient account ID
        subject: Email subject
        body: Plain-text body
    """
    email = run_async(_get_recipient_email(user_id))
    if email is None:
        logger.warning(f"Notification dropped: user {user_id} not found")
        return

    if not settings.smtp_host:
        logger.info(
            f"Email to {mask_email(email)} (SMTP not configured): {subject}"
        )
        return

    message = EmailMessage()
    message["From"] = settings.smtp_sender
    message["To"] = email
    message["Subject"] = subject
    message.set_content(body)

    # Errors propagate so the Retries middleware can back off and retry
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        smtp.starttls()
        if settings.smtp_username and settings.smtp_password:
            smtp.login(settings.smtp_username, settings.smtp_password)
        smtp.send_message(message)

    logger.info(f"Email sent to {mask_email(email)}: {subject}")


async def _get_recipient_email(user_id: int) -> str | None:
    async with create_local_session() as session:
        user = await UserRepository(session).get_by_id(user_id)
        return user.email if user else None
