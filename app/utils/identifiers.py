"""
Identifier generators.

Ledger references and user wallet IDs.
"""

import secrets
import time

from app.config.business_constants import (
    REFERENCE_ALPHABET,
    REFERENCE_RANDOM_LENGTH,
    WALLET_ID_LETTERS,
    WALLET_ID_PREFIX,
)


def generate_transaction_reference(transaction_type: str) -> str:
    """
    Generate a ledger reference string.

    Format: ``<TYPE>-<epoch millis>-<6 random uppercase alphanumerics>``.

    Args:
        transaction_type: Transaction type value (e.g. "deposit")

    Returns:
        Reference such as ``DEPOSIT-1760832000000-K3F9QZ``
    """
    timestamp = str(int(time.time() * 1000))
    suffix = "".join(
        secrets.choice(REFERENCE_ALPHABET)
        for _ in range(REFERENCE_RANDOM_LENGTH)
    )
    return f"{transaction_type.upper()}-{timestamp}-{suffix}"


def generate_wallet_id() -> str:
    """
    Generate a candidate wallet ID: MCT + 2 digits + 1 letter.

    Uniqueness is checked by the caller against the users table.
    """
    digits = secrets.randbelow(90) + 10
    letter = secrets.choice(WALLET_ID_LETTERS)
    return f"{WALLET_ID_PREFIX}{digits}{letter}"


def normalize_wallet_id(wallet_id: str | None) -> str:
    """Uppercase and strip a user-supplied wallet ID."""
    if not wallet_id:
        return ""
    return wallet_id.strip().upper()
