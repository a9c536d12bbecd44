"""
Business logic constants.

Central location for business rules and constants used across the application.
This module can be imported by services and tasks without circular dependencies.
"""

from decimal import Decimal

from app.config.settings import settings


# Withdrawal fee percentage (2% of the gross amount by default)
WITHDRAWAL_FEE_PERCENT: Decimal = settings.withdrawal_fee_percent

# Wallet ID format: MCT + 2 digits (10-99) + 1 letter, e.g. MCT23A
WALLET_ID_PREFIX = "MCT"
WALLET_ID_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
WALLET_ID_MAX_ATTEMPTS = 20

# Transaction reference: TYPE-<epoch millis>-<6 uppercase alphanumerics>
REFERENCE_RANDOM_LENGTH = 6
REFERENCE_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Package constraints
PACKAGE_MIN_DURATION_DAYS = 1
PACKAGE_MIN_ROI = Decimal("0")
PACKAGE_MAX_ROI = Decimal("100")

# Default features for packages created without an explicit list
DEFAULT_PACKAGE_FEATURES = ["24/7 Support", "Automated Trading", "Daily Reports"]

# Pagination defaults
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Money precision (matches MoneyType scale)
MONEY_QUANTUM = Decimal("0.00000001")


def calculate_withdrawal_fee(
    amount: Decimal, fee_percent: Decimal | None = None
) -> tuple[Decimal, Decimal]:
    """
    Calculate withdrawal fee and net amount.

    Args:
        amount: Gross withdrawal amount
        fee_percent: Fee percentage override (defaults to WITHDRAWAL_FEE_PERCENT)

    Returns:
        Tuple of (fee, net_amount)

    Examples:
        >>> calculate_withdrawal_fee(Decimal("100"))
        (Decimal('2'), Decimal('98'))
    """
    percent = WITHDRAWAL_FEE_PERCENT if fee_percent is None else fee_percent
    fee = amount * percent / Decimal("100")
    return fee, amount - fee
