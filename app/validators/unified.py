"""Unified validators shared by all services."""
import re
from decimal import Decimal, InvalidOperation

from app.config.business_constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.utils.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_AMOUNT_DECIMALS = 8


def validate_amount(
    amount: str | int | Decimal,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal | None = None,
) -> tuple[bool, Decimal | None, str | None]:
    """
    Single amount validator.

    Args:
        amount: Amount to validate (string, int or Decimal)
        min_val: Minimum allowed value
        max_val: Maximum allowed value (optional)

    Returns:
        Tuple of (is_valid, parsed_value, error_message)
        - (True, value, None) if valid
        - (False, None, error_message) if invalid

    Examples:
        >>> validate_amount("100.50")
        (True, Decimal('100.50'), None)
        >>> validate_amount("-10")
        (False, None, 'Amount must be >= 0')
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        # Floats lose cents; callers pass strings or Decimals
        return False, None, "Amount must be a string or Decimal"

    if isinstance(amount, Decimal | int):
        value = Decimal(amount)
    else:
        if not amount or not isinstance(amount, str):
            return False, None, "Amount is empty"

        amount = amount.strip().replace(",", ".")
        if not amount:
            return False, None, "Amount is empty"

        try:
            value = Decimal(amount)
        except InvalidOperation:
            return False, None, "Invalid amount format"

    if not value.is_finite():
        return False, None, "Amount must be a finite number"

    if value < min_val:
        return False, None, f"Amount must be >= {min_val}"

    if max_val is not None and value > max_val:
        return False, None, f"Amount must be <= {max_val}"

    if value.as_tuple().exponent < -MAX_AMOUNT_DECIMALS:
        return False, None, "Amount has too many decimal places (maximum 8)"

    return True, value, None


def require_positive_amount(amount: str | int | Decimal) -> Decimal:
    """
    Parse an amount that must be strictly positive.

    Raises:
        ValidationError: If the amount is malformed or not > 0
    """
    is_valid, value, error = validate_amount(amount)
    if not is_valid:
        raise ValidationError(error or "Invalid amount")
    if value <= 0:
        raise ValidationError("Amount must be greater than 0")
    return value


def validate_email(email: str) -> tuple[bool, str | None]:
    """
    Validate email format.

    Examples:
        >>> validate_email("john.doe@example.com")
        (True, None)
        >>> validate_email("john")
        (False, 'Invalid email format')
    """
    if not email or not isinstance(email, str):
        return False, "Email is empty"
    if not EMAIL_PATTERN.match(email.strip()):
        return False, "Invalid email format"
    return True, None


def normalize_email(email: str) -> str:
    """Lowercase and strip email."""
    return email.strip().lower()


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize free-text input (descriptions, admin notes).

    Trims whitespace, drops angle brackets and null bytes, limits length.
    """
    if text is None:
        return None

    text = text.strip().replace("<", "").replace(">", "").replace("\x00", "")
    if len(text) > max_length:
        text = text[:max_length]
    return text


def normalize_pagination(
    page: int | None, per_page: int | None
) -> tuple[int, int]:
    """
    Clamp pagination parameters to sane bounds.

    Examples:
        >>> normalize_pagination(0, 1000)
        (1, 100)
    """
    page = max(page or 1, 1)
    per_page = per_page or DEFAULT_PAGE_SIZE
    return page, min(max(per_page, 1), MAX_PAGE_SIZE)
