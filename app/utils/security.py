"""
Security utilities for masking sensitive data in logs.

Provides functions to safely mask:
- Wallet addresses
- Email addresses
"""


def mask_address(address: str | None) -> str:
    """
    Mask wallet address for logging: 0x1234...5678

    Args:
        address: Wallet address to mask

    Returns:
        Masked address showing first 6 and last 4 characters

    Examples:
        >>> mask_address("0x1234567890abcdef1234567890abcdef12345678")
        '0x1234...5678'
        >>> mask_address(None)
        '***'
    """
    if not address or len(address) < 10:
        return "***"
    return f"{address[:6]}...{address[-4:]}"


def mask_email(email: str | None) -> str:
    """
    Mask email for logging: j***@example.com

    Examples:
        >>> mask_email("john.doe@example.com")
        'j***@example.com'
        >>> mask_email("broken")
        '***'
    """
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:1]}***@{domain}"
