"""
Validators package.

Provides common validation functions for user input.
"""

from app.validators.unified import (
    normalize_email,
    normalize_pagination,
    require_positive_amount,
    sanitize_text,
    validate_amount,
    validate_email,
)


__all__ = [
    "validate_amount",
    "require_positive_amount",
    "validate_email",
    "normalize_email",
    "normalize_pagination",
    "sanitize_text",
]
