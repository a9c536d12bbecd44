"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.enums import (
    BalanceAdjustmentType,
    InvestmentStatus,
    RiskLevel,
    TransactionMethod,
    TransactionStatus,
    TransactionType,
    UserRole,
)
from app.models.investment import Investment
from app.models.investment_package import InvestmentPackage
from app.models.transaction import Transaction

# Core Models
from app.models.user import User

__all__ = [
    # Base
    "Base",
    # Enums
    "BalanceAdjustmentType",
    "InvestmentStatus",
    "RiskLevel",
    "TransactionMethod",
    "TransactionStatus",
    "TransactionType",
    "UserRole",
    # Core Models
    "User",
    "InvestmentPackage",
    "Investment",
    "Transaction",
]
