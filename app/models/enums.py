"""
Model enumerations.

String enums stored in VARCHAR columns.
"""

from enum import Enum


class UserRole(str, Enum):
    """Account role."""

    USER = "user"
    ADMIN = "admin"


class TransactionType(str, Enum):
    """Ledger entry type."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    INVESTMENT = "investment"
    RETURN = "return"
    BONUS = "bonus"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"


class TransactionStatus(str, Enum):
    """Ledger entry status. Anything but PENDING is final."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSING = "processing"


class TransactionMethod(str, Enum):
    """Payment method of a ledger entry."""

    CRYPTO = "crypto"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"
    INTERNAL = "internal"
    BTC = "btc"
    ETH = "eth"
    USDT = "usdt"
    TRX = "trx"
    SOL = "sol"


class InvestmentStatus(str, Enum):
    """Investment lifecycle status."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RiskLevel(str, Enum):
    """Package risk level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BalanceAdjustmentType(str, Enum):
    """Admin balance adjustment direction."""

    ADD = "add"
    SUBTRACT = "subtract"


# Statuses the accrual pass looks at
NON_TERMINAL_INVESTMENT_STATUSES = (
    InvestmentStatus.ACTIVE.value,
    InvestmentStatus.PENDING.value,
)
