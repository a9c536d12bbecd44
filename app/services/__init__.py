"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.admin_service import AdminService, BalanceAdjustmentResult
from app.services.balance_manager import BalanceManager
from app.services.base_service import BaseService, log_operation, transaction

# Core Services
from app.services.investment import (
    InvestmentAccrualProcessor,
    InvestmentService,
)
from app.services.notification_service import NotificationService
from app.services.package_service import PackageService
from app.services.statistics_service import StatisticsService
from app.services.transaction_service import TransactionService
from app.services.transfer_service import TransferResult, TransferService
from app.services.user_service import UserService


__all__ = [
    # Base
    "BaseService",
    "transaction",
    "log_operation",
    "BalanceManager",
    # Core Services
    "InvestmentService",
    "InvestmentAccrualProcessor",
    "PackageService",
    "TransactionService",
    "TransferService",
    "TransferResult",
    "UserService",
    # Admin & Support
    "AdminService",
    "BalanceAdjustmentResult",
    "StatisticsService",
    "NotificationService",
]
