"""
Investment services.

Valuation engine, accrual/settlement processor and the investment
lifecycle service.
"""

from app.services.investment.accrual_processor import (
    AccrualPassResult,
    InvestmentAccrualProcessor,
)
from app.services.investment.service import InvestmentService
from app.services.investment.valuation import (
    InvestmentReturns,
    ValuationResult,
    calculate_investment_returns,
    valuate,
)


__all__ = [
    "AccrualPassResult",
    "InvestmentAccrualProcessor",
    "InvestmentReturns",
    "InvestmentService",
    "ValuationResult",
    "calculate_investment_returns",
    "valuate",
]
