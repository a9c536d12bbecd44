"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, balances, returns
# Precision: 18 digits total, 8 after decimal point
# Suitable for: balances, principals, accrued values, fees
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Standard percentage type for package ROI
# Precision: 5 digits total, 2 after decimal point
# Suitable for: ROI percentages (e.g., 5.00%, 100.00%)
# Range: 0.00 to 999.99
PercentType = DECIMAL(5, 2)
