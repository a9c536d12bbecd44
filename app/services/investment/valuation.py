"""
Investment valuation engine.

Turns an investment's elapsed time into accrued value and decides when
it reaches completion. Accrual is simple and linear: the package ROI is
spread evenly over its duration in whole days, never compounded.

Everything here is a pure function of (investment, package, now), so
the scheduler and the read path can call it redundantly.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_DOWN, Decimal

from app.config.business_constants import MONEY_QUANTUM
from app.models.enums import InvestmentStatus
from app.models.investment import Investment
from app.models.investment_package import InvestmentPackage
from app.utils.datetime_utils import ensure_utc, whole_days_between


@dataclass(frozen=True)
class InvestmentReturns:
    """Returns for a principal after a number of elapsed days."""

    daily_return: Decimal
    total_return: Decimal
    current_value: Decimal
    is_completed: bool


@dataclass(frozen=True)
class ValuationResult:
    """Outcome of one valuation of one investment."""

    investment_id: int | None
    status_before: str
    status_after: str
    days_elapsed: int
    daily_return: Decimal
    total_return: Decimal
    current_value: Decimal

    @property
    def revalued(self) -> bool:
        """Whether the engine recomputed the figures."""
        return self.status_before == InvestmentStatus.ACTIVE.value

    @property
    def completed_now(self) -> bool:
        """Whether this valuation moved the investment to completed."""
        return (
            self.status_before != InvestmentStatus.COMPLETED.value
            and self.status_after == InvestmentStatus.COMPLETED.value
        )


def _quantize(value: Decimal) -> Decimal:
    # Round down so accrued value never exceeds what the package promises
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_DOWN)


def calculate_investment_returns(
    amount: Decimal,
    roi: Decimal,
    duration: int,
    days_elapsed: int,
) -> InvestmentReturns:
    """
    Calculate linear returns for a principal.

    Elapsed days are capped at the package duration, so the result never
    exceeds ``amount * (1 + roi / 100)``.

    Args:
        amount: Principal
        roi: Total return over the whole duration, in percent
        duration: Package duration in days (>= 1)
        days_elapsed: Whole days since the start (negative treated as 0)

    Returns:
        InvestmentReturns with daily/total return, current value and
        whether the duration has been reached

    Examples:
        >>> r = calculate_investment_returns(Decimal("1000"), Decimal("10"), 5, 3)
        >>> r.daily_return, r.total_return, r.current_value
        (Decimal('20.00000000'), Decimal('60.00000000'), Decimal('1060.00000000'))
    """
    if duration < 1:
        raise ValueError(f"Package duration must be >= 1 day, got {duration}")

    amount = Decimal(amount)
    roi = Decimal(roi)
    days = min(max(days_elapsed, 0), duration)

    # Single division keeps the capped total exact before rounding
    daily_return = _quantize(amount * roi / (Decimal("100") * duration))
    total_return = _quantize(amount * roi * days / (Decimal("100") * duration))

    return InvestmentReturns(
        daily_return=daily_return,
        total_return=total_return,
        current_value=amount + total_return,
        is_completed=days_elapsed >= duration,
    )


def valuate(
    investment: Investment,
    package: InvestmentPackage,
    now: datetime,
) -> ValuationResult:
    """
    Revalue an investment at ``now`` and update it in place.

    Only active investments are revalued; any other status is left
    untouched and the stored figures are reported back. Completion is
    triggered by ``now >= end_date``, independently of the day cap.
    The caller persists the investment.

    Args:
        investment: Investment to revalue (mutated)
        package: Its package (read only)
        now: Valuation moment

    Returns:
        ValuationResult describing the pass
    """
    status_before = investment.status

    if status_before != InvestmentStatus.ACTIVE.value:
        return ValuationResult(
            investment_id=investment.id,
            status_before=status_before,
            status_after=status_before,
            days_elapsed=0,
            daily_return=investment.daily_return,
            total_return=investment.total_returns,
            current_value=investment.current_value,
        )

    now = ensure_utc(now)
    days_elapsed = whole_days_between(investment.start_date, now)
    returns = calculate_investment_returns(
        investment.amount, package.roi, package.duration, days_elapsed
    )

    investment.daily_return = returns.daily_return
    investment.total_returns = returns.total_return
    investment.current_value = returns.current_value
    investment.last_calculated = now

    if now >= ensure_utc(investment.end_date):
        investment.status = InvestmentStatus.COMPLETED.value

    return ValuationResult(
        investment_id=investment.id,
        status_before=status_before,
        status_after=investment.status,
        days_elapsed=days_elapsed,
        daily_return=returns.daily_return,
        total_return=returns.total_return,
        current_value=returns.current_value,
    )
