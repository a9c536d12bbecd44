"""
Tests for the investment valuation engine.

Covers linear accrual, idempotency, completion detection and the day cap.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from app.models import InvestmentStatus
from app.services.investment.valuation import (
    calculate_investment_returns,
    valuate,
)


class TestCalculateInvestmentReturns:
    """Tests for the pure returns helper."""

    def test_daily_return_is_roi_spread_over_duration(self):
        """1000 at 10% over 5 days accrues 20 per day."""
        returns = calculate_investment_returns(
            Decimal("1000"), Decimal("10"), 5, 0
        )

        assert returns.daily_return == Decimal("20")
        assert returns.total_return == Decimal("0")
        assert returns.current_value == Decimal("1000")
        assert returns.is_completed is False

    def test_three_days_elapsed(self):
        """Day 3 gives 60 accrued and 1060 current value."""
        returns = calculate_investment_returns(
            Decimal("1000"), Decimal("10"), 5, 3
        )

        assert returns.total_return == Decimal("60")
        assert returns.current_value == Decimal("1060")
        assert returns.is_completed is False

    def test_elapsed_days_capped_at_duration(self):
        """Late evaluation never pays more than the full ROI."""
        returns = calculate_investment_returns(
            Decimal("1000"), Decimal("10"), 5, 9
        )

        assert returns.total_return == Decimal("100")
        assert returns.current_value == Decimal("1100")
        assert returns.is_completed is True

    def test_negative_days_treated_as_zero(self):
        """Clock skew before start accrues nothing."""
        returns = calculate_investment_returns(
            Decimal("1000"), Decimal("10"), 5, -2
        )

        assert returns.total_return == Decimal("0")
        assert returns.current_value == Decimal("1000")

    def test_non_terminating_division_rounds_down(self):
        """Thirds are truncated to 8 decimals, never rounded up."""
        returns = calculate_investment_returns(
            Decimal("100"), Decimal("10"), 3, 1
        )

        assert returns.daily_return == Decimal("3.33333333")
        assert returns.total_return == Decimal("3.33333333")

    def test_full_duration_with_thirds_pays_exact_roi(self):
        """Capped total is computed in one division, so no drift."""
        returns = calculate_investment_returns(
            Decimal("100"), Decimal("10"), 3, 3
        )

        assert returns.total_return == Decimal("10")

    def test_zero_duration_rejected(self):
        """A package must last at least one day."""
        with pytest.raises(ValueError):
            calculate_investment_returns(Decimal("1000"), Decimal("10"), 0, 1)


class TestValuate:
    """Tests for valuate(investment, package, now)."""

    def test_day_three_example(self, investment, package, start):
        """After 3 days: daily 20, total 60, value 1060, still active."""
        now = start + timedelta(days=3)

        result = valuate(investment, package, now)

        assert investment.daily_return == Decimal("20")
        assert investment.total_returns == Decimal("60")
        assert investment.current_value == Decimal("1060")
        assert investment.status == InvestmentStatus.ACTIVE.value
        assert investment.last_calculated == now
        assert result.days_elapsed == 3
        assert result.completed_now is False

    def test_current_value_is_amount_plus_returns(self, investment, package, start):
        """Invariant: current_value = amount + total_returns."""
        valuate(investment, package, start + timedelta(days=2, hours=5))

        assert (
            investment.current_value
            == investment.amount + investment.total_returns
        )

    def test_partial_days_are_floored(self, investment, package, start):
        """2 days 23 hours counts as 2 days."""
        result = valuate(
            investment, package, start + timedelta(days=2, hours=23)
        )

        assert result.days_elapsed == 2
        assert investment.total_returns == Decimal("40")

    def test_repeated_valuation_is_idempotent(self, investment, package, start):
        """Same now, same figures and status."""
        now = start + timedelta(days=3, hours=4)

        first = valuate(investment, package, now)
        second = valuate(investment, package, now)

        assert first.current_value == second.current_value
        assert first.daily_return == second.daily_return
        assert first.status_after == second.status_after
        assert investment.current_value == Decimal("1060")

    def test_completes_at_end_date(self, investment, package, start):
        """now == end_date moves the investment to completed."""
        result = valuate(investment, package, start + timedelta(days=5))

        assert investment.status == InvestmentStatus.COMPLETED.value
        assert investment.current_value == Decimal("1100")
        assert result.completed_now is True

    def test_one_second_before_end_date_stays_active(
        self, investment, package, start
    ):
        """Completion is triggered by the end date, not by rounding."""
        valuate(investment, package, start + timedelta(days=5, seconds=-1))

        assert investment.status == InvestmentStatus.ACTIVE.value
        assert investment.current_value == Decimal("1080")

    def test_delayed_evaluation_is_capped(self, investment, package, start):
        """A scheduler delay of several days does not overpay."""
        valuate(investment, package, start + timedelta(days=12))

        assert investment.total_returns == Decimal("100")
        assert investment.current_value == Decimal("1100")
        assert investment.status == InvestmentStatus.COMPLETED.value

    def test_completed_investment_is_not_revalued(
        self, investment, package, start
    ):
        """Second valuation after completion reports no transition."""
        valuate(investment, package, start + timedelta(days=5))

        again = valuate(investment, package, start + timedelta(days=6))

        assert again.completed_now is False
        assert again.revalued is False
        assert investment.last_calculated == start + timedelta(days=5)

    @pytest.mark.parametrize(
        "status",
        [InvestmentStatus.PENDING, InvestmentStatus.CANCELLED],
    )
    def test_non_active_status_is_noop(self, investment, package, start, status):
        """Pending and cancelled investments are left untouched."""
        investment.status = status.value

        result = valuate(investment, package, start + timedelta(days=3))

        assert investment.current_value == Decimal("1000")
        assert investment.last_calculated == start
        assert investment.status == status.value
        assert result.current_value == Decimal("1000")
        assert result.completed_now is False

    def test_naive_start_date_treated_as_utc(self, investment, package, start):
        """Rows read back from SQLite carry naive datetimes."""
        investment.start_date = start.replace(tzinfo=None)
        investment.end_date = (start + timedelta(days=5)).replace(tzinfo=None)

        valuate(investment, package, start + timedelta(days=1))

        assert investment.total_returns == Decimal("20")
