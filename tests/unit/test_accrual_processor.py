"""
Tests for InvestmentAccrualProcessor.

Settlement must happen exactly once per investment, whichever path
(scheduled pass, read path, forced revaluation) reaches it first.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models import InvestmentStatus, Transaction, TransactionType
from app.services.investment import InvestmentAccrualProcessor, InvestmentService
from app.utils.exceptions import NotFoundError


async def _return_entries(session, user_id):
    result = await session.execute(
        select(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.type == TransactionType.RETURN.value,
        )
    )
    return list(result.scalars().all())


class TestSettle:
    """Tests for single investment settlement."""

    @pytest.mark.asyncio
    async def test_mid_term_revaluation_moves_no_money(
        self, db_session, make_user, make_package, make_investment, notifier
    ):
        """Day 3 of 5 updates figures only."""
        user = await make_user()
        package = await make_package()
        start = datetime(2026, 9, 1, tzinfo=UTC)
        investment = await make_investment(user, package, start=start)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        result = await processor.process_investment(
            investment.id, start + timedelta(days=3)
        )

        await db_session.refresh(investment)
        await db_session.refresh(user)
        assert result.completed_now is False
        assert investment.current_value == Decimal("1060")
        assert investment.status == InvestmentStatus.ACTIVE.value
        assert user.balance == Decimal("0")
        assert await _return_entries(db_session, user.id) == []
        notifier.notify_investment_completed.assert_not_called()

    @pytest.mark.asyncio
    async def test_completion_credits_once_with_return_entry(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Completed investment pays current_value and writes one entry."""
        user = await make_user(balance="50")
        package = await make_package()
        investment = await make_investment(user, package)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        result = await processor.process_investment(investment.id, now)

        await db_session.refresh(investment)
        await db_session.refresh(user)
        assert result.completed_now is True
        assert investment.status == InvestmentStatus.COMPLETED.value
        assert investment.completed_at is not None
        assert user.balance == Decimal("1150")

        entries = await _return_entries(db_session, user.id)
        assert len(entries) == 1
        assert entries[0].amount == Decimal("1100")
        assert entries[0].status == "approved"
        assert entries[0].investment_id == investment.id
        assert entries[0].description == "Investment return from Professional Package"

        notifier.notify_investment_completed.assert_awaited_once()
        kwargs = notifier.notify_investment_completed.await_args.kwargs
        assert kwargs["user_id"] == user.id
        assert kwargs["payout"] == Decimal("1100")

    @pytest.mark.asyncio
    async def test_second_settlement_is_noop(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Re-processing a completed investment never double-credits."""
        user = await make_user()
        package = await make_package()
        investment = await make_investment(user, package)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        await processor.process_investment(investment.id, now)
        again = await processor.process_investment(
            investment.id, now + timedelta(days=1)
        )

        await db_session.refresh(user)
        assert again.completed_now is False
        assert user.balance == Decimal("1100")
        assert len(await _return_entries(db_session, user.id)) == 1
        assert notifier.notify_investment_completed.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_investment(self, db_session, notifier, now):
        """Unknown ID raises NotFoundError."""
        processor = InvestmentAccrualProcessor(db_session, notifier)

        with pytest.raises(NotFoundError):
            await processor.process_investment(9999, now)

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_settlement(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Email failure after commit does not undo the credit."""
        notifier.notify_investment_completed.side_effect = RuntimeError("smtp down")
        user = await make_user()
        package = await make_package()
        investment = await make_investment(user, package)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        result = await processor.process_investment(investment.id, now)

        await db_session.refresh(user)
        assert result.completed_now is True
        assert user.balance == Decimal("1100")


class TestAccrualPass:
    """Tests for run_accrual_pass()."""

    @pytest.mark.asyncio
    async def test_pass_counts(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Pending, active and terminal investments are handled correctly."""
        user = await make_user()
        package = await make_package()
        due = await make_investment(user, package)
        running = await make_investment(
            user, package, start=now - timedelta(days=2)
        )
        pending = await make_investment(
            user, package, status=InvestmentStatus.PENDING
        )
        await make_investment(user, package, status=InvestmentStatus.CANCELLED)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        result = await processor.run_accrual_pass(now)

        assert result.examined == 3
        assert result.completed == 1
        assert result.failed == 0

        await db_session.refresh(due)
        await db_session.refresh(running)
        await db_session.refresh(pending)
        assert due.status == InvestmentStatus.COMPLETED.value
        assert running.current_value == Decimal("1040")
        assert pending.status == InvestmentStatus.PENDING.value
        assert pending.current_value == Decimal("1000")

    @pytest.mark.asyncio
    async def test_repeated_passes_credit_once(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Two passes over the same completion credit exactly once."""
        user = await make_user()
        package = await make_package()
        await make_investment(user, package)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        first = await processor.run_accrual_pass(now)
        second = await processor.run_accrual_pass(now + timedelta(hours=1))

        await db_session.refresh(user)
        assert first.completed == 1
        assert second.examined == 0
        assert user.balance == Decimal("1100")
        assert len(await _return_entries(db_session, user.id)) == 1

    @pytest.mark.asyncio
    async def test_failure_is_isolated(
        self,
        db_session,
        make_user,
        make_package,
        make_investment,
        notifier,
        now,
        monkeypatch,
    ):
        """One broken investment does not stop the others."""
        from app.services.investment import accrual_processor

        user = await make_user()
        package = await make_package()
        broken = await make_investment(user, package)
        healthy = await make_investment(user, package)
        broken_id = broken.id

        real_valuate = accrual_processor.valuate

        def flaky_valuate(investment, package, when):
            if investment.id == broken_id:
                raise RuntimeError("corrupt row")
            return real_valuate(investment, package, when)

        monkeypatch.setattr(accrual_processor, "valuate", flaky_valuate)

        processor = InvestmentAccrualProcessor(db_session, notifier)
        result = await processor.run_accrual_pass(now)

        assert result.examined == 2
        assert result.completed == 1
        assert result.failed == 1
        assert result.failed_ids == [broken_id]

        await db_session.refresh(healthy)
        await db_session.refresh(user)
        assert healthy.status == InvestmentStatus.COMPLETED.value
        assert user.balance == Decimal("1100")


class TestReadPathSettlement:
    """Reads share the settlement unit with the scheduler."""

    @pytest.mark.asyncio
    async def test_read_then_pass_credits_once(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """A read settles the investment; the next pass finds nothing to do."""
        user = await make_user()
        package = await make_package()
        investment = await make_investment(user, package)

        service = InvestmentService(db_session, notifier)
        investments = await service.get_user_investments(user.id, now=now)

        assert [i.id for i in investments] == [investment.id]
        assert investments[0].status == InvestmentStatus.COMPLETED.value
        assert investments[0].current_value == Decimal("1100")

        processor = InvestmentAccrualProcessor(db_session, notifier)
        result = await processor.run_accrual_pass(now)

        await db_session.refresh(user)
        assert result.completed == 0
        assert user.balance == Decimal("1100")
        assert len(await _return_entries(db_session, user.id)) == 1

    @pytest.mark.asyncio
    async def test_single_read_revalues(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """get_investment returns figures current as of now."""
        user = await make_user()
        package = await make_package()
        investment = await make_investment(
            user, package, start=now - timedelta(days=1, hours=2)
        )

        service = InvestmentService(db_session, notifier)
        fetched = await service.get_investment(investment.id, user.id, now=now)

        assert fetched.total_returns == Decimal("20")
        assert fetched.current_value == Decimal("1020")

    @pytest.mark.asyncio
    async def test_status_filter_sees_settled_state(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Filtering by status happens after the read settles investments."""
        user = await make_user()
        package = await make_package()
        matured = await make_investment(user, package)
        running = await make_investment(
            user, package, start=now - timedelta(days=1)
        )
        matured_id, running_id = matured.id, running.id

        service = InvestmentService(db_session, notifier)
        active = await service.get_user_investments(
            user.id, status=InvestmentStatus.ACTIVE.value, now=now
        )
        completed = await service.get_user_investments(
            user.id, status=InvestmentStatus.COMPLETED.value, now=now
        )

        assert [i.id for i in active] == [running_id]
        assert [i.id for i in completed] == [matured_id]
        assert completed[0].current_value == Decimal("1100")

    @pytest.mark.asyncio
    async def test_foreign_investment_hidden(
        self, db_session, make_user, make_package, make_investment, notifier, now
    ):
        """Another user's investment looks missing."""
        owner = await make_user()
        other = await make_user()
        package = await make_package()
        investment = await make_investment(owner, package)

        service = InvestmentService(db_session, notifier)

        with pytest.raises(NotFoundError):
            await service.get_investment(investment.id, other.id, now=now)
