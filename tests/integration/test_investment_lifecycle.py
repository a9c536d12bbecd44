"""
End-to-end investment lifecycle.

register -> deposit -> approve -> invest -> approve -> accrual -> withdraw,
checking the balance/ledger reconciliation at the end.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models import (
    BalanceAdjustmentType,
    InvestmentStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
    UserRole,
)
from app.services import (
    AdminService,
    InvestmentAccrualProcessor,
    InvestmentService,
    PackageService,
    StatisticsService,
    TransactionService,
    TransferService,
    UserService,
)
from app.utils.exceptions import ConflictError

# Signed contribution of each approved entry type to a balance
_LEDGER_SIGN = {
    TransactionType.DEPOSIT.value: 1,
    TransactionType.RETURN.value: 1,
    TransactionType.BONUS.value: 1,
    TransactionType.TRANSFER_IN.value: 1,
    TransactionType.WITHDRAWAL.value: -1,
    TransactionType.INVESTMENT.value: -1,
    TransactionType.TRANSFER_OUT.value: -1,
}


async def _ledger_balance(session, user_id: int) -> Decimal:
    result = await session.execute(
        select(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.status == TransactionStatus.APPROVED.value,
        )
    )
    return sum(
        (_LEDGER_SIGN[entry.type] * entry.amount for entry in result.scalars()),
        Decimal("0"),
    )


@pytest.mark.asyncio
async def test_full_lifecycle(db_session, notifier, now):
    """Money in, invested, matured, partly moved and withdrawn."""
    users = UserService(db_session)
    admin = await users.register_user(
        "admin@example.com", "secret-pass", "Ada", "Admin", role=UserRole.ADMIN
    )
    alice = await users.register_user(
        "Alice@Example.com", "alice-pass", "Alice", "Investor",
        crypto_wallet="0x1111222233334444555566667777888899990000",
    )
    bob = await users.register_user("bob@example.com", "bob-pass", "Bob", "Friend")
    admin_id, alice_id, bob_id = admin.id, alice.id, bob.id
    bob_wallet_id = bob.wallet_id

    assert alice.email == "alice@example.com"
    assert alice.balance == Decimal("0")
    assert alice.verify_password("alice-pass")

    with pytest.raises(ConflictError):
        await users.register_user("alice@example.com", "another", "A", "B")

    package = await PackageService(db_session).create_package(
        name="Professional Package",
        min_amount="2000",
        max_amount="5999",
        duration=5,
        roi="10",
    )
    package_id = package.id

    admin_service = AdminService(db_session, notifier)
    transactions = TransactionService(db_session)

    deposit = await transactions.create_deposit(alice_id, "3000", "crypto")
    await admin_service.process_transaction(
        deposit.id, admin_id, approve=True, now=now
    )

    investments = InvestmentService(db_session, notifier)
    start = now - timedelta(days=7)
    investment = await investments.create_investment(
        alice_id, package_id, "2000", now=start
    )
    investment_id = investment.id
    assert investment.status == InvestmentStatus.PENDING.value

    # Pending investments do not accrue
    await InvestmentAccrualProcessor(db_session, notifier).run_accrual_pass(
        start + timedelta(days=1)
    )
    await db_session.refresh(investment)
    assert investment.current_value == Decimal("2000")

    await investments.approve_investment(investment_id, admin_id, now=start)

    result = await InvestmentAccrualProcessor(db_session, notifier).run_accrual_pass(
        now
    )
    assert result.completed == 1

    fetched = await investments.get_investment(investment_id, alice_id, now=now)
    assert fetched.status == InvestmentStatus.COMPLETED.value
    assert fetched.current_value == Decimal("2200")

    await TransferService(db_session, notifier).transfer(
        alice_id, bob_wallet_id, "200", description="Dinner", now=now
    )
    await admin_service.adjust_balance(
        bob_id, "10", BalanceAdjustmentType.ADD, admin_id, reason="Welcome", now=now
    )

    withdrawal = await transactions.create_withdrawal(alice_id, "1000", "crypto")
    assert withdrawal.wallet_address == "0x1111222233334444555566667777888899990000"
    assert withdrawal.net_amount == Decimal("980")
    await admin_service.process_transaction(
        withdrawal.id, admin_id, approve=True, now=now
    )

    alice = await users.get_user(alice_id)
    bob = await users.get_user(bob_id)
    await db_session.refresh(alice)
    await db_session.refresh(bob)

    # 3000 - 2000 + 2200 - 200 - 1000
    assert alice.balance == Decimal("2000")
    assert bob.balance == Decimal("210")

    assert await _ledger_balance(db_session, alice_id) == alice.balance
    assert await _ledger_balance(db_session, bob_id) == bob.balance

    stats = await StatisticsService(db_session).get_transaction_stats(alice_id)
    assert stats.total_deposits == Decimal("3000")
    assert stats.total_withdrawals == Decimal("1000")
    assert stats.total_returns == Decimal("2200")

    assert notifier.notify_investment_completed.await_count == 1
    assert notifier.notify_transfer_received.await_count == 1
    assert notifier.notify_transaction_processed.await_count == 2
