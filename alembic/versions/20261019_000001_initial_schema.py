"""Create users, packages, investments and transactions.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Initial schema:
1. users with non-negative balance and unique wallet_id
2. investment_packages with bounds/duration/ROI checks
3. investments with status index per user
4. transactions (ledger) with unique reference and fee checks
"""

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision = '20261019_000001'
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.DECIMAL(precision=18, scale=8)
PERCENT = sa.DECIMAL(precision=5, scale=2)


def upgrade() -> None:
    """Create core tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('wallet_id', sa.String(length=20), nullable=False),
        sa.Column('crypto_wallet', sa.String(length=255), nullable=True),
        sa.Column('balance', MONEY, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('balance >= 0', name='check_user_balance_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_wallet_id', 'users', ['wallet_id'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'investment_packages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('min_amount', MONEY, nullable=False),
        sa.Column('max_amount', MONEY, nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('roi', PERCENT, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('risk_level', sa.String(length=10), nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('min_amount >= 0', name='check_package_min_amount_non_negative'),
        sa.CheckConstraint('max_amount > min_amount', name='check_package_max_gt_min'),
        sa.CheckConstraint('duration >= 1', name='check_package_duration_positive'),
        sa.CheckConstraint('roi >= 0 AND roi <= 100', name='check_package_roi_range'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_investment_packages_is_active', 'investment_packages', ['is_active']
    )

    op.create_table(
        'investments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('package_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('current_value', MONEY, nullable=False),
        sa.Column('daily_return', MONEY, nullable=False),
        sa.Column('total_returns', MONEY, nullable=False),
        sa.Column('last_calculated', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount > 0', name='check_investment_amount_positive'),
        sa.CheckConstraint(
            'total_returns >= 0', name='check_investment_total_returns_non_negative'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(
            ['package_id'], ['investment_packages.id'], ondelete='RESTRICT'
        ),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_investments_user_id', 'investments', ['user_id'])
    op.create_index('ix_investments_package_id', 'investments', ['package_id'])
    op.create_index('ix_investments_status', 'investments', ['status'])
    op.create_index(
        'idx_investment_user_status', 'investments', ['user_id', 'status']
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('fee', MONEY, nullable=False),
        sa.Column('net_amount', MONEY, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('method', sa.String(length=20), nullable=False),
        sa.Column('reference', sa.String(length=64), nullable=False),
        sa.Column('wallet_address', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('investment_id', sa.Integer(), nullable=True),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount >= 0', name='check_transaction_amount_non_negative'),
        sa.CheckConstraint('fee >= 0', name='check_transaction_fee_non_negative'),
        sa.CheckConstraint(
            'fee <= amount', name='check_transaction_fee_not_exceeds_amount'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(
            ['investment_id'], ['investments.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(['processed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference'),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_type', 'transactions', ['type'])
    op.create_index('ix_transactions_status', 'transactions', ['status'])
    op.create_index('ix_transactions_investment_id', 'transactions', ['investment_id'])
    op.create_index(
        'idx_transaction_user_type_status',
        'transactions',
        ['user_id', 'type', 'status'],
    )


def downgrade() -> None:
    """Drop core tables."""
    op.drop_table('transactions')
    op.drop_table('investments')
    op.drop_table('investment_packages')
    op.drop_table('users')
