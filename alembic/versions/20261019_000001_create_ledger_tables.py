"""Create plot sales ledger tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

brokers, plots, payment_history (hash-chained), wallets, transactions and
withdrawal_requests.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(precision=14, scale=2)

# Enums store member names
plot_status = sa.Enum('AVAILABLE', 'BOOKED', 'SOLD', 'CANCELLED', name='plot_status')
commission_status = sa.Enum('PENDING', 'PAID', name='commission_status')
transaction_type = sa.Enum('COMMISSION', 'WITHDRAWAL', 'ADJUSTMENT', name='transaction_type')
wallet_bucket = sa.Enum('DIRECT', 'DOWNLINE', name='wallet_bucket')
withdrawal_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='withdrawal_status')
withdrawal_payment_type = sa.Enum('CASH', 'CHEQUE', 'ONLINE_TRANSFER', name='withdrawal_payment_type')


def upgrade() -> None:
    """Create all ledger tables."""
    op.create_table(
        'brokers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('upline_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['upline_id'], ['brokers.id'], name='fk_brokers_upline_id'),
        sa.UniqueConstraint('email', name='uq_brokers_email'),
    )
    op.create_index('ix_brokers_upline_id', 'brokers', ['upline_id'])

    op.create_table(
        'plots',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('project_name', sa.String(255), nullable=False),
        sa.Column('plot_number', sa.Integer(), nullable=False),
        sa.Column('plot_type', sa.String(100), nullable=True),
        sa.Column('block', sa.String(50), nullable=True),
        sa.Column('dimension', sa.String(100), nullable=True),
        sa.Column('area', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('status', plot_status, nullable=False, server_default='AVAILABLE'),
        sa.Column('buyer_name', sa.String(255), nullable=True),
        sa.Column('broker_id', sa.Integer(), nullable=True),
        sa.Column('total_plot_amount', MONEY, nullable=True),
        sa.Column('booking_amount', MONEY, nullable=True),
        sa.Column('remaining_amount', MONEY, nullable=True),
        sa.Column('paid_percentage', sa.Numeric(precision=7, scale=2), nullable=True),
        sa.Column('booking_cycle', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('commission_status', commission_status, nullable=True),
        sa.Column('booked_at', sa.DateTime(), nullable=True),
        sa.Column('sold_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['broker_id'],
            ['brokers.id'],
            name='fk_plots_broker_id',
            ondelete='SET NULL'
        ),
        sa.UniqueConstraint('project_name', 'plot_number', name='uq_plots_project_plot_number'),
    )
    op.create_index('ix_plots_project_name', 'plots', ['project_name'])
    op.create_index('ix_plots_status', 'plots', ['status'])
    op.create_index('ix_plots_broker_id', 'plots', ['broker_id'])
    op.create_index('ix_plots_commission_status', 'plots', ['commission_status'])

    op.create_table(
        'payment_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('plot_id', sa.Integer(), nullable=False),
        sa.Column('booking_cycle', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('amount_received', MONEY, nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('transaction_hash', sa.String(64), nullable=False),
        sa.Column('previous_hash', sa.String(64), nullable=False),
        sa.Column('recorded_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['plot_id'],
            ['plots.id'],
            name='fk_payment_history_plot_id',
            ondelete='RESTRICT'
        ),
    )
    op.create_index('ix_payment_history_plot_id', 'payment_history', ['plot_id'])
    op.create_index('ix_payment_history_transaction_hash', 'payment_history', ['transaction_hash'], unique=True)

    op.create_table(
        'wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('direct_sale_balance', MONEY, nullable=False, server_default='0'),
        sa.Column('downline_sale_balance', MONEY, nullable=False, server_default='0'),
        sa.Column('total_balance', MONEY, nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['owner_id'],
            ['brokers.id'],
            name='fk_wallets_owner_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_wallets_owner_id', 'wallets', ['owner_id'], unique=True)

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('wallet_owner_id', sa.Integer(), nullable=False),
        sa.Column('type', transaction_type, nullable=False),
        sa.Column('wallet_bucket', wallet_bucket, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('plot_id', sa.Integer(), nullable=True),
        sa.Column('level', sa.Integer(), nullable=True),
        sa.Column('reference_id', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['wallet_owner_id'],
            ['brokers.id'],
            name='fk_transactions_wallet_owner_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['plot_id'],
            ['plots.id'],
            name='fk_transactions_plot_id',
            ondelete='RESTRICT'
        ),
    )
    op.create_index('ix_transactions_wallet_owner_id', 'transactions', ['wallet_owner_id'])
    op.create_index('ix_transactions_type', 'transactions', ['type'])
    op.create_index('ix_transactions_plot_id', 'transactions', ['plot_id'])
    # One commission per (wallet, plot, level); withdrawals and adjustments have no plot
    op.create_index(
        'uq_transactions_owner_plot_level',
        'transactions',
        ['wallet_owner_id', 'plot_id', 'level'],
        unique=True,
        mssql_where=sa.text('plot_id IS NOT NULL'),
        postgresql_where=sa.text('plot_id IS NOT NULL'),
        sqlite_where=sa.text('plot_id IS NOT NULL'),
    )

    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('broker_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', withdrawal_status, nullable=False, server_default='PENDING'),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('payment_type', withdrawal_payment_type, nullable=True),
        sa.Column('rejection_reason', sa.String(500), nullable=True),
        sa.Column('processed_by', sa.String(100), nullable=True),
        sa.Column('requested_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['broker_id'],
            ['brokers.id'],
            name='fk_withdrawal_requests_broker_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_withdrawal_requests_broker_id', 'withdrawal_requests', ['broker_id'])
    op.create_index('ix_withdrawal_requests_status', 'withdrawal_requests', ['status'])


def downgrade() -> None:
    """Drop all ledger tables (children first)."""
    op.drop_index('ix_withdrawal_requests_status', table_name='withdrawal_requests')
    op.drop_index('ix_withdrawal_requests_broker_id', table_name='withdrawal_requests')
    op.drop_table('withdrawal_requests')

    op.drop_index('uq_transactions_owner_plot_level', table_name='transactions')
    op.drop_index('ix_transactions_plot_id', table_name='transactions')
    op.drop_index('ix_transactions_type', table_name='transactions')
    op.drop_index('ix_transactions_wallet_owner_id', table_name='transactions')
    op.drop_table('transactions')

    op.drop_index('ix_wallets_owner_id', table_name='wallets')
    op.drop_table('wallets')

    op.drop_index('ix_payment_history_transaction_hash', table_name='payment_history')
    op.drop_index('ix_payment_history_plot_id', table_name='payment_history')
    op.drop_table('payment_history')

    op.drop_index('ix_plots_commission_status', table_name='plots')
    op.drop_index('ix_plots_broker_id', table_name='plots')
    op.drop_index('ix_plots_status', table_name='plots')
    op.drop_index('ix_plots_project_name', table_name='plots')
    op.drop_table('plots')

    op.drop_index('ix_brokers_upline_id', table_name='brokers')
    op.drop_table('brokers')

    for enum_type in (
        withdrawal_payment_type, withdrawal_status, wallet_bucket,
        transaction_type, commission_status, plot_status,
    ):
        enum_type.drop(op.get_bind(), checkfirst=True)
