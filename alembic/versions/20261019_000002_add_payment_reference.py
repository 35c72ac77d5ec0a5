"""Add external reference to payment_history

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

Cheque number, bank transfer id or receipt number of a recorded payment.
Not part of the hash chain.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000002'
down_revision: Union[str, None] = '20261019_000001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table('payment_history') as batch_op:
        batch_op.add_column(sa.Column('reference', sa.String(100), nullable=True))
        batch_op.create_index('ix_payment_history_reference', ['reference'])


def downgrade() -> None:
    with op.batch_alter_table('payment_history') as batch_op:
        batch_op.drop_index('ix_payment_history_reference')
        batch_op.drop_column('reference')
