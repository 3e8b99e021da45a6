"""create_payments_table

Revision ID: 3f2a9c1d7b4e
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b4e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False, comment='Payment amount'),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False, comment='When the payment was made'),
        sa.Column('method', sa.String(length=20), nullable=False, comment='Payment method: Cash/Card'),
        sa.Column('status', sa.String(length=20), nullable=False, comment='Payment status: Pending/Completed/Failed/Refunded'),
        sa.Column('service_id', sa.Uuid(), nullable=False, comment='Catalog service reference'),
        sa.Column('external_reference', sa.String(length=200), nullable=True, comment='Gateway charge id (card only)'),
        sa.Column('version', sa.Integer(), nullable=False, comment='Optimistic lock version'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Created at'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Updated at'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_payments_amount_positive'),
    )
    op.create_index('ix_payments_status', 'payments', ['status'])
    op.create_index('ix_payments_service_id', 'payments', ['service_id'])
    op.create_index('ix_payments_created_at', 'payments', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_payments_created_at', table_name='payments')
    op.drop_index('ix_payments_service_id', table_name='payments')
    op.drop_index('ix_payments_status', table_name='payments')
    op.drop_table('payments')
