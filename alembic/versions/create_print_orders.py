"""create print_orders

Revision ID: create_print_orders
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_print_orders'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'print_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('midtrans_order_id', sa.String(length=50), nullable=False),
        sa.Column('fotoshare_token', sa.String(), nullable=False),
        sa.Column('size', sa.String(), nullable=False),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='PENDING'),
        sa.Column('customer_name', sa.String(length=100), nullable=True),
        sa.Column('customer_email', sa.String(length=254), nullable=True),
        sa.Column('snap_token', sa.String(), nullable=True),
        sa.Column('snap_redirect_url', sa.Text(), nullable=True),
        sa.Column('snap_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('PENDING', 'PAID', 'PRINTED', 'FAILED')", name='ck_print_orders_status'),
        sa.CheckConstraint('qty BETWEEN 1 AND 20', name='ck_print_orders_qty'),
    )
    op.create_index('ix_print_orders_midtrans_order_id', 'print_orders', ['midtrans_order_id'], unique=True)
    op.create_index('ix_print_orders_status', 'print_orders', ['status'])
    op.create_index('ix_print_orders_created_at', 'print_orders', ['created_at'])
    op.create_index('ix_print_orders_paid_at', 'print_orders', ['paid_at'])


def downgrade() -> None:
    op.drop_index('ix_print_orders_paid_at', table_name='print_orders')
    op.drop_index('ix_print_orders_created_at', table_name='print_orders')
    op.drop_index('ix_print_orders_status', table_name='print_orders')
    op.drop_index('ix_print_orders_midtrans_order_id', table_name='print_orders')
    op.drop_table('print_orders')
