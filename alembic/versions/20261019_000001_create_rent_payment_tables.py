"""Create rent payment tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

This migration creates users, houses, rentals and payments.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, houses, rentals and payments."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column(
            'role',
            sa.Enum('admin', 'tenant', name='user_role', create_constraint=True),
            nullable=False,
            server_default='tenant'
        ),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'houses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('house_no', sa.String(length=50), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'availability',
            sa.Enum('available', 'rented', name='house_availability', create_constraint=True),
            nullable=False,
            server_default='available'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_houses_availability', 'houses', ['availability'])

    op.create_table(
        'rentals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('house_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('next_payment_date', sa.Date(), nullable=False),
        sa.Column(
            'payment_status',
            sa.Enum('pending', 'paid', 'late', name='rental_payment_status', create_constraint=True),
            nullable=False,
            server_default='pending'
        ),
        sa.Column(
            'rental_status',
            sa.Enum('active', 'ended', name='rental_status', create_constraint=True),
            nullable=False,
            server_default='active'
        ),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['tenant_id'],
            ['users.id'],
            name='fk_rentals_tenant_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['house_id'],
            ['houses.id'],
            name='fk_rentals_house_id',
            ondelete='NO ACTION'
        ),
    )
    op.create_index('ix_rentals_tenant_id', 'rentals', ['tenant_id'])
    op.create_index('ix_rentals_house_id', 'rentals', ['house_id'])
    op.create_index('ix_rentals_rental_status', 'rentals', ['rental_status'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('rental_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'method',
            sa.Enum('cash', 'mpesa', name='payment_method', create_constraint=True),
            nullable=False
        ),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('transaction_id', sa.String(length=64), nullable=True),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'successful', 'failed', name='payment_status', create_constraint=True),
            nullable=False,
            server_default='pending'
        ),
        sa.Column('payment_date', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['rental_id'],
            ['rentals.id'],
            name='fk_payments_rental_id',
            ondelete='CASCADE'
        ),
    )

    # Create indexes for common queries
    op.create_index('ix_payments_rental_id', 'payments', ['rental_id'])
    op.create_index('ix_payments_month', 'payments', ['month'])
    op.create_index('ix_payments_status', 'payments', ['status'])


def downgrade() -> None:
    """Drop the rent payment tables."""
    op.drop_index('ix_payments_status', table_name='payments')
    op.drop_index('ix_payments_month', table_name='payments')
    op.drop_index('ix_payments_rental_id', table_name='payments')
    op.drop_table('payments')

    op.drop_index('ix_rentals_rental_status', table_name='rentals')
    op.drop_index('ix_rentals_house_id', table_name='rentals')
    op.drop_index('ix_rentals_tenant_id', table_name='rentals')
    op.drop_table('rentals')

    op.drop_index('ix_houses_availability', table_name='houses')
    op.drop_table('houses')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
