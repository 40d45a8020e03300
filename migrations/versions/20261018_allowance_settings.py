"""Add per-user allowance settings

Revision ID: 20261018_allowances
Revises: 20261018_initial
Create Date: 2026-10-18 15:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_allowances'
down_revision = '20261018_initial'
branch_labels = None
depends_on = None

AMOUNTS = (
    'domestic_daily_allowance',
    'domestic_accommodation',
    'domestic_transportation',
    'overseas_daily_allowance',
    'overseas_accommodation',
    'overseas_transportation',
    'overseas_preparation_fee',
)
FLAGS = (
    'domestic_accommodation_disabled',
    'domestic_transportation_disabled',
    'overseas_accommodation_disabled',
    'overseas_transportation_disabled',
    'overseas_preparation_fee_disabled',
)


def upgrade():
    op.create_table(
        'user_allowance_settings',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
        *[
            sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=False, server_default='0')
            for name in AMOUNTS
        ],
        *[sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false()) for name in FLAGS],
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('user_allowance_settings')
