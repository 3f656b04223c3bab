"""Initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create trips table
    op.create_table(
        'trips',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('destination', sa.String(length=255), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('budget_tier', sa.String(length=20), nullable=False),
        sa.Column('travel_style', sa.String(length=20), nullable=False),
        sa.Column('group_size', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=40), nullable=False, server_default='draft'),
        sa.Column('itinerary', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("budget_tier IN ('low', 'medium', 'high')", name='ck_trips_budget_tier'),
        sa.CheckConstraint(
            "travel_style IN ('adventure', 'relaxation', 'cultural', 'nightlife')",
            name='ck_trips_travel_style'
        ),
        sa.CheckConstraint('group_size BETWEEN 1 AND 50', name='ck_trips_group_size'),
        sa.CheckConstraint(
            '(start_date IS NULL) = (end_date IS NULL)',
            name='ck_trips_dates_together'
        )
    )
    op.create_index('ix_trips_user_id', 'trips', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_trips_user_id', table_name='trips')
    op.drop_table('trips')
