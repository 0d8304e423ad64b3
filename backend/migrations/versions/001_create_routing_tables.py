"""Create category, process and routing tables

Revision ID: 001_routing_tables
Revises:
Create Date: 2026-10-17

Adds:
- categories
- processes (pricing copied into routing steps)
- routings (at most one row with is_primary_pricing_route = true)
- routing_steps
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_routing_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category_type', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_name', 'categories', ['name'])
    op.create_index('ix_categories_category_type', 'categories', ['category_type'])

    op.create_table(
        'processes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('setup_time_minutes', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('hourly_rate', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('minimum_cost', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('complexity_multiplier', sa.Numeric(8, 4), nullable=False, server_default='1'),
        sa.Column('equipment_required', sa.String(length=200), nullable=True),
        sa.Column('skill_level', sa.String(length=50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_processes_name', 'processes', ['name'])
    op.create_index('ix_processes_category_id', 'processes', ['category_id'])

    op.create_table(
        'routings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('category', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('total_setup_time', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('total_cost', sa.Numeric(18, 4), nullable=True),
        sa.Column('estimated_lead_time_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('material_markup_percent', sa.Numeric(8, 4), nullable=False, server_default='0'),
        sa.Column('finishing_cost_per_area', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('is_primary_pricing_route', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('default_material_cost', sa.Numeric(18, 4), nullable=True),
        sa.Column('default_surface_area', sa.Numeric(18, 4), nullable=True),
        sa.Column('default_runtime_minutes', sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_routings_category_id', 'routings', ['category_id'])
    op.create_index('ix_routings_is_primary_pricing_route', 'routings', ['is_primary_pricing_route'])

    op.create_table(
        'routing_steps',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('routing_id', sa.String(length=36),
                  sa.ForeignKey('routings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('process_id', sa.String(length=36), sa.ForeignKey('processes.id'), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('setup_time_multiplier', sa.Numeric(8, 4), nullable=False, server_default='1'),
        sa.Column('runtime_multiplier', sa.Numeric(8, 4), nullable=False, server_default='1'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('process_name', sa.String(length=200), nullable=False),
        sa.Column('setup_time_minutes', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('hourly_rate', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('minimum_cost', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('complexity_multiplier', sa.Numeric(8, 4), nullable=False, server_default='1'),
        sa.Column('parallel_step', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('quality_check_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_routing_steps_routing_id', 'routing_steps', ['routing_id'])
    op.create_index('ix_routing_steps_process_id', 'routing_steps', ['process_id'])


def downgrade() -> None:
    op.drop_index('ix_routing_steps_process_id', table_name='routing_steps')
    op.drop_index('ix_routing_steps_routing_id', table_name='routing_steps')
    op.drop_table('routing_steps')
    op.drop_index('ix_routings_is_primary_pricing_route', table_name='routings')
    op.drop_index('ix_routings_category_id', table_name='routings')
    op.drop_table('routings')
    op.drop_index('ix_processes_category_id', table_name='processes')
    op.drop_index('ix_processes_name', table_name='processes')
    op.drop_table('processes')
    op.drop_index('ix_categories_category_type', table_name='categories')
    op.drop_index('ix_categories_name', table_name='categories')
    op.drop_table('categories')
