"""Initial scorecard schema: organizations, scorecard elements, KPIs, values, saved imports

Revision ID: 001_initial_scorecard_schema
Revises:
Create Date: 2025-02-03 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_scorecard_schema'
down_revision = None
branch_labels = None
depends_on = None


ELEMENT_TYPES = ('Perspective', 'Objective', 'Initiative', 'KPI')
SCORING_TYPES = ('Goal/Red Flag', 'Yes/No', 'Text')
CALENDAR_FREQUENCIES = ('Daily', 'Weekly', 'Monthly', 'Quarterly', 'Annually')
DATA_TYPES = ('Number', 'Percentage', 'Currency', 'Text')
AGGREGATION_TYPES = ('Sum', 'Average', 'Last Value')
COLORS = ('Red', 'Yellow', 'Green')


def upgrade():
    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Uuid(), nullable=True),
        sa.Column('template_from_dataset_field', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['parent_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organizations_parent_id', 'organizations', ['parent_id'])

    op.create_table(
        'scorecard_elements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Uuid(), nullable=True),
        sa.Column('organization_id', sa.Uuid(), nullable=False),
        sa.Column('element_type', sa.Enum(*ELEMENT_TYPES, name='scorecard_element_type'), nullable=False),
        sa.Column('owner_user_id', sa.String(), nullable=True),
        sa.Column('weight', sa.Numeric(10, 4), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['parent_id'], ['scorecard_elements.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_scorecard_elements_org', 'scorecard_elements', ['organization_id'])
    op.create_index('ix_scorecard_elements_parent', 'scorecard_elements', ['parent_id'])

    op.create_table(
        'kpis',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('scorecard_element_id', sa.Uuid(), nullable=False),
        sa.Column('scoring_type', sa.Enum(*SCORING_TYPES, name='kpi_scoring_type'), nullable=False),
        sa.Column('calendar_frequency', sa.Enum(*CALENDAR_FREQUENCIES, name='kpi_calendar_frequency'), nullable=False),
        sa.Column('data_type', sa.Enum(*DATA_TYPES, name='kpi_data_type'), nullable=False),
        sa.Column('aggregation_type', sa.Enum(*AGGREGATION_TYPES, name='kpi_aggregation_type'), nullable=False),
        sa.Column('decimal_precision', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_manual_update', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('calculation_equation', sa.Text(), nullable=True),
        sa.Column('rollup_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['scorecard_element_id'], ['scorecard_elements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('scorecard_element_id', name='uq_kpis_scorecard_element_id'),
    )

    op.create_table(
        'kpi_values',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kpi_id', sa.Uuid(), nullable=False),
        sa.Column('period_date', sa.Date(), nullable=False),
        sa.Column('actual_value', sa.Text(), nullable=True),
        sa.Column('target_value', sa.Text(), nullable=True),
        sa.Column('threshold_red', sa.Text(), nullable=True),
        sa.Column('threshold_yellow', sa.Text(), nullable=True),
        sa.Column('score', sa.Numeric(6, 2), nullable=True),
        sa.Column('color', sa.Enum(*COLORS, name='kpi_color'), nullable=True),
        sa.Column('updated_by_user_id', sa.String(), nullable=True),
        sa.Column('is_manual_entry', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['kpi_id'], ['kpis.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kpi_id', 'period_date', name='uq_kpi_values_kpi_period'),
    )
    op.create_index('ix_kpi_values_kpi_id', 'kpi_values', ['kpi_id'])

    op.create_table(
        'saved_imports',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('kpi_mappings', sa.JSON(), nullable=False),
        sa.Column('transformations', sa.JSON(), nullable=True),
        sa.Column('schedule_config', sa.JSON(), nullable=True),
        sa.Column('last_run_at', sa.DateTime(), nullable=True),
        sa.Column('created_by_user_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )


def downgrade():
    op.drop_table('saved_imports')
    op.drop_index('ix_kpi_values_kpi_id', table_name='kpi_values')
    op.drop_table('kpi_values')
    op.drop_table('kpis')
    op.drop_index('ix_scorecard_elements_parent', table_name='scorecard_elements')
    op.drop_index('ix_scorecard_elements_org', table_name='scorecard_elements')
    op.drop_table('scorecard_elements')
    op.drop_index('ix_organizations_parent_id', table_name='organizations')
    op.drop_table('organizations')

    for enum_name in (
        'kpi_color',
        'kpi_aggregation_type',
        'kpi_data_type',
        'kpi_calendar_frequency',
        'kpi_scoring_type',
        'scorecard_element_type',
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
