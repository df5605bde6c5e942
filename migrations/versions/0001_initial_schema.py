"""Initial schema: profiles, appliances, samples, logs, insights and alerts

Revision ID: 0001_initial
Revises:
Create Date: 2026-09-28 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column('id', sa.Uuid(as_uuid=False), primary_key=True)


def _sample_table(name: str, *columns: sa.Column) -> None:
    op.create_table(
        name,
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        *columns,
    )
    op.create_index(f'ix_{name}_user_time', name, ['user_id', 'timestamp'])


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('user_id', sa.String(64), primary_key=True),
        sa.Column('electricity_rate', sa.Float(), nullable=True),
        sa.Column('solar_panel_capacity', sa.Float(), nullable=True),
        sa.Column('battery_capacity', sa.Float(), nullable=True),
        sa.Column('occupants', sa.Integer(), nullable=True),
        sa.Column('home_size_sqft', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column(
            'data_source',
            sa.Enum('MANUAL', 'SIMULATION', 'IOT', name='datasource'),
            nullable=False,
            server_default='MANUAL',
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_profiles_data_source', 'profiles', ['data_source'])

    op.create_table(
        'appliances',
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('power_rating_w', sa.Float(), nullable=False, server_default='0'),
        sa.Column(
            'status',
            sa.Enum('ON', 'OFF', name='devicestatus'),
            nullable=False,
            server_default='OFF',
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    _sample_table(
        'energy_samples',
        sa.Column('consumption_kw', sa.Float(), nullable=False),
        sa.Column('solar_kw', sa.Float(), nullable=False),
        sa.Column('grid_kw', sa.Float(), nullable=False),
        sa.Column('battery_level', sa.Float(), nullable=False, server_default='0'),
        sa.Column('active_devices', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_devices', sa.Integer(), nullable=False, server_default='0'),
    )
    _sample_table(
        'weather_samples',
        sa.Column('temperature_c', sa.Float(), nullable=False),
        sa.Column('cloud_cover', sa.Float(), nullable=False),
        sa.Column('irradiance_wm2', sa.Float(), nullable=False),
        sa.Column('humidity', sa.Float(), nullable=True),
        sa.Column('wind_speed_kmh', sa.Float(), nullable=True),
        sa.Column('condition', sa.String(20), nullable=False),
    )
    _sample_table(
        'price_samples',
        sa.Column('price_per_kwh', sa.Float(), nullable=False),
        sa.Column('tier', sa.String(20), nullable=False),
    )

    op.create_table(
        'energy_logs',
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('logged_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('consumption_kwh', sa.Float(), nullable=False),
    )
    op.create_index('ix_energy_logs_user_time', 'energy_logs', ['user_id', 'logged_at'])

    op.create_table(
        'solar_logs',
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('logged_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('generation_kwh', sa.Float(), nullable=False),
        sa.Column('irradiance_wm2', sa.Float(), nullable=True),
    )
    op.create_index('ix_solar_logs_user_time', 'solar_logs', ['user_id', 'logged_at'])

    op.create_table(
        'recommendations',
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('expected_savings_kwh', sa.Float(), nullable=False),
        sa.Column('expected_savings_currency', sa.Float(), nullable=False),
        sa.Column('priority', sa.String(10), nullable=False),
        sa.Column('category', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
    )

    op.create_table(
        'forecasts',
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False, index=True),
        sa.Column('target', sa.String(20), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('model', sa.String(100), nullable=False),
        sa.Column('confidence', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
    )

    op.create_table(
        'alerts',
        _id_column(),
        sa.Column('user_id', sa.String(64), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
    )


def downgrade() -> None:
    for table in (
        'alerts',
        'forecasts',
        'recommendations',
        'solar_logs',
        'energy_logs',
        'price_samples',
        'weather_samples',
        'energy_samples',
        'appliances',
        'profiles',
    ):
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        sa.Enum(name='devicestatus').drop(bind, checkfirst=True)
        sa.Enum(name='datasource').drop(bind, checkfirst=True)
