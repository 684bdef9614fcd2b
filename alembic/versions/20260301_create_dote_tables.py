from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


# revision identifiers, used by Alembic.
revision = '20260301_create_dote_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    op.create_table(
        'dogs',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('breed', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now())
    )

    op.create_table(
        'dog_owners',
        sa.Column('dog_id', sa.String(), sa.ForeignKey('dogs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(), primary_key=True),
        sa.Column('role', sa.String(), nullable=False, server_default='primary'),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.now())
    )

    op.create_table(
        'walk_sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('dog_id', sa.String(), sa.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('distance_km', sa.Float(), nullable=True),
        sa.Column('territory_gained_km2', sa.Float(), nullable=True),
        sa.Column('points_count', sa.Integer(), nullable=True)
    )
    op.create_index('ix_walk_sessions_dog_started', 'walk_sessions', ['dog_id', 'started_at'])
    op.create_index('ix_walk_sessions_owner', 'walk_sessions', ['owner_id'])

    op.create_table(
        'walk_points',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('walk_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('dog_id', sa.String(), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lon', sa.Float(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False)
    )
    op.create_index('ix_walk_points_session_ts', 'walk_points', ['session_id', 'timestamp'])

    op.create_table(
        'territories',
        sa.Column('dog_id', sa.String(), sa.ForeignKey('dogs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('geometry', Geometry('MULTIPOLYGON', srid=4326, spatial_index=False), nullable=False),
        sa.Column('area_km2', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True)
    )
    op.create_index('ix_territories_geometry', 'territories', ['geometry'], postgresql_using='gist')
    op.create_index('ix_territories_area', 'territories', ['area_km2'])

    op.create_table(
        'paws_balances',
        sa.Column('owner_id', sa.String(), primary_key=True),
        sa.Column('balance', sa.Integer(), nullable=False, server_default='0')
    )

    op.create_table(
        'paws_transactions',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now())
    )
    op.create_index('ix_paws_transactions_owner_id', 'paws_transactions', ['owner_id'])

    op.create_table(
        'achievements',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('icon', sa.String(), nullable=True),
        sa.Column('paws_reward', sa.Integer(), nullable=True),
        sa.Column('unlocked_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('owner_id', 'code', name='uq_achievements_owner_code')
    )


def downgrade():
    op.drop_table('achievements')
    op.drop_index('ix_paws_transactions_owner_id', table_name='paws_transactions')
    op.drop_table('paws_transactions')
    op.drop_table('paws_balances')
    op.drop_index('ix_territories_area', table_name='territories')
    op.drop_index('ix_territories_geometry', table_name='territories')
    op.drop_table('territories')
    op.drop_index('ix_walk_points_session_ts', table_name='walk_points')
    op.drop_table('walk_points')
    op.drop_index('ix_walk_sessions_owner', table_name='walk_sessions')
    op.drop_index('ix_walk_sessions_dog_started', table_name='walk_sessions')
    op.drop_table('walk_sessions')
    op.drop_table('dog_owners')
    op.drop_table('dogs')
