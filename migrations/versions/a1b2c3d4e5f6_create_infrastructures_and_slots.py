"""create infrastructures and slots

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'infrastructures',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_table(
        'infrastructure_managers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('infrastructure_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(['infrastructure_id'], ['infrastructures.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('infrastructure_id', 'user_email', name='uq_infrastructure_manager')
    )
    with op.batch_alter_table('infrastructure_managers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_infrastructure_managers_infrastructure_id'), ['infrastructure_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_infrastructure_managers_user_email'), ['user_email'], unique=False)

    op.create_table(
        'slots',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('infrastructure_id', sa.Integer(), nullable=False),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['infrastructure_id'], ['infrastructures.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('slots', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_slots_infrastructure_id'), ['infrastructure_id'], unique=False)
        batch_op.create_index('ix_slots_infrastructure_date', ['infrastructure_id', 'booking_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_slots_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_slots_user_email'), ['user_email'], unique=False)


def downgrade():
    with op.batch_alter_table('slots', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_slots_user_email'))
        batch_op.drop_index(batch_op.f('ix_slots_status'))
        batch_op.drop_index('ix_slots_infrastructure_date')
        batch_op.drop_index(batch_op.f('ix_slots_infrastructure_id'))

    op.drop_table('slots')

    with op.batch_alter_table('infrastructure_managers', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_infrastructure_managers_user_email'))
        batch_op.drop_index(batch_op.f('ix_infrastructure_managers_infrastructure_id'))

    op.drop_table('infrastructure_managers')
    op.drop_table('infrastructures')
