"""add filter questions, booking answers and audit logs

Revision ID: b7c8d9e0f1a2
Revises: a1b2c3d4e5f6
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c8d9e0f1a2'
down_revision = 'a1b2c3d4e5f6'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'infrastructure_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('infrastructure_id', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_type', sa.String(length=20), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['infrastructure_id'], ['infrastructures.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('infrastructure_questions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_infrastructure_questions_infrastructure_id'), ['infrastructure_id'], unique=False)

    op.create_table(
        'booking_answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('document_path', sa.String(length=512), nullable=True),
        sa.ForeignKeyConstraint(['booking_id'], ['slots.id'], ),
        sa.ForeignKeyConstraint(['question_id'], ['infrastructure_questions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_id', 'question_id', name='uq_booking_answer_once')
    )
    with op.batch_alter_table('booking_answers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_booking_answers_booking_id'), ['booking_id'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(length=80), nullable=True),
        sa.Column('actor_email', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=80), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('audit_logs')

    with op.batch_alter_table('booking_answers', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_booking_answers_booking_id'))

    op.drop_table('booking_answers')

    with op.batch_alter_table('infrastructure_questions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_infrastructure_questions_infrastructure_id'))

    op.drop_table('infrastructure_questions')
