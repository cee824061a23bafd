"""Compliment reactions and daily sending streaks

Revision ID: 002_reactions_streaks
Revises: 001_initial
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002_reactions_streaks'
down_revision = '001_initial'
branch_labels = None
depends_on = None


compliment_reaction = postgresql.ENUM(
    'fire', 'heart', 'laugh', 'cry', 'crown', name='compliment_reaction', create_type=False
)


def upgrade() -> None:
    compliment_reaction.create(op.get_bind(), checkfirst=True)
    op.add_column('compliments', sa.Column('reaction', compliment_reaction, nullable=True))

    op.add_column('users', sa.Column('streak_current', sa.Integer(), nullable=False, server_default='0'))
    op.add_column('users', sa.Column('streak_best', sa.Integer(), nullable=False, server_default='0'))
    op.add_column('users', sa.Column('streak_last_date', sa.Date(), nullable=True))
    op.add_column('users', sa.Column('streak_freezes', sa.Integer(), nullable=False, server_default='1'))
    op.add_column('users', sa.Column('streak_freeze_used_date', sa.Date(), nullable=True))
    op.create_check_constraint('ck_users_streak_freezes_non_negative', 'users', 'streak_freezes >= 0')

    op.create_table(
        'streak_milestones',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('milestone_days', sa.Integer(), nullable=False),
        sa.Column('achieved_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'milestone_days', name='uq_streak_milestones_user_days'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_streak_milestones_user_id'), 'streak_milestones', ['user_id'])


def downgrade() -> None:
    op.drop_index(op.f('ix_streak_milestones_user_id'), table_name='streak_milestones')
    op.drop_table('streak_milestones')
    op.drop_constraint('ck_users_streak_freezes_non_negative', 'users', type_='check')
    for column in ('streak_freeze_used_date', 'streak_freezes', 'streak_last_date', 'streak_best', 'streak_current'):
        op.drop_column('users', column)
    op.drop_column('compliments', 'reaction')
    compliment_reaction.drop(op.get_bind(), checkfirst=True)
