"""Initial schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


friendship_status = postgresql.ENUM('pending', 'accepted', 'blocked', name='friendship_status', create_type=False)
compliment_origin = postgresql.ENUM('normal', 'secret_admirer', name='compliment_origin', create_type=False)
reveal_method = postgresql.ENUM('guessed', 'tokens', 'exchange', name='reveal_method', create_type=False)
hint_type = postgresql.ENUM('first_letter', 'join_date', 'level', name='hint_type', create_type=False)
token_transaction_category = postgresql.ENUM('SPEND', 'EARN', name='token_transaction_category', create_type=False)
token_reason = postgresql.ENUM(
    'hint', 'reveal', 'secret_admirer', 'send_reward', 'purchase', name='token_reason', create_type=False
)
notification_type = postgresql.ENUM(
    'new_compliment', 'secret_admirer_message', 'secret_admirer_revealed', name='notification_type', create_type=False
)
device_platform = postgresql.ENUM('ios', 'android', name='device_platform', create_type=False)

_ENUMS = (
    friendship_status, compliment_origin, reveal_method, hint_type, token_transaction_category, token_reason,
    notification_type, device_platform,
)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in _ENUMS:
        enum.create(bind, checkfirst=True)

    # Users (profile columns belong to the profile service; scoring columns to this one)
    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('oomf_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tokens', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('compliments_sent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('compliments_received', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('correct_guesses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('tokens >= 0', name='ck_users_tokens_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index('ix_users_oomf_score', 'users', ['oomf_score'])

    # Social graph
    op.create_table(
        'friendships',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('requester_id', sa.String(), nullable=False),
        sa.Column('addressee_id', sa.String(), nullable=False),
        sa.Column('status', friendship_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['addressee_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('requester_id', 'addressee_id', name='uq_friendship_pair'),
        sa.CheckConstraint('requester_id != addressee_id', name='ck_friendship_not_self'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_friendships_lookup', 'friendships', ['requester_id', 'addressee_id', 'status'])

    op.create_table(
        'blocked_users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('blocker_id', sa.String(), nullable=False),
        sa.Column('blocked_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['blocker_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['blocked_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('blocker_id', 'blocked_id', name='uq_blocked_pair'),
        sa.CheckConstraint('blocker_id != blocked_id', name='ck_block_not_self'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_blocked_users_blocker_id'), 'blocked_users', ['blocker_id'])
    op.create_index(op.f('ix_blocked_users_blocked_id'), 'blocked_users', ['blocked_id'])

    # Templates
    op.create_table(
        'templates',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('emoji', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Compliments
    op.create_table(
        'compliments',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('sender_id', sa.String(), nullable=False),
        sa.Column('receiver_id', sa.String(), nullable=False),
        sa.Column('template_id', sa.String(), nullable=True),
        sa.Column('custom_text', sa.Text(), nullable=True),
        sa.Column('emoji', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('origin', compliment_origin, nullable=False, server_default='normal'),
        sa.Column('tokens_spent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('is_revealed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('reveal_method', reveal_method, nullable=True),
        sa.Column('revealed_at', sa.DateTime(), nullable=True),
        sa.Column('guesses_remaining', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('hints_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['template_id'], ['templates.id'], ),
        sa.CheckConstraint('sender_id != receiver_id', name='ck_compliments_not_self'),
        sa.CheckConstraint('(template_id IS NULL) != (custom_text IS NULL)', name='ck_compliments_one_content_source'),
        sa.CheckConstraint('guesses_remaining >= 0 AND guesses_remaining <= 3', name='ck_compliments_guesses_range'),
        sa.CheckConstraint('hints_used >= 0 AND hints_used <= 3', name='ck_compliments_hints_range'),
        sa.CheckConstraint('is_revealed = false OR reveal_method IS NOT NULL', name='ck_compliments_reveal_has_method'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_compliments_receiver_created', 'compliments', ['receiver_id', 'created_at'])
    op.create_index('ix_compliments_sender_created', 'compliments', ['sender_id', 'created_at'])

    op.create_table(
        'guesses',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('compliment_id', sa.String(), nullable=False),
        sa.Column('guesser_id', sa.String(), nullable=False),
        sa.Column('guessed_user_id', sa.String(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['compliment_id'], ['compliments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['guesser_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['guessed_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_guesses_compliment_id'), 'guesses', ['compliment_id'])

    op.create_table(
        'compliment_hints',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('compliment_id', sa.String(), nullable=False),
        sa.Column('hint_number', sa.Integer(), nullable=False),
        sa.Column('hint_type', hint_type, nullable=False),
        sa.Column('hint_label', sa.String(), nullable=False),
        sa.Column('hint_value', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['compliment_id'], ['compliments.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('compliment_id', 'hint_number', name='uq_compliment_hint_number'),
        sa.CheckConstraint('hint_number >= 1 AND hint_number <= 3', name='ck_compliment_hints_number_range'),
        sa.PrimaryKeyConstraint('id')
    )

    # Secret Admirer chats
    op.create_table(
        'secret_admirer_chats',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('compliment_id', sa.String(), nullable=False),
        sa.Column('sender_id', sa.String(), nullable=False),
        sa.Column('receiver_id', sa.String(), nullable=False),
        sa.Column('exchange_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_revealed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('revealed_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['compliment_id'], ['compliments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('compliment_id'),
        sa.CheckConstraint('exchange_count >= 0', name='ck_sa_chats_exchange_count'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_secret_admirer_chats_sender_id'), 'secret_admirer_chats', ['sender_id'])
    op.create_index(op.f('ix_secret_admirer_chats_receiver_id'), 'secret_admirer_chats', ['receiver_id'])

    op.create_table(
        'secret_admirer_messages',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('chat_id', sa.String(), nullable=False),
        sa.Column('sender_id', sa.String(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['chat_id'], ['secret_admirer_chats.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sa_messages_chat_created', 'secret_admirer_messages', ['chat_id', 'created_at'])

    # Token ledger
    op.create_table(
        'token_transactions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('category', token_transaction_category, nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('reason', token_reason, nullable=False),
        sa.Column('compliment_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['compliment_id'], ['compliments.id'], ondelete='SET NULL'),
        sa.CheckConstraint('amount > 0', name='ck_token_transactions_amount_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_token_transactions_user_created', 'token_transactions', ['user_id', 'created_at'])

    # Notifications and devices
    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('compliment_id', sa.String(), nullable=True),
        sa.Column('chat_id', sa.String(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'])
    op.create_index(op.f('ix_notifications_compliment_id'), 'notifications', ['compliment_id'])
    op.create_index('ix_notifications_user_unread', 'notifications', ['user_id', 'is_read'])

    op.create_table(
        'devices',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('push_token', sa.String(), nullable=False),
        sa.Column('platform', device_platform, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_registered_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('push_token'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_devices_user_id'), 'devices', ['user_id'])


def downgrade() -> None:
    op.drop_table('devices')
    op.drop_table('notifications')
    op.drop_table('token_transactions')
    op.drop_table('secret_admirer_messages')
    op.drop_table('secret_admirer_chats')
    op.drop_table('compliment_hints')
    op.drop_table('guesses')
    op.drop_table('compliments')
    op.drop_table('templates')
    op.drop_table('blocked_users')
    op.drop_table('friendships')
    op.drop_table('users')
    bind = op.get_bind()
    for enum in reversed(_ENUMS):
        enum.drop(bind, checkfirst=True)
