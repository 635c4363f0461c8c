# alembic/versions/0001_initial.py

"""Initial tables: users, reminders, notifications, notification_preferences

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 10:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Applies the changes to create the initial tables."""
    # Таблица Пользователей
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Internal User ID'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Lower-cased login email'),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False, comment='User display name'),
        sa.Column('fcm_token', sa.String(length=512), nullable=True),
        sa.Column('is_developer', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('profile_image', sa.String(length=512), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(length=16), nullable=True),
        sa.Column('diabetes_type', sa.String(length=32), nullable=True),
        sa.Column('diagnosis_year', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Таблица Напоминаний
    op.create_table(
        'reminders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('reminder_type', sa.String(length=32), nullable=False),
        sa.Column('time', sa.Time(), nullable=False),
        sa.Column('days_mask', sa.Integer(), nullable=False, server_default=sa.text('127')),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reminders_user_id'), 'reminders', ['user_id'], unique=False)
    op.create_index(op.f('ix_reminders_is_active'), 'reminders', ['is_active'], unique=False)
    op.create_index('ix_reminders_active_time', 'reminders', ['is_active', 'time'], unique=False)

    # Журнал уведомлений
    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('notification_type', sa.String(length=32), nullable=False, server_default='system'),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'is_read'], unique=False)

    # Настройки уведомлений (одна строка на пользователя)
    op.create_table(
        'notification_preferences',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('reminder_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sugar_alerts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('foot_health_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('medication_reminders', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('system_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('achievement_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('quiet_hours_start', sa.String(length=5), nullable=False, server_default='22:00'),
        sa.Column('quiet_hours_end', sa.String(length=5), nullable=False, server_default='07:00'),
        sa.Column('quiet_hours_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )


def downgrade() -> None:
    """Reverts the changes, dropping the tables."""
    op.drop_table('notification_preferences')
    op.drop_index('ix_notifications_user_read', table_name='notifications')
    op.drop_index(op.f('ix_notifications_user_id'), table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_reminders_active_time', table_name='reminders')
    op.drop_index(op.f('ix_reminders_is_active'), table_name='reminders')
    op.drop_index(op.f('ix_reminders_user_id'), table_name='reminders')
    op.drop_table('reminders')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
