"""initial PTE practice schema

Revision ID: initial_pte_schema_20261019
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = 'initial_pte_schema_20261019'
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    'role': ('student', 'teacher', 'admin'),
    'plantype': ('free', 'basic', 'premium', 'enterprise'),
    'subscriptionstatus': ('active', 'cancelled', 'expired'),
    'section': ('speaking', 'writing', 'reading', 'listening'),
    'ptetesttype': ('mock', 'practice', 'section'),
    'difficulty': ('easy', 'medium', 'hard'),
    'attemptstatus': ('in_progress', 'completed', 'abandoned'),
    'practicestage': ('idle', 'preparing', 'recording', 'processing', 'complete', 'failed'),
    'conversationstatus': ('active', 'completed', 'abandoned', 'error'),
    'turnrole': ('user', 'assistant', 'system'),
    'usagetype': ('scoring', 'realtime'),
}


def _enum(name):
    # Types are created up front; columns must not try to create them again
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _uuid():
    return postgresql.UUID(as_uuid=True)


def _timestamps(updated=True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))
    return cols


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', _enum('role'), nullable=False, server_default='student'),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('true')),
        sa.Column('is_email_verified', sa.Boolean(), nullable=True, server_default=sa.text('false')),
        sa.Column('email_verification_secret', sa.String(), nullable=True),
        sa.Column('password_reset_secret', sa.String(), nullable=True),
        sa.Column('daily_ai_credits', sa.Integer(), nullable=False, server_default='4'),
        sa.Column('ai_credits_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_credit_reset', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_profiles',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('target_score', sa.Integer(), nullable=True),
        sa.Column('exam_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('study_goal', sa.String(), nullable=True),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('timezone', sa.String(), nullable=True),
        sa.Column('preferences', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'user_progress',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('overall_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('speaking_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('writing_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reading_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('listening_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tests_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('questions_answered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('study_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_study_time', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_active_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'user_subscriptions',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('plan_type', _enum('plantype'), nullable=False, server_default='free'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('auto_renew', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('canceled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', _enum('subscriptionstatus'), nullable=False, server_default='active'),
        *_timestamps(),
    )
    op.create_index('ix_user_subscriptions_user_id', 'user_subscriptions', ['user_id'])

    op.create_table(
        'pte_tests',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('test_type', _enum('ptetesttype'), nullable=False),
        sa.Column('section', _enum('section'), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('duration', sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'pte_questions',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('test_id', _uuid(), sa.ForeignKey('pte_tests.id', ondelete='CASCADE'), nullable=True),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('question_type', sa.String(), nullable=False),
        sa.Column('section', _enum('section'), nullable=False),
        sa.Column('question_data', sa.JSON(), nullable=True),
        sa.Column('correct_answer', sa.JSON(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('difficulty', _enum('difficulty'), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        *_timestamps(),
    )
    op.create_index('ix_pte_questions_test_id', 'pte_questions', ['test_id'])
    op.create_index('ix_pte_questions_question_type', 'pte_questions', ['question_type'])
    op.create_index('ix_pte_questions_section', 'pte_questions', ['section'])

    op.create_table(
        'test_attempts',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('test_id', _uuid(), sa.ForeignKey('pte_tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', _enum('attemptstatus'), nullable=False, server_default='in_progress'),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_score', sa.Integer(), nullable=True),
        sa.Column('speaking_score', sa.Integer(), nullable=True),
        sa.Column('writing_score', sa.Integer(), nullable=True),
        sa.Column('reading_score', sa.Integer(), nullable=True),
        sa.Column('listening_score', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_test_attempts_user_id', 'test_attempts', ['user_id'])
    op.create_index('ix_test_attempts_test_id', 'test_attempts', ['test_id'])

    op.create_table(
        'test_answers',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('attempt_id', _uuid(), sa.ForeignKey('test_attempts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', _uuid(), sa.ForeignKey('pte_questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_answer', sa.JSON(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('audio_key', sa.Text(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=True),
        sa.Column('points_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('points_possible', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('ai_feedback', sa.JSON(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        *_timestamps(updated=False),
        sa.UniqueConstraint('attempt_id', 'question_id', name='uq_test_answers_attempt_question'),
    )

    op.create_table(
        'practice_attempts',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', _uuid(), sa.ForeignKey('pte_questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_type', sa.String(), nullable=False),
        sa.Column('section', _enum('section'), nullable=False),
        sa.Column('user_answer', sa.JSON(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('audio_key', sa.Text(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        sa.Column('stage', _enum('practicestage'), nullable=False, server_default='processing'),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('subscores', sa.JSON(), nullable=True),
        sa.Column('feedback', sa.JSON(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_practice_attempts_user_id', 'practice_attempts', ['user_id'])
    op.create_index('ix_practice_attempts_question_id', 'practice_attempts', ['question_id'])

    op.create_table(
        'conversation_sessions',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('session_type', sa.String(), nullable=False, server_default='customer_support'),
        sa.Column('status', _enum('conversationstatus'), nullable=False, server_default='active'),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ai_provider', sa.String(), nullable=True),
        sa.Column('model_used', sa.String(), nullable=True),
        sa.Column('total_turns', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_duration_ms', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('token_usage', sa.JSON(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_conversation_sessions_user_id', 'conversation_sessions', ['user_id'])

    op.create_table(
        'conversation_turns',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('session_id', _uuid(), sa.ForeignKey('conversation_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('turn_index', sa.Integer(), nullable=False),
        sa.Column('role', _enum('turnrole'), nullable=False),
        sa.Column('audio_url', sa.Text(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=False),
        sa.Column('scores', sa.JSON(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        sa.Column('words_per_minute', sa.Float(), nullable=True),
        sa.Column('pause_count', sa.Integer(), nullable=True),
        sa.Column('filler_word_count', sa.Integer(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_conversation_turns_session_id', 'conversation_turns', ['session_id'])

    op.create_table(
        'ai_usage_logs',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('usage_type', _enum('usagetype'), nullable=False),
        sa.Column('provider', sa.String(), nullable=True),
        sa.Column('session_id', _uuid(), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('audio_seconds', sa.Float(), nullable=False, server_default='0'),
        sa.Column('input_tokens', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('output_tokens', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_ai_usage_logs_user_id', 'ai_usage_logs', ['user_id'])


def downgrade() -> None:
    for table in (
        'ai_usage_logs',
        'conversation_turns',
        'conversation_sessions',
        'practice_attempts',
        'test_answers',
        'test_attempts',
        'pte_questions',
        'pte_tests',
        'user_subscriptions',
        'user_progress',
        'user_profiles',
        'users',
    ):
        op.drop_table(table)
    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
