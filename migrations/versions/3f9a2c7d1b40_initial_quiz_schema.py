"""Initial quiz schema

Revision ID: 3f9a2c7d1b40
Revises:
Create Date: 2026-01-12 10:24:08.113520

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '3f9a2c7d1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    inspector = inspect(op.get_bind())
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
            sa.Column('subjects', sa.String(length=255), nullable=False, server_default=''),
            sa.Column('classes', sa.String(length=255), nullable=False, server_default=''),
            sa.Column('phone', sa.String(length=50), nullable=False, server_default=''),
            sa.Column('age', sa.Integer(), nullable=True),
            sa.Column('qualification', sa.String(length=255), nullable=False, server_default=''),
            sa.Column('teacher_id', sa.String(length=100), nullable=False, server_default=''),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'modules' not in tables:
        op.create_table('modules',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('section', sa.String(length=20), nullable=False),
            sa.Column('created_by', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_modules_section', 'modules', ['section'], unique=False)
        op.create_index('ix_modules_created_by', 'modules', ['created_by'], unique=False)
        op.create_index('ix_modules_created_at', 'modules', ['created_at'], unique=False)

    if 'quiz_days' not in tables:
        op.create_table('quiz_days',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('module_id', sa.Integer(), nullable=False),
            sa.Column('date_label', sa.String(length=255), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
            sa.Column('is_published', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('responses_open', sa.Boolean(), nullable=False, server_default='1'),
            sa.Column('results_published', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['module_id'], ['modules.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_days_module_id', 'quiz_days', ['module_id'], unique=False)
        op.create_index('ix_quiz_days_is_published', 'quiz_days', ['is_published'], unique=False)
        op.create_index('ix_quiz_days_created_at', 'quiz_days', ['created_at'], unique=False)
        op.create_index('ix_quiz_days_published_active', 'quiz_days', ['is_published', 'is_active'], unique=False)

    if 'questions' not in tables:
        op.create_table('questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_day_id', sa.Integer(), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('question_type', sa.String(length=20), nullable=False, server_default='mcq'),
            sa.Column('options', sa.JSON(), nullable=True),
            sa.Column('correct_index', sa.Integer(), nullable=True),
            sa.Column('correct_answer1', sa.String(length=50), nullable=True),
            sa.Column('correct_answer2', sa.String(length=50), nullable=True),
            sa.Column('reference_type', sa.String(length=10), nullable=False, server_default='none'),
            sa.Column('reference_pdf_url', sa.String(length=1000), nullable=False, server_default=''),
            sa.Column('reference_pdf_public_id', sa.String(length=500), nullable=False, server_default=''),
            sa.Column('reference_url', sa.String(length=1000), nullable=False, server_default=''),
            sa.Column('reference_title', sa.String(length=255), nullable=False, server_default=''),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['quiz_day_id'], ['quiz_days.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_questions_quiz_day_id', 'questions', ['quiz_day_id'], unique=False)

    if 'submissions' not in tables:
        op.create_table('submissions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('quiz_day_id', sa.Integer(), nullable=False),
            sa.Column('section_scores', sa.JSON(), nullable=False),
            sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('time_taken_seconds', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_updated', sa.DateTime(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['quiz_day_id'], ['quiz_days.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'quiz_day_id', name='uq_submission_user_quiz_day')
        )
        op.create_index('ix_submissions_user_id', 'submissions', ['user_id'], unique=False)
        op.create_index('ix_submissions_quiz_day_id', 'submissions', ['quiz_day_id'], unique=False)
        op.create_index('ix_submissions_created_at', 'submissions', ['created_at'], unique=False)

    if 'submission_answers' not in tables:
        op.create_table('submission_answers',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('submission_id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('selected_index', sa.Integer(), nullable=True),
            sa.Column('user_answer1', sa.String(length=50), nullable=True),
            sa.Column('user_answer2', sa.String(length=50), nullable=True),
            sa.Column('is_correct', sa.Boolean(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['submission_id'], ['submissions.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['question_id'], ['questions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_submission_answers_submission_id', 'submission_answers', ['submission_id'], unique=False)
        op.create_index('ix_submission_answers_question_id', 'submission_answers', ['question_id'], unique=False)

    if 'reference_materials' not in tables:
        op.create_table('reference_materials',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('module_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('type', sa.String(length=20), nullable=False, server_default='pdf'),
            sa.Column('url', sa.String(length=1000), nullable=False),
            sa.Column('storage_public_id', sa.String(length=500), nullable=True),
            sa.Column('original_filename', sa.String(length=255), nullable=True),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('uploaded_by', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['module_id'], ['modules.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_reference_materials_module_id', 'reference_materials', ['module_id'], unique=False)
        op.create_index('ix_reference_materials_created_at', 'reference_materials', ['created_at'], unique=False)


def downgrade():
    op.drop_index('ix_reference_materials_created_at', table_name='reference_materials')
    op.drop_index('ix_reference_materials_module_id', table_name='reference_materials')
    op.drop_table('reference_materials')

    op.drop_index('ix_submission_answers_question_id', table_name='submission_answers')
    op.drop_index('ix_submission_answers_submission_id', table_name='submission_answers')
    op.drop_table('submission_answers')

    op.drop_index('ix_submissions_created_at', table_name='submissions')
    op.drop_index('ix_submissions_quiz_day_id', table_name='submissions')
    op.drop_index('ix_submissions_user_id', table_name='submissions')
    op.drop_table('submissions')

    op.drop_index('ix_questions_quiz_day_id', table_name='questions')
    op.drop_table('questions')

    op.drop_index('ix_quiz_days_published_active', table_name='quiz_days')
    op.drop_index('ix_quiz_days_created_at', table_name='quiz_days')
    op.drop_index('ix_quiz_days_is_published', table_name='quiz_days')
    op.drop_index('ix_quiz_days_module_id', table_name='quiz_days')
    op.drop_table('quiz_days')

    op.drop_index('ix_modules_created_at', table_name='modules')
    op.drop_index('ix_modules_created_by', table_name='modules')
    op.drop_index('ix_modules_section', table_name='modules')
    op.drop_table('modules')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
