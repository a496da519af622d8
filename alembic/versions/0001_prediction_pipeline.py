"""prediction_pipeline

Revision ID: 0001_prediction_pipeline
Revises:
Create Date: 2026-10-18

Creates the tables read and written by the prediction pipeline:
- users, students, ocr_results, transcripts: student data (read)
- admissions: admission program catalog (read)
- prediction_results: one row per prediction run
- student_admissions: student to admission links, unique per pair
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_prediction_pipeline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

prediction_status = sa.Enum(
    'PROCESSING', 'COMPLETED', 'PARTIAL', 'FAILED',
    name='predictionresultstatus',
)
ocr_status = sa.Enum('PROCESSING', 'COMPLETED', 'FAILED', name='ocrstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Create prediction pipeline tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'students',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('province', sa.String(100), nullable=False),
        sa.Column('uni_type', sa.String(50), nullable=False),
        sa.Column('min_budget', sa.Float(), nullable=True),
        sa.Column('max_budget', sa.Float(), nullable=True),
        sa.Column('majors', sa.JSON(), nullable=False),
        sa.Column('special_cases', sa.JSON(), nullable=False),
        sa.Column('national_exams', sa.JSON(), nullable=False),
        sa.Column('vsat_exams', sa.JSON(), nullable=False),
        sa.Column('talent_exams', sa.JSON(), nullable=False),
        sa.Column('aptitude_exams', sa.JSON(), nullable=False),
        sa.Column('certifications', sa.JSON(), nullable=False),
        sa.Column('awards', sa.JSON(), nullable=False),
        sa.Column('conducts', sa.JSON(), nullable=False),
        sa.Column('academic_performances', sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_students_user_id', 'students', ['user_id'])

    op.create_table(
        'ocr_results',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('student_id', sa.UUID(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('file_id', sa.UUID(), nullable=False),
        sa.Column('status', ocr_status, nullable=False),
        sa.Column('grade', sa.Integer(), nullable=True),
        sa.Column('semester', sa.Integer(), nullable=True),
        sa.Column('scores', sa.JSON(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_ocr_results_student_id', 'ocr_results', ['student_id'])
    op.create_index('ix_ocr_results_file_id', 'ocr_results', ['file_id'], unique=True)
    op.create_index('ix_ocr_results_status', 'ocr_results', ['status'])

    op.create_table(
        'transcripts',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('student_id', sa.UUID(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('grade', sa.Integer(), nullable=True),
        sa.Column('semester', sa.Integer(), nullable=True),
        sa.Column('ocr_result_id', sa.UUID(), sa.ForeignKey('ocr_results.id', ondelete='SET NULL'), nullable=True),
        sa.Column('subjects', sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_transcripts_student_id', 'transcripts', ['student_id'])

    op.create_table(
        'admissions',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('admission_code', sa.String(100), nullable=False),
        sa.Column('subject_combination', sa.String(20), nullable=True),
        sa.Column('province', sa.String(100), nullable=True),
        sa.Column('uni_type', sa.String(100), nullable=True),
        sa.Column('university_code', sa.String(50), nullable=True),
        sa.Column('university_name', sa.String(255), nullable=True),
        sa.Column('major_code', sa.String(50), nullable=True),
        sa.Column('major_name', sa.String(255), nullable=True),
        sa.Column('tuition_fee', sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_admissions_admission_code', 'admissions', ['admission_code'])

    op.create_table(
        'prediction_results',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('student_id', sa.UUID(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('status', prediction_status, nullable=False),
        sa.Column('created_by', sa.String(255), nullable=False),
        sa.Column('updated_by', sa.String(255), nullable=True),
        sa.Column('l1_results', sa.JSON(), nullable=True),
        sa.Column('l2_results', sa.JSON(), nullable=True),
        sa.Column('l3_results', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_prediction_results_student_id', 'prediction_results', ['student_id'])
    op.create_index('ix_prediction_results_user_id', 'prediction_results', ['user_id'])
    op.create_index('ix_prediction_results_status', 'prediction_results', ['status'])

    op.create_table(
        'student_admissions',
        sa.Column('id', sa.UUID(), nullable=False, primary_key=True),
        sa.Column('student_id', sa.UUID(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('admission_id', sa.UUID(), sa.ForeignKey('admissions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('student_id', 'admission_id', name='uq_student_admissions_student_admission'),
    )
    op.create_index('ix_student_admissions_student_id', 'student_admissions', ['student_id'])
    op.create_index('ix_student_admissions_admission_id', 'student_admissions', ['admission_id'])


def downgrade() -> None:
    """Remove prediction pipeline tables."""
    op.drop_index('ix_student_admissions_admission_id', table_name='student_admissions')
    op.drop_index('ix_student_admissions_student_id', table_name='student_admissions')
    op.drop_table('student_admissions')
    op.drop_index('ix_prediction_results_status', table_name='prediction_results')
    op.drop_index('ix_prediction_results_user_id', table_name='prediction_results')
    op.drop_index('ix_prediction_results_student_id', table_name='prediction_results')
    op.drop_table('prediction_results')
    op.drop_index('ix_admissions_admission_code', table_name='admissions')
    op.drop_table('admissions')
    op.drop_index('ix_transcripts_student_id', table_name='transcripts')
    op.drop_table('transcripts')
    op.drop_index('ix_ocr_results_status', table_name='ocr_results')
    op.drop_index('ix_ocr_results_file_id', table_name='ocr_results')
    op.drop_index('ix_ocr_results_student_id', table_name='ocr_results')
    op.drop_table('ocr_results')
    op.drop_index('ix_students_user_id', table_name='students')
    op.drop_table('students')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    prediction_status.drop(op.get_bind(), checkfirst=True)
    ocr_status.drop(op.get_bind(), checkfirst=True)
