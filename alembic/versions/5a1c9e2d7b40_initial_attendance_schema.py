"""initial attendance schema

Revision ID: 5a1c9e2d7b40
Revises:
Create Date: 2026-10-19 10:12:44.118302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5a1c9e2d7b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_departments_id', 'departments', ['id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('unique_id', sa.String(), nullable=False, unique=True),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('face_image', sa.Text(), nullable=True),
        sa.Column('face_descriptor', sa.JSON(), nullable=True),
        sa.Column('profile_picture', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('semester_start_date', sa.Date(), nullable=False),
        sa.Column('semester_duration', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_courses_id', 'courses', ['id'])
    op.create_index('ix_courses_code', 'courses', ['code'], unique=True)

    op.create_table(
        'course_schedule',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('day', sa.String(), nullable=False),
        sa.Column('start_time', sa.String(), nullable=True),
        sa.Column('end_time', sa.String(), nullable=True),
    )
    op.create_index('ix_course_schedule_id', 'course_schedule', ['id'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('course_id', 'student_id', name='uq_enrollment_course_student'),
    )
    op.create_index('ix_enrollments_id', 'enrollments', ['id'])

    op.create_table(
        'attendance_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False),
        sa.Column('lecture_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('session_identifier', sa.String(), nullable=False),
        sa.Column('qr_code', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_attendance_sessions_id', 'attendance_sessions', ['id'])
    op.create_index('ix_attendance_sessions_course_id', 'attendance_sessions', ['course_id'])
    op.create_index('ix_attendance_sessions_end_time', 'attendance_sessions', ['end_time'])
    op.create_index(
        'ix_attendance_sessions_session_identifier', 'attendance_sessions',
        ['session_identifier'], unique=True
    )

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('attendance_sessions.id'), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('lecture_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('marked_at', sa.DateTime(), nullable=True),
        sa.Column('method', sa.String(), nullable=True),
        sa.Column('face_descriptor', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )
    op.create_index('ix_attendance_id', 'attendance', ['id'])
    op.create_index('ix_attendance_course_id', 'attendance', ['course_id'])
    op.create_index('ix_attendance_student_id', 'attendance', ['student_id'])
    op.create_index('ix_attendance_session_id', 'attendance', ['session_id'])
    op.create_index('ix_attendance_status', 'attendance', ['status'])


def downgrade() -> None:
    op.drop_table('attendance')
    op.drop_table('attendance_sessions')
    op.drop_table('enrollments')
    op.drop_table('course_schedule')
    op.drop_table('courses')
    op.drop_table('users')
    op.drop_table('departments')
