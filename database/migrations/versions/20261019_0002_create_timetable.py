"""create timetable tables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


subject_type_enum = sa.Enum("MAIN", "ELECTIVE", "ACTIVITY", name="subject_type")


def upgrade() -> None:
    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("color", sa.String(length=7), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_teachers_email", "teachers", ["email"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("color", sa.String(length=7), nullable=False),
        sa.Column("type", subject_type_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_name", "subjects", ["name"], unique=True)

    op.create_table(
        "year_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_year_groups_name", "year_groups", ["name"], unique=True)

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("year_group_id", sa.String(length=36), sa.ForeignKey("year_groups.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_students_name", "students", ["name"])

    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("year_group_id", sa.String(length=36), sa.ForeignKey("year_groups.id", ondelete="CASCADE"), nullable=True),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedules_teacher_id", "schedules", ["teacher_id"])
    op.create_index("ix_schedules_subject_id", "schedules", ["subject_id"])
    op.create_index("ix_schedules_year_group_id", "schedules", ["year_group_id"])

    op.create_table(
        "schedule_students",
        sa.Column("schedule_id", sa.String(length=36), sa.ForeignKey("schedules.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("schedule_students")
    op.drop_index("ix_schedules_year_group_id", table_name="schedules")
    op.drop_index("ix_schedules_subject_id", table_name="schedules")
    op.drop_index("ix_schedules_teacher_id", table_name="schedules")
    op.drop_table("schedules")
    op.drop_index("ix_students_name", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_year_groups_name", table_name="year_groups")
    op.drop_table("year_groups")
    op.drop_index("ix_subjects_name", table_name="subjects")
    op.drop_table("subjects")
    subject_type_enum.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_teachers_email", table_name="teachers")
    op.drop_table("teachers")
