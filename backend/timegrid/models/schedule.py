import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from timegrid.db.base import Base


schedule_students = Table(
    "schedule_students",
    Base.metadata,
    Column("schedule_id", String(36), ForeignKey("schedules.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", String(36), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
)


class Schedule(Base):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    # NULL means the entry applies to every year group.
    year_group_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("year_groups.id", ondelete="CASCADE"), index=True, nullable=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("Teacher", back_populates="schedules")
    subject = relationship("Subject", back_populates="schedules")
    students = relationship("Student", secondary=schedule_students, lazy="selectin")

    @property
    def student_ids(self) -> list[str]:
        return sorted(student.id for student in self.students)
