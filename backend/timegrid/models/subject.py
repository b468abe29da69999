import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from timegrid.db.base import Base


class SubjectType(str, Enum):
    main = "MAIN"
    elective = "ELECTIVE"
    activity = "ACTIVITY"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#3b82f6")
    type: Mapped[SubjectType] = mapped_column(
        SAEnum(SubjectType, name="subject_type", values_callable=lambda items: [item.value for item in items]),
        nullable=False,
        default=SubjectType.main,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    schedules = relationship("Schedule", back_populates="subject", cascade="all, delete-orphan")
