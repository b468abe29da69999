from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from timegrid.api.deps import get_current_user, get_db, require_editor
from timegrid.models.schedule import Schedule
from timegrid.models.teacher import Teacher
from timegrid.models.user import User
from timegrid.schemas.teacher import TeacherCreate, TeacherHoursOut, TeacherOut, TeacherUpdate
from timegrid.services.audit import log_activity
from timegrid.services.schedule_store import entry_from_row
from timegrid.services.workload import weekly_minutes
from timegrid.services.time_model import format_duration

router = APIRouter()


def _get_teacher(db: Session, teacher_id: str) -> Teacher:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return teacher


@router.get("", response_model=list[TeacherOut])
def list_teachers(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[TeacherOut]:
    return list(db.execute(select(Teacher).order_by(Teacher.name.asc())).scalars())


@router.post("", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> TeacherOut:
    existing = db.execute(select(Teacher).where(Teacher.email == payload.email)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    db.flush()
    log_activity(db, user=current_user, action="teacher.create", entity_type="teacher", entity_id=teacher.id)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.put("/{teacher_id}", response_model=TeacherOut)
def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = _get_teacher(db, teacher_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in data:
        existing = db.execute(
            select(Teacher).where(Teacher.email == data["email"], Teacher.id != teacher_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")

    for key, value in data.items():
        setattr(teacher, key, value)
    if data:
        log_activity(db, user=current_user, action="teacher.update", entity_type="teacher", entity_id=teacher.id, details=data)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.delete("/{teacher_id}")
def delete_teacher(
    teacher_id: str,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> dict:
    teacher = _get_teacher(db, teacher_id)
    log_activity(db, user=current_user, action="teacher.delete", entity_type="teacher", entity_id=teacher.id)
    # Schedule rows go with the teacher through the relationship cascade.
    db.delete(teacher)
    db.commit()
    return {"success": True}


@router.get("/{teacher_id}/hours", response_model=TeacherHoursOut)
def teacher_hours(
    teacher_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TeacherHoursOut:
    _get_teacher(db, teacher_id)
    rows = db.execute(select(Schedule).where(Schedule.teacher_id == teacher_id)).scalars()
    minutes = weekly_minutes((entry_from_row(row) for row in rows), teacher_id)
    return TeacherHoursOut(teacher_id=teacher_id, minutes=minutes, label=format_duration(minutes))
