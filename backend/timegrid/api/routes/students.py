from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from timegrid.api.deps import get_current_user, get_db, require_editor
from timegrid.models.schedule import schedule_students
from timegrid.models.student import Student
from timegrid.models.user import User
from timegrid.models.year_group import YearGroup
from timegrid.schemas.student import StudentCreate, StudentOut
from timegrid.services.audit import log_activity

router = APIRouter()


@router.get("", response_model=list[StudentOut])
def list_students(
    year_group_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    query = select(Student).order_by(Student.name.asc())
    if year_group_id:
        query = query.where(Student.year_group_id == year_group_id)
    return list(db.execute(query).scalars())


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> StudentOut:
    if payload.year_group_id and db.get(YearGroup, payload.year_group_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Year group not found")
    student = Student(**payload.model_dump())
    db.add(student)
    db.flush()
    log_activity(db, user=current_user, action="student.create", entity_type="student", entity_id=student.id)
    db.commit()
    db.refresh(student)
    return student


@router.delete("/{student_id}")
def delete_student(
    student_id: str,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> dict:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    db.execute(delete(schedule_students).where(schedule_students.c.student_id == student_id))
    log_activity(db, user=current_user, action="student.delete", entity_type="student", entity_id=student.id)
    db.delete(student)
    db.commit()
    return {"success": True}
