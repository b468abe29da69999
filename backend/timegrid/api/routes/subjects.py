from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from timegrid.api.deps import get_current_user, get_db, require_editor
from timegrid.models.subject import Subject
from timegrid.models.user import User
from timegrid.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from timegrid.services.audit import log_activity

router = APIRouter()


@router.get("", response_model=list[SubjectOut])
def list_subjects(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SubjectOut]:
    return list(db.execute(select(Subject).order_by(Subject.type.asc(), Subject.name.asc())).scalars())


@router.post("", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject name already exists")
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.flush()
    log_activity(db, user=current_user, action="subject.create", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        existing = db.execute(
            select(Subject).where(Subject.name == data["name"], Subject.id != subject_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject name already exists")

    for key, value in data.items():
        setattr(subject, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="subject.update",
            entity_type="subject",
            entity_id=subject.id,
            details=payload.model_dump(mode="json", exclude_unset=True, exclude_none=True),
        )
    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(
    subject_id: str,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> dict:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    log_activity(db, user=current_user, action="subject.delete", entity_type="subject", entity_id=subject.id)
    db.delete(subject)
    db.commit()
    return {"success": True}
