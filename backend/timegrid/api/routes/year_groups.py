from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from timegrid.api.deps import get_current_user, get_db, require_editor
from timegrid.models.schedule import Schedule
from timegrid.models.student import Student
from timegrid.models.user import User
from timegrid.models.year_group import YearGroup
from timegrid.schemas.year_group import YearGroupCreate, YearGroupOut, YearGroupUpdate
from timegrid.services.audit import log_activity

router = APIRouter()


@router.get("", response_model=list[YearGroupOut])
def list_year_groups(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[YearGroupOut]:
    query = select(YearGroup).order_by(YearGroup.sort_order.asc(), YearGroup.name.asc())
    return list(db.execute(query).scalars())


@router.post("", response_model=YearGroupOut, status_code=status.HTTP_201_CREATED)
def create_year_group(
    payload: YearGroupCreate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> YearGroupOut:
    existing = db.execute(select(YearGroup).where(YearGroup.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Year group already exists")
    year_group = YearGroup(**payload.model_dump())
    db.add(year_group)
    db.flush()
    log_activity(db, user=current_user, action="year_group.create", entity_type="year_group", entity_id=year_group.id)
    db.commit()
    db.refresh(year_group)
    return year_group


@router.put("/{year_group_id}", response_model=YearGroupOut)
def update_year_group(
    year_group_id: str,
    payload: YearGroupUpdate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> YearGroupOut:
    year_group = db.get(YearGroup, year_group_id)
    if year_group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Year group not found")
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        existing = db.execute(
            select(YearGroup).where(YearGroup.name == data["name"], YearGroup.id != year_group_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Year group already exists")
    for key, value in data.items():
        setattr(year_group, key, value)
    if data:
        log_activity(
            db, user=current_user, action="year_group.update", entity_type="year_group", entity_id=year_group.id, details=data
        )
    db.commit()
    db.refresh(year_group)
    return year_group


@router.delete("/{year_group_id}")
def delete_year_group(
    year_group_id: str,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> dict:
    year_group = db.get(YearGroup, year_group_id)
    if year_group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Year group not found")
    # SQLite does not enforce the foreign keys, so clean up explicitly.
    for row in db.execute(select(Schedule).where(Schedule.year_group_id == year_group_id)).scalars():
        db.delete(row)
    db.execute(update(Student).where(Student.year_group_id == year_group_id).values(year_group_id=None))
    log_activity(db, user=current_user, action="year_group.delete", entity_type="year_group", entity_id=year_group.id)
    db.delete(year_group)
    db.commit()
    return {"success": True}
