from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from timegrid.api.deps import get_current_user, get_db, require_editor
from timegrid.models.schedule import Schedule
from timegrid.models.user import User
from timegrid.schemas.schedule import ScheduleCreate, ScheduleOut, ScheduleUpdate
from timegrid.services.entries import EntryFields
from timegrid.services.schedule_store import create_schedule, delete_schedule, entry_from_row, update_schedule

router = APIRouter()


@router.get("", response_model=list[ScheduleOut])
def list_schedules(
    teacher_id: str | None = None,
    day_of_week: int | None = None,
    year_group_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    query = select(Schedule).order_by(Schedule.day_of_week.asc(), Schedule.start_time.asc())
    if teacher_id:
        query = query.where(Schedule.teacher_id == teacher_id)
    if day_of_week is not None:
        query = query.where(Schedule.day_of_week == day_of_week)
    if year_group_id:
        query = query.where(Schedule.year_group_id == year_group_id)
    return list(db.execute(query).scalars())


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(
    payload: ScheduleCreate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    row = create_schedule(db, payload.to_fields(), user=current_user)
    db.commit()
    db.refresh(row)
    return row


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule_entry(
    schedule_id: str,
    payload: ScheduleUpdate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    row = db.get(Schedule, schedule_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")

    data = entry_from_row(row).fields.to_payload()
    changes = payload.model_dump(exclude_unset=True)
    # Only year_group_id may be cleared; null elsewhere means "unchanged".
    data.update({key: value for key, value in changes.items() if value is not None or key == "year_group_id"})
    try:
        fields = EntryFields.from_payload(data)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    update_schedule(db, row, fields, user=current_user)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{schedule_id}")
def delete_schedule_entry(
    schedule_id: str,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> dict:
    row = db.get(Schedule, schedule_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    delete_schedule(db, row, user=current_user)
    db.commit()
    return {"success": True}
