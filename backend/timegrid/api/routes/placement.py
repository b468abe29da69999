from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timegrid.api.deps import get_db, require_editor
from timegrid.models.user import User
from timegrid.schemas.placement import DropRequest, MutationPlanOut, PlacementApplyOut
from timegrid.schemas.schedule import ScheduleOut
from timegrid.services.entries import Persisted
from timegrid.services.periods import get_period_table
from timegrid.services.placement import DropEvent, DropKind, DropTarget, MutationPlan, resolve_drop
from timegrid.services.schedule_store import apply_plan, load_entries_for_drop, year_group_ids

router = APIRouter()


def _plan_for(payload: DropRequest, db: Session) -> MutationPlan:
    target = DropTarget(
        teacher_id=payload.teacher_id,
        day_of_week=payload.day_of_week,
        period=get_period_table().get(payload.period_id),
    )
    if payload.kind == DropKind.create.value:
        event = DropEvent.create(payload.subject_id, target)
    else:
        event = DropEvent.move(Persisted(payload.entry_id), target)
    schedules = load_entries_for_drop(
        db,
        teacher_id=payload.teacher_id,
        day_of_week=payload.day_of_week,
        entry_id=payload.entry_id,
    )
    return resolve_drop(
        event,
        schedules,
        selected_year_group_id=payload.selected_year_group_id,
        year_group_ids=year_group_ids(db),
    )


@router.post("/placement/resolve", response_model=MutationPlanOut)
def resolve_placement(
    payload: DropRequest,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> MutationPlanOut:
    return MutationPlanOut.from_plan(_plan_for(payload, db))


@router.post("/placement/apply", response_model=PlacementApplyOut)
def apply_placement(
    payload: DropRequest,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> PlacementApplyOut:
    plan = _plan_for(payload, db)
    rows = apply_plan(db, plan, user=current_user)
    db.commit()
    for row in rows:
        db.refresh(row)
    return PlacementApplyOut(
        plan=MutationPlanOut.from_plan(plan),
        schedules=[ScheduleOut.model_validate(row) for row in rows],
    )
