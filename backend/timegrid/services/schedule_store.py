from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from timegrid.core.exceptions import ResolutionError, ResourceNotFoundError
from timegrid.models.schedule import Schedule
from timegrid.models.student import Student
from timegrid.models.subject import Subject
from timegrid.models.teacher import Teacher
from timegrid.models.user import User
from timegrid.models.year_group import YearGroup
from timegrid.services.audit import log_activity
from timegrid.services.entries import EntryFields, Persisted, ScheduleEntry
from timegrid.services.placement import CreateEntry, DeleteEntry, MutationPlan, UpdateEntry

logger = logging.getLogger(__name__)


def entry_from_row(row: Schedule) -> ScheduleEntry:
    return ScheduleEntry(
        id=Persisted(row.id),
        fields=EntryFields(
            teacher_id=row.teacher_id,
            subject_id=row.subject_id,
            year_group_id=row.year_group_id,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
            student_ids=tuple(row.student_ids),
        ),
    )


def load_entries_for_drop(db: Session, *, teacher_id: str, day_of_week: int, entry_id: str | None = None) -> list[ScheduleEntry]:
    condition = (Schedule.teacher_id == teacher_id) & (Schedule.day_of_week == day_of_week)
    if entry_id:
        condition = or_(condition, Schedule.id == entry_id)
    rows = db.execute(select(Schedule).where(condition)).scalars()
    return [entry_from_row(row) for row in rows]


def year_group_ids(db: Session) -> list[str]:
    query = select(YearGroup.id).order_by(YearGroup.sort_order.asc(), YearGroup.name.asc())
    return list(db.execute(query).scalars())


def _require(db: Session, model, resource_type: str, resource_id: str):
    row = db.get(model, resource_id)
    if row is None:
        raise ResourceNotFoundError(resource_type, resource_id)
    return row


def _resolve_students(db: Session, student_ids: Iterable[str]) -> list[Student]:
    wanted = list(student_ids)
    if not wanted:
        return []
    found = {student.id: student for student in db.execute(select(Student).where(Student.id.in_(wanted))).scalars()}
    missing = [student_id for student_id in wanted if student_id not in found]
    if missing:
        raise ResourceNotFoundError("Student", missing[0])
    return [found[student_id] for student_id in wanted]


def _check_references(db: Session, fields: EntryFields) -> None:
    _require(db, Teacher, "Teacher", fields.teacher_id)
    _require(db, Subject, "Subject", fields.subject_id)
    if fields.year_group_id is not None:
        _require(db, YearGroup, "Year group", fields.year_group_id)


def create_schedule(db: Session, fields: EntryFields, *, user: User | None = None) -> Schedule:
    _check_references(db, fields)
    row = Schedule(
        teacher_id=fields.teacher_id,
        subject_id=fields.subject_id,
        year_group_id=fields.year_group_id,
        day_of_week=fields.day_of_week,
        start_time=fields.start_time,
        end_time=fields.end_time,
    )
    row.students = _resolve_students(db, fields.student_ids)
    db.add(row)
    db.flush()
    log_activity(db, user=user, action="schedule.create", entity_type="schedule", entity_id=row.id, details=fields.to_payload())
    return row


def update_schedule(db: Session, row: Schedule, fields: EntryFields, *, user: User | None = None) -> Schedule:
    _check_references(db, fields)
    row.teacher_id = fields.teacher_id
    row.subject_id = fields.subject_id
    row.year_group_id = fields.year_group_id
    row.day_of_week = fields.day_of_week
    row.start_time = fields.start_time
    row.end_time = fields.end_time
    row.students = _resolve_students(db, fields.student_ids)
    db.flush()
    log_activity(db, user=user, action="schedule.update", entity_type="schedule", entity_id=row.id, details=fields.to_payload())
    return row


def delete_schedule(db: Session, row: Schedule, *, user: User | None = None) -> None:
    log_activity(db, user=user, action="schedule.delete", entity_type="schedule", entity_id=row.id)
    db.delete(row)
    db.flush()


def _live_row(db: Session, entry_id) -> Schedule:
    if not isinstance(entry_id, Persisted):
        raise ResolutionError("Only saved entries can be changed on the server", details={"entry_id": str(entry_id)})
    row = db.get(Schedule, entry_id.value)
    if row is None:
        raise ResolutionError("Schedule entry no longer exists", details={"entry_id": entry_id.value})
    return row


def apply_plan(db: Session, plan: MutationPlan, *, user: User | None = None) -> list[Schedule]:
    """Run every mutation of ``plan`` in the caller's transaction.

    Rows are looked up before anything is written, so a stale plan fails
    with ``ResolutionError`` and leaves the session untouched.
    """
    rows = {
        op.entry_id: _live_row(db, op.entry_id)
        for op in plan.mutations
        if isinstance(op, (UpdateEntry, DeleteEntry))
    }
    touched: list[Schedule] = []
    for op in plan.mutations:
        if isinstance(op, CreateEntry):
            touched.append(create_schedule(db, op.fields, user=user))
        elif isinstance(op, UpdateEntry):
            touched.append(update_schedule(db, rows[op.entry_id], op.fields, user=user))
        elif isinstance(op, DeleteEntry):
            delete_schedule(db, rows[op.entry_id], user=user)
    logger.info("Applied %s plan with %d mutation(s)", plan.outcome.value, len(plan.mutations))
    return touched
