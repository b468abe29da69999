from __future__ import annotations

import logging

from sqlalchemy import inspect

from timegrid.db.base import Base
from timegrid.db.session import engine
import timegrid.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "hashed_password"},
    "teachers": {"id", "name", "email", "color"},
    "subjects": {"id", "name", "color", "type"},
    "year_groups": {"id", "name", "sort_order"},
    "students": {"id", "name", "year_group_id"},
    "schedules": {
        "id",
        "teacher_id",
        "subject_id",
        "year_group_id",
        "day_of_week",
        "start_time",
        "end_time",
    },
    "schedule_students": {"schedule_id", "student_id"},
    "activity_logs": {"id", "user_id", "request_id", "action", "entity_type", "entity_id", "details"},
}


def missing_schema_items(connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(required - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        missing_tables, missing_columns = missing_schema_items(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
