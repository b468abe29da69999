from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from timegrid.db.bootstrap import missing_schema_items
from timegrid.db.session import engine
from timegrid.services.periods import get_period_table

router = APIRouter()
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _database_status() -> dict:
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            missing_tables, missing_columns = missing_schema_items(connection)
    except SQLAlchemyError as exc:
        logger.warning("Readiness check could not reach the database: %s", exc)
        return {"ok": False, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": str(exc)}
    return {
        "ok": True,
        "schema_ok": not missing_tables and not missing_columns,
        "missing_tables": missing_tables,
        "missing_columns": missing_columns,
        "error": None,
    }


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    database = _database_status()
    periods = get_period_table()
    ready = database["ok"] and database["schema_ok"]
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": _now(),
        "database": database,
        "periods": {"count": len(periods), "day_start": periods.day_start, "day_end": periods.day_end},
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
