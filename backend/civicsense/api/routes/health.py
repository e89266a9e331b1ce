"""Liveness and readiness checks for the schedule service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from civicsense.core.config import get_settings
from civicsense.db import bootstrap
from civicsense.db.session import engine
from civicsense.models.schedule_item import ScheduleItem

logger = logging.getLogger(__name__)

router = APIRouter()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _schedule_store_status() -> dict:
    status = {
        "reachable": True,
        "schema_ok": False,
        "missing_tables": [],
        "missing_columns": {},
        "schedule_items": None,
        "error": None,
    }
    try:
        with engine.connect() as connection:
            missing_tables, missing_columns = bootstrap.schema_gaps(connection)
            status["missing_tables"] = missing_tables
            status["missing_columns"] = missing_columns
            status["schema_ok"] = not missing_tables and not missing_columns
            if status["schema_ok"]:
                count_query = select(func.count()).select_from(ScheduleItem.__table__)
                status["schedule_items"] = connection.execute(count_query).scalar_one()
    except SQLAlchemyError as exc:
        logger.warning("Schedule store unreachable during readiness check: %s", exc)
        status["reachable"] = False
        status["error"] = str(exc)
    return status


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "service": get_settings().project_name}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _utc_timestamp()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    settings = get_settings()
    store = _schedule_store_status()
    ready = store["reachable"] and store["schema_ok"]
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": _utc_timestamp(),
        "store": store,
        "working_hours": {
            "start_hour": settings.work_start_hour,
            "end_hour": settings.work_end_hour,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
