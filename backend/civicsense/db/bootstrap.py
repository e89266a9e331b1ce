from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import civicsense.models  # noqa: F401
from civicsense.db.base import Base
from civicsense.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "schedule_items": {
        "id",
        "title",
        "start_time",
        "end_time",
        "is_recurring",
        "scope",
        "priority",
        "status",
        "assigned_to",
    },
    "activity_logs": {"id", "action", "entity_type", "entity_id"},
}

# Columns added after the first schedules release, with their additive DDL.
SCHEDULE_ITEM_LATE_COLUMNS: dict[str, str] = {
    "priority": "ALTER TABLE schedule_items ADD COLUMN priority VARCHAR(20) NOT NULL DEFAULT 'medium'",
    "status": "ALTER TABLE schedule_items ADD COLUMN status VARCHAR(20) NOT NULL DEFAULT 'pending'",
    "assigned_to": "ALTER TABLE schedule_items ADD COLUMN assigned_to VARCHAR(200)",
}


def _ensure_schedule_item_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "schedule_items" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("schedule_items")}
        for column_name, ddl in SCHEDULE_ITEM_LATE_COLUMNS.items():
            if column_name in column_names:
                continue
            logger.info("Adding missing column schedule_items.%s", column_name)
            connection.execute(text(ddl))


def schema_gaps(connection) -> tuple[list[str], dict[str, list[str]]]:
    """Tables and columns from ``REQUIRED_COLUMNS`` that the database lacks."""
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name in missing_tables:
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(required - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        missing_tables, missing_columns = schema_gaps(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        qualified = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(qualified)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_schedule_item_columns()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
