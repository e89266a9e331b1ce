"""Seed demo schedule items for the municipal departments, relative to today.

Run:
  PYTHONPATH=backend python scripts/seed_schedule_data.py
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from sqlalchemy import select

from civicsense.db.bootstrap import ensure_runtime_schema_compatibility
from civicsense.db.session import SessionLocal
from civicsense.models.schedule_item import ScheduleItem
from civicsense.schemas.schedule import ScheduleItemCreate
from civicsense.services.schedule_store import ScheduleStore
from civicsense.services.timetable import build_day_view

SEED_ACTOR = "seed-script"

# (day offset, start, end, title, scope, location, priority, assigned_to)
DEMO_SCHEDULES = [
    (0, "08:00", "16:00", "Road Maintenance - Main Street", "Public Works", "Main Street, Downtown", "high", "Public Works Team A"),
    (1, "07:00", "12:00", "Drainage System Cleaning", "Public Works", "Industrial Area", "medium", "Maintenance Crew"),
    (2, "09:00", "14:00", "Bridge Inspection", "Public Works", "Central Bridge", "high", "Bridge Inspection Team"),
    (0, "08:30", "12:30", "Water Quality Testing", "Water Department", "Water Treatment Plant", "high", "Water Quality Team"),
    (1, "09:00", "15:00", "Pipeline Maintenance", "Water Department", "North Zone Pipeline", "medium", "Pipeline Team"),
    (3, "08:00", "17:00", "Water Meter Reading", "Water Department", "Residential Areas", "low", "Meter Reading Team"),
    (0, "09:00", "12:00", "Street Light Maintenance", "Utilities", "Oak Avenue", "medium", "Electrical Team"),
    (2, "10:00", "16:00", "Power Grid Inspection", "Utilities", "Main Power Station", "high", "Power Grid Team"),
    (-1, "10:00", "14:00", "Traffic Signal Maintenance", "Traffic Department", "Broadway & 5th Street", "high", "Traffic Maintenance Team"),
    (1, "08:00", "12:00", "Traffic Flow Analysis", "Traffic Department", "City Center", "medium", "Traffic Analysis Team"),
    (2, "07:00", "11:00", "Park Cleanup", "Parks & Recreation", "Central Park", "low", "Parks Maintenance Team"),
    (3, "09:00", "13:00", "Playground Equipment Inspection", "Parks & Recreation", "Children's Park", "medium", "Safety Inspection Team"),
]


def _at(day: date, hhmm: str) -> datetime:
    hours, minutes = hhmm.split(":")
    return datetime.combine(day, time(int(hours), int(minutes)))


def _seed(store: ScheduleStore, today: date) -> int:
    created = 0
    for offset, start, end, title, scope, location, priority, assigned_to in DEMO_SCHEDULES:
        day = today + timedelta(days=offset)
        start_time = _at(day, start)
        existing = store.db.execute(
            select(ScheduleItem.id).where(
                ScheduleItem.title == title,
                ScheduleItem.scope == scope,
                ScheduleItem.start_time == start_time,
            )
        ).first()
        if existing is not None:
            continue
        store.create(
            ScheduleItemCreate(
                title=title,
                start_time=start_time,
                end_time=_at(day, end),
                scope=scope,
                location=location,
                priority=priority,
                assigned_to=assigned_to,
            )
        )
        created += 1
    return created


def main() -> None:
    ensure_runtime_schema_compatibility()
    today = date.today()
    with SessionLocal() as session:
        store = ScheduleStore(session, actor=SEED_ACTOR)
        created = _seed(store, today)
        view = build_day_view(store.list(), today)

    print(f"Seeded {created} schedule item(s).")
    print(f"Timetable for {view.day.isoformat()}:")
    for slot in view.slots:
        titles = ", ".join(item.title for item in slot.occupants) or "-"
        print(f"  {slot.hour_start}-{slot.hour_end} {slot.status.value:<8} {titles}")
    summary = view.summary
    print(f"  free={summary.free} occupied={summary.occupied} conflict={summary.conflict}")


if __name__ == "__main__":
    main()
