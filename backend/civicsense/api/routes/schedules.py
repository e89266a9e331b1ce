import math
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from civicsense.api.deps import get_now, get_store
from civicsense.core.config import get_settings
from civicsense.core.exceptions import ScheduleValidationError
from civicsense.schemas.schedule import (
    Pagination,
    ScheduleDeleteOut,
    ScheduleItemCreate,
    ScheduleItemOut,
    ScheduleItemUpdate,
    ScheduleListOut,
)
from civicsense.services.schedule_store import ScheduleStore

router = APIRouter()


def _wall_clock(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=None) if value is not None else None


@router.get("", response_model=ScheduleListOut)
def list_schedules(
    scope: str | None = Query(default=None, max_length=200),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    is_recurring: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    store: ScheduleStore = Depends(get_store),
) -> ScheduleListOut:
    filters = {
        "start_date": _wall_clock(start_date),
        "end_date": _wall_clock(end_date),
        "is_recurring": is_recurring,
    }
    total = store.count(scope, **filters)
    items = store.list(scope, offset=(page - 1) * limit, limit=limit, **filters)
    return ScheduleListOut(
        schedules=[ScheduleItemOut.model_validate(item) for item in items],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/upcoming", response_model=list[ScheduleItemOut])
def list_upcoming_schedules(
    limit: int = Query(default=10, ge=1, le=100),
    scope: str | None = Query(default=None, max_length=200),
    store: ScheduleStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> list[ScheduleItemOut]:
    days = get_settings().upcoming_window_days
    return store.upcoming(_wall_clock(now), limit=limit, days=days, scope=scope)


@router.get("/calendar/{start_date}/{end_date}", response_model=list[ScheduleItemOut])
def list_calendar_schedules(
    start_date: datetime,
    end_date: datetime,
    scope: str | None = Query(default=None, max_length=200),
    store: ScheduleStore = Depends(get_store),
) -> list[ScheduleItemOut]:
    start, end = _wall_clock(start_date), _wall_clock(end_date)
    if end < start:
        raise ScheduleValidationError(
            "end_date must not be before start_date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    return store.calendar(start, end, scope=scope)


@router.get("/{schedule_id}", response_model=ScheduleItemOut)
def get_schedule(schedule_id: str, store: ScheduleStore = Depends(get_store)) -> ScheduleItemOut:
    return store.get(schedule_id)


@router.post("", response_model=ScheduleItemOut, status_code=status.HTTP_201_CREATED)
def create_schedule(payload: ScheduleItemCreate, store: ScheduleStore = Depends(get_store)) -> ScheduleItemOut:
    return store.create(payload)


@router.patch("/{schedule_id}", response_model=ScheduleItemOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleItemUpdate,
    store: ScheduleStore = Depends(get_store),
) -> ScheduleItemOut:
    return store.update(schedule_id, payload)


@router.delete("/{schedule_id}", response_model=ScheduleDeleteOut)
def delete_schedule(schedule_id: str, store: ScheduleStore = Depends(get_store)) -> ScheduleDeleteOut:
    store.delete(schedule_id)
    return ScheduleDeleteOut(message="Schedule deleted successfully")
