import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from civicsense.api.deps import get_now, get_store
from civicsense.core.config import get_settings
from civicsense.core.exceptions import StoreUnavailableError
from civicsense.schemas.schedule import ScheduleItemOut
from civicsense.schemas.timetable import DaySlotOut, DayTimetableOut, TimetableSummaryOut, WorkingHoursOut
from civicsense.services.schedule_store import ScheduleStore
from civicsense.services.timetable import DayScope, build_day_view, resolve_day, validate_working_hours

logger = logging.getLogger(__name__)

router = APIRouter()

STORE_UNAVAILABLE_MESSAGE = "Schedules could not be loaded right now; the timetable is shown without items."


@router.get("/day", response_model=DayTimetableOut)
def get_day_timetable(
    day_scope: DayScope = DayScope.today,
    chosen_date: date | None = Query(default=None, alias="date"),
    scope: str | None = Query(default=None, max_length=200),
    start_hour: int | None = Query(default=None, ge=0, le=24),
    end_hour: int | None = Query(default=None, ge=0, le=24),
    store: ScheduleStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> DayTimetableOut:
    settings = get_settings()
    work_start = settings.work_start_hour if start_hour is None else start_hour
    work_end = settings.work_end_hour if end_hour is None else end_hour
    validate_working_hours(work_start, work_end)

    if day_scope is DayScope.custom and chosen_date is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="A date is required when day_scope is custom",
        )
    day = resolve_day(day_scope, now, chosen_date)

    store_available = True
    message = None
    try:
        items = store.list(scope)
    except StoreUnavailableError:
        logger.warning("Building timetable for %s without items; schedule store unavailable", day)
        items = []
        store_available = False
        message = STORE_UNAVAILABLE_MESSAGE

    view = build_day_view(items, day, work_start, work_end)
    return DayTimetableOut(
        day=view.day,
        day_scope=day_scope,
        scope=scope,
        working_hours=WorkingHoursOut(start_hour=work_start, end_hour=work_end),
        agenda=[ScheduleItemOut.model_validate(item) for item in view.agenda],
        slots=[DaySlotOut.from_slot(slot) for slot in view.slots],
        summary=TimetableSummaryOut.from_summary(view.summary),
        store_available=store_available,
        message=message,
    )
