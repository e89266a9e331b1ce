"""Day timetable engine for schedule items.

Everything here is a pure function of its inputs: callers hand in an already
materialized list of schedule items (ORM rows, schemas or plain mappings) and
get back read-only views. Nothing is cached between calls.

Times are local wall-clock values. Timezone-aware inputs keep their wall-clock
reading and lose the offset; no conversion is done.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from civicsense.core.exceptions import InvalidWorkingHoursError

logger = logging.getLogger(__name__)

DEFAULT_WORK_START_HOUR = 9
DEFAULT_WORK_END_HOUR = 18
MINUTES_PER_DAY = 24 * 60


class DayScope(str, Enum):
    yesterday = "yesterday"
    today = "today"
    tomorrow = "tomorrow"
    custom = "custom"


class SlotStatus(str, Enum):
    free = "free"
    occupied = "occupied"
    conflict = "conflict"


@dataclass(frozen=True)
class DaySlot:
    hour_start: str
    hour_end: str
    status: SlotStatus
    occupants: tuple[Any, ...] = ()

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.hour_start)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.hour_end)


@dataclass(frozen=True)
class TimetableSummary:
    free: int = 0
    occupied: int = 0
    conflict: int = 0

    @property
    def total(self) -> int:
        return self.free + self.occupied + self.conflict


@dataclass(frozen=True)
class DayView:
    day: date
    agenda: list[Any]
    slots: list[DaySlot]
    summary: TimetableSummary


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_hhmm(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def resolve_day(scope: DayScope | str, now: datetime | date, chosen: date | None = None) -> date:
    """Turn a named day scope into a calendar date relative to ``now``."""
    scope = DayScope(scope)
    today = now.date() if isinstance(now, datetime) else now
    if scope is DayScope.yesterday:
        return today - timedelta(days=1)
    if scope is DayScope.today:
        return today
    if scope is DayScope.tomorrow:
        return today + timedelta(days=1)
    if chosen is None:
        raise ValueError("A custom day scope needs an explicit date")
    return chosen.date() if isinstance(chosen, datetime) else chosen


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


# Store rows use snake_case; payloads from the dashboard may use camelCase.
_FIELD_ALIASES = {
    "start_time": ("start_time", "startTime"),
    "end_time": ("end_time", "endTime"),
}


def _raw_field(item: Any, name: str) -> Any:
    for key in _FIELD_ALIASES[name]:
        if isinstance(item, Mapping):
            value = item.get(key)
        else:
            value = getattr(item, key, None)
        if value is not None:
            return value
    return None


def _normalize_utc_suffix(value: str) -> str:
    # fromisoformat only accepts a trailing "Z" from Python 3.11.
    if value[-1] in "Zz":
        return value[:-1] + "+00:00"
    return value


def _coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(_normalize_utc_suffix(value.strip()))
        except ValueError:
            return None
    else:
        return None
    return parsed.replace(tzinfo=None)


def item_window(item: Any) -> tuple[datetime, datetime] | None:
    """Return ``(start, end)`` for an item, or ``None`` when either is missing or unparseable."""
    start = _coerce_datetime(_raw_field(item, "start_time"))
    end = _coerce_datetime(_raw_field(item, "end_time"))
    if start is None or end is None:
        return None
    return start, end


def _item_label(item: Any) -> str:
    if isinstance(item, Mapping):
        return str(item.get("id") or item.get("title") or "<unknown>")
    return str(getattr(item, "id", None) or getattr(item, "title", None) or "<unknown>")


def filter_items_for_day(items: Iterable[Any], day: date) -> list[Any]:
    """Items whose start time falls on ``day``.

    Only the start is tested, so an item running past midnight stays on the
    day it starts. Malformed items are dropped.
    """
    lower = start_of_day(day)
    upper = end_of_day(day)
    selected: list[Any] = []
    for item in items:
        window = item_window(item)
        if window is None:
            logger.debug("Skipping schedule item %s with missing or invalid times", _item_label(item))
            continue
        if lower <= window[0] <= upper:
            selected.append(item)
    return selected


def agenda_for_day(items: Iterable[Any], day: date) -> list[Any]:
    return sorted(filter_items_for_day(items, day), key=lambda item: item_window(item)[0])


def _minutes_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def item_minutes(item: Any) -> tuple[int, int] | None:
    """Start and end of an item as minutes since midnight of its start day.

    Comparison is on time of day, except that an end on a later calendar day
    is clamped to 24:00 rather than read as an earlier clock time. A 22:30 to
    01:00 item therefore fills 22:00 and 23:00 instead of being treated as an
    inverted interval.
    """
    window = item_window(item)
    if window is None:
        return None
    start, end = window
    end_minutes = MINUTES_PER_DAY if end.date() > start.date() else _minutes_of_day(end)
    return _minutes_of_day(start), end_minutes


def overlaps(item: Any, slot_start: int, slot_end: int) -> bool:
    """Half-open time-of-day intersection between an item and ``[slot_start, slot_end)`` minutes."""
    minutes = item_minutes(item)
    if minutes is None:
        return False
    start, end = minutes
    return start < slot_end and end > slot_start


def classify(occupant_count: int) -> SlotStatus:
    if occupant_count <= 0:
        return SlotStatus.free
    if occupant_count == 1:
        return SlotStatus.occupied
    return SlotStatus.conflict


def validate_working_hours(work_start_hour: int, work_end_hour: int) -> None:
    if not 0 <= work_start_hour < work_end_hour <= 24:
        raise InvalidWorkingHoursError(work_start_hour, work_end_hour)


def build_grid(
    day_items: Sequence[Any],
    work_start_hour: int = DEFAULT_WORK_START_HOUR,
    work_end_hour: int = DEFAULT_WORK_END_HOUR,
) -> list[DaySlot]:
    validate_working_hours(work_start_hour, work_end_hour)

    grid: list[DaySlot] = []
    for hour in range(work_start_hour, work_end_hour):
        slot_start = hour * 60
        slot_end = slot_start + 60
        occupants = tuple(item for item in day_items if overlaps(item, slot_start, slot_end))
        grid.append(
            DaySlot(
                hour_start=format_minutes(slot_start),
                hour_end=format_minutes(slot_end),
                status=classify(len(occupants)),
                occupants=occupants,
            )
        )
    return grid


def summarize(grid: Iterable[DaySlot]) -> TimetableSummary:
    counts = Counter(slot.status for slot in grid)
    return TimetableSummary(
        free=counts[SlotStatus.free],
        occupied=counts[SlotStatus.occupied],
        conflict=counts[SlotStatus.conflict],
    )


def build_day_view(
    items: Iterable[Any],
    day: date,
    work_start_hour: int = DEFAULT_WORK_START_HOUR,
    work_end_hour: int = DEFAULT_WORK_END_HOUR,
) -> DayView:
    agenda = agenda_for_day(items, day)
    slots = build_grid(agenda, work_start_hour, work_end_hour)
    return DayView(day=day, agenda=agenda, slots=slots, summary=summarize(slots))
