from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel

from civicsense.schemas.schedule import ScheduleItemOut
from civicsense.services.timetable import DayScope, DaySlot, SlotStatus, TimetableSummary


class SlotOccupantOut(BaseModel):
    id: str
    title: str
    start_time: datetime
    end_time: datetime

    model_config = {"from_attributes": True}


class DaySlotOut(BaseModel):
    hour_start: str
    hour_end: str
    status: SlotStatus
    occupants: list[SlotOccupantOut]

    @classmethod
    def from_slot(cls, slot: DaySlot) -> "DaySlotOut":
        return cls(
            hour_start=slot.hour_start,
            hour_end=slot.hour_end,
            status=slot.status,
            occupants=[SlotOccupantOut.model_validate(item) for item in slot.occupants],
        )


class TimetableSummaryOut(BaseModel):
    free: int
    occupied: int
    conflict: int
    total: int

    @classmethod
    def from_summary(cls, summary: TimetableSummary) -> "TimetableSummaryOut":
        return cls(
            free=summary.free,
            occupied=summary.occupied,
            conflict=summary.conflict,
            total=summary.total,
        )


class WorkingHoursOut(BaseModel):
    start_hour: int
    end_hour: int


class DayTimetableOut(BaseModel):
    day: date
    day_scope: DayScope
    scope: str | None
    working_hours: WorkingHoursOut
    agenda: list[ScheduleItemOut]
    slots: list[DaySlotOut]
    summary: TimetableSummaryOut
    store_available: bool = True
    message: str | None = None
