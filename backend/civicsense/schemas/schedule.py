from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from civicsense.models.schedule_item import RecurrencePattern, SchedulePriority, ScheduleStatus


def _wall_clock(value: datetime | None) -> datetime | None:
    # Stored times are local wall-clock; an offset is dropped, not converted.
    if value is None:
        return None
    return value.replace(tzinfo=None)


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class ScheduleItemCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    start_time: datetime
    end_time: datetime
    location: str | None = Field(default=None, max_length=300)
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    scope: str = Field(min_length=1, max_length=200)
    priority: SchedulePriority = SchedulePriority.medium
    status: ScheduleStatus = ScheduleStatus.pending
    assigned_to: str | None = Field(default=None, max_length=200)

    @field_validator("title", "scope")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped

    @field_validator("description", "location", "assigned_to")
    @classmethod
    def normalize_optional_text(cls, value: str | None) -> str | None:
        return _strip_optional(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value: datetime) -> datetime:
        return _wall_clock(value)

    @model_validator(mode="after")
    def validate_window(self) -> "ScheduleItemCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if not self.is_recurring:
            self.recurrence_pattern = None
        return self


class ScheduleItemUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = Field(default=None, max_length=300)
    is_recurring: bool | None = None
    recurrence_pattern: RecurrencePattern | None = None
    scope: str | None = Field(default=None, min_length=1, max_length=200)
    priority: SchedulePriority | None = None
    status: ScheduleStatus | None = None
    assigned_to: str | None = Field(default=None, max_length=200)

    @field_validator("start_time", "end_time", "is_recurring", "priority", "status")
    @classmethod
    def reject_null(cls, value):
        # Omitting a field leaves it unchanged; an explicit null cannot clear a required column.
        if value is None:
            raise ValueError("Value cannot be null")
        return value

    @field_validator("title", "scope")
    @classmethod
    def validate_required_text(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("Value cannot be blank/null")
        stripped = value.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped

    @field_validator("description", "location", "assigned_to")
    @classmethod
    def normalize_optional_text(cls, value: str | None) -> str | None:
        return _strip_optional(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value: datetime | None) -> datetime | None:
        return _wall_clock(value)

    @model_validator(mode="after")
    def validate_window(self) -> "ScheduleItemUpdate":
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ScheduleItemOut(BaseModel):
    id: str
    title: str
    description: str | None
    start_time: datetime
    end_time: datetime
    location: str | None
    is_recurring: bool
    recurrence_pattern: RecurrencePattern | None
    scope: str
    priority: SchedulePriority
    status: ScheduleStatus
    assigned_to: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ScheduleListOut(BaseModel):
    schedules: list[ScheduleItemOut]
    pagination: Pagination


class ScheduleDeleteOut(BaseModel):
    message: str
