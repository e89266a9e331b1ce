import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from civicsense.db.base import Base


class RecurrencePattern(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class SchedulePriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class ScheduleStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class ScheduleItem(Base):
    __tablename__ = "schedule_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Local wall-clock times; no timezone normalization is applied.
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_pattern: Mapped[RecurrencePattern | None] = mapped_column(
        SAEnum(RecurrencePattern, name="recurrence_pattern", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    scope: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    priority: Mapped[SchedulePriority] = mapped_column(
        SAEnum(SchedulePriority, name="schedule_priority", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=SchedulePriority.medium,
    )
    status: Mapped[ScheduleStatus] = mapped_column(
        SAEnum(ScheduleStatus, name="schedule_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=ScheduleStatus.pending,
    )
    assigned_to: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
