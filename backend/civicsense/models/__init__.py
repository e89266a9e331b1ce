from civicsense.models.activity_log import ActivityLog  # noqa: F401
from civicsense.models.schedule_item import (  # noqa: F401
    RecurrencePattern,
    ScheduleItem,
    SchedulePriority,
    ScheduleStatus,
)
