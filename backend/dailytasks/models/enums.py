from __future__ import annotations

import enum
from datetime import date


class TaskPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecurrenceType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    ONCE = "once"


class Weekday(str, enum.Enum):
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @classmethod
    def of(cls, value: date) -> "Weekday":
        # date.weekday(): Monday == 0
        return WEEK[value.weekday()]

    @property
    def index(self) -> int:
        return WEEK.index(self)


WEEK: tuple[Weekday, ...] = tuple(Weekday)
WORKING_DAYS: frozenset[Weekday] = frozenset(WEEK[:5])
WEEKEND_DAYS: frozenset[Weekday] = frozenset(WEEK[5:])


class OccurrenceState(str, enum.Enum):
    NOT_SCHEDULED = "NOT_SCHEDULED"
    NOT_YET_ASSIGNED = "NOT_YET_ASSIGNED"
    FUTURE = "FUTURE"
    PENDING_COMPLETION = "PENDING_COMPLETION"
    COMPLETED_ON_TIME = "COMPLETED_ON_TIME"
    COMPLETED_LATE = "COMPLETED_LATE"
