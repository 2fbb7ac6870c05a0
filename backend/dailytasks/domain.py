"""Immutable snapshots the occurrence engine works on.

Rows are turned into these at the storage edge (see services/occurrence_sources.py);
nothing below imports SQLAlchemy or touches a session.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Union

from dailytasks.models.enums import OccurrenceState, TaskPriority, Weekday


@dataclass(frozen=True)
class Daily:
    pass


@dataclass(frozen=True)
class Weekly:
    weekdays: frozenset[Weekday]


@dataclass(frozen=True)
class Once:
    on: date


Recurrence = Union[Daily, Weekly, Once]


@dataclass(frozen=True)
class TemplateSnapshot:
    id: uuid.UUID
    title: str
    recurrence: Recurrence
    priority: TaskPriority = TaskPriority.LOW
    is_active: bool = True


@dataclass(frozen=True)
class AssignmentSnapshot:
    template_id: uuid.UUID
    user_id: uuid.UUID
    assigned_at: datetime
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool = True


@dataclass(frozen=True)
class CompletionSnapshot:
    template_id: uuid.UUID
    user_id: uuid.UUID
    for_date: date
    completed_at: datetime | None
    remarks: str | None = None
    is_active: bool = True

    @property
    def key(self) -> tuple[uuid.UUID, uuid.UUID, date]:
        return self.template_id, self.user_id, self.for_date


@dataclass(frozen=True)
class OccurrenceStatus:
    state: OccurrenceState
    hours_late: int | None = None

    @classmethod
    def completed_late(cls, hours_late: int) -> "OccurrenceStatus":
        return cls(OccurrenceState.COMPLETED_LATE, hours_late)

    @property
    def is_completed(self) -> bool:
        return self.state in (OccurrenceState.COMPLETED_ON_TIME, OccurrenceState.COMPLETED_LATE)


NOT_SCHEDULED = OccurrenceStatus(OccurrenceState.NOT_SCHEDULED)
NOT_YET_ASSIGNED = OccurrenceStatus(OccurrenceState.NOT_YET_ASSIGNED)
FUTURE = OccurrenceStatus(OccurrenceState.FUTURE)
PENDING_COMPLETION = OccurrenceStatus(OccurrenceState.PENDING_COMPLETION)
COMPLETED_ON_TIME = OccurrenceStatus(OccurrenceState.COMPLETED_ON_TIME)


@dataclass(frozen=True)
class OccurrenceCell:
    template_id: uuid.UUID
    for_date: date
    status: OccurrenceStatus
    completion: CompletionSnapshot | None = field(default=None, compare=False)


@dataclass(frozen=True)
class UserOccurrenceCell:
    template_id: uuid.UUID
    user_id: uuid.UUID
    status: OccurrenceStatus
    completion: CompletionSnapshot | None = field(default=None, compare=False)
