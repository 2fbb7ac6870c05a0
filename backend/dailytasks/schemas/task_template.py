from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from dailytasks.domain import Recurrence
from dailytasks.models.enums import RecurrenceType, TaskPriority, Weekday
from dailytasks.services.recurrence import build_recurrence


class TaskTemplateOut(BaseModel):
    id: uuid.UUID
    title: str
    description: str | None = None
    priority: TaskPriority
    assigned_by: uuid.UUID | None = None
    recurrence_type: RecurrenceType
    recurrence_weekdays: list[Weekday] = Field(default_factory=list)
    once_date: date | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TaskTemplateCreate(BaseModel):
    title: str = Field(min_length=2, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    priority: TaskPriority = TaskPriority.LOW
    assigned_by: uuid.UUID | None = None
    # daily | weekly | once, or the "weekdays" / "weekends" shorthands
    recurrence_type: str = RecurrenceType.DAILY.value
    recurrence_weekdays: list[str] | str | None = None
    once_date: date | None = None
    is_active: bool = True

    def recurrence(self) -> Recurrence:
        return build_recurrence(self.recurrence_type, self.recurrence_weekdays, self.once_date)

    @model_validator(mode="after")
    def _check_recurrence(self) -> "TaskTemplateCreate":
        self.recurrence()
        return self


class TaskTemplateUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    priority: TaskPriority | None = None
    assigned_by: uuid.UUID | None = None
    recurrence_type: str | None = None
    recurrence_weekdays: list[str] | str | None = None
    once_date: date | None = None
    is_active: bool | None = None
