from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from dailytasks.models.enums import OccurrenceState


class OccurrenceStatusOut(BaseModel):
    state: OccurrenceState
    hours_late: int | None = None


class OccurrenceOut(BaseModel):
    template_id: uuid.UUID
    user_id: uuid.UUID
    for_date: date
    status: OccurrenceStatusOut


class OccurrenceCellOut(BaseModel):
    template_id: uuid.UUID
    for_date: date
    status: OccurrenceStatusOut
    completed_at: datetime | None = None
    remarks: str | None = None


class OccurrenceRangeOut(BaseModel):
    user_id: uuid.UUID
    from_date: date
    to_date: date
    today: date
    cells: list[OccurrenceCellOut] = Field(default_factory=list)


class TemplateSummaryOut(BaseModel):
    template_id: uuid.UUID
    title: str
    due: int
    completed: int
    late: int
    pending: int
    not_assigned: int


class MonthReportOut(OccurrenceRangeOut):
    month: str
    summaries: list[TemplateSummaryOut] = Field(default_factory=list)


class UserOccurrenceOut(BaseModel):
    template_id: uuid.UUID
    user_id: uuid.UUID
    user_full_name: str | None = None
    status: OccurrenceStatusOut
    completed_at: datetime | None = None
    remarks: str | None = None


class AllUsersOccurrencesOut(BaseModel):
    for_date: date
    today: date
    rows: list[UserOccurrenceOut] = Field(default_factory=list)
