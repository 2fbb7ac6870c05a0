from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator


class AssignmentOut(BaseModel):
    template_id: uuid.UUID
    user_id: uuid.UUID
    assigned_by: uuid.UUID | None = None
    assigned_at: datetime
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool


class AssignmentCreate(BaseModel):
    template_id: uuid.UUID
    user_ids: list[uuid.UUID] = Field(min_length=1)
    assigned_by: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def _check_window(self) -> "AssignmentCreate":
        if self.start_date is not None and self.end_date is not None and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class AssignmentToActiveUsers(BaseModel):
    template_id: uuid.UUID
    assigned_by: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def _check_window(self) -> "AssignmentToActiveUsers":
        if self.start_date is not None and self.end_date is not None and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class AssignmentChangeResult(BaseModel):
    affected: int
