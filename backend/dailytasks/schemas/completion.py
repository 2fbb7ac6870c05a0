from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel


class CompletionOut(BaseModel):
    template_id: uuid.UUID
    user_id: uuid.UUID
    for_date: date
    completed_at: datetime | None = None
    remarks: str | None = None
    is_active: bool


class CompletionCreate(BaseModel):
    user_id: uuid.UUID
    # Defaults to today in the report timezone.
    for_date: date | None = None
    remarks: str | None = None


class CompletionUndo(BaseModel):
    user_id: uuid.UUID
    for_date: date | None = None


class CompletionUndoResult(BaseModel):
    success: bool
