from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.config import settings
from dailytasks.db import get_db
from dailytasks.models.task_template import TaskTemplate
from dailytasks.schemas.completion import CompletionCreate, CompletionOut, CompletionUndo, CompletionUndoResult
from dailytasks.services.calendar_dates import today_in
from dailytasks.services.completions import mark_complete, undo_complete


router = APIRouter()


@router.post("/{template_id}/complete", response_model=CompletionOut)
async def complete_occurrence(
    template_id: uuid.UUID,
    payload: CompletionCreate,
    db: AsyncSession = Depends(get_db),
) -> CompletionOut:
    template = (
        await db.execute(select(TaskTemplate.id).where(TaskTemplate.id == template_id))
    ).scalar_one_or_none()
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    for_date = payload.for_date or today_in(settings.REPORT_TIMEZONE)
    row = await mark_complete(
        db=db,
        template_id=template_id,
        user_id=payload.user_id,
        for_date=for_date,
        remarks=payload.remarks,
    )
    await db.commit()
    return CompletionOut(
        template_id=row.template_id,
        user_id=row.user_id,
        for_date=row.for_date,
        completed_at=row.completed_at,
        remarks=row.remarks,
        is_active=row.is_active,
    )


@router.post("/{template_id}/undo", response_model=CompletionUndoResult)
async def undo_occurrence(
    template_id: uuid.UUID,
    payload: CompletionUndo,
    db: AsyncSession = Depends(get_db),
) -> CompletionUndoResult:
    for_date = payload.for_date or today_in(settings.REPORT_TIMEZONE)
    ok = await undo_complete(db=db, template_id=template_id, user_id=payload.user_id, for_date=for_date)
    await db.commit()
    return CompletionUndoResult(success=ok)
