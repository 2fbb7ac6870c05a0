from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.db import get_db
from dailytasks.models.task_template import TaskTemplate
from dailytasks.schemas.task_template import TaskTemplateCreate, TaskTemplateOut, TaskTemplateUpdate
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.task_templates import apply_template_update, new_template, template_to_out


router = APIRouter()


async def _get_template_or_404(db: AsyncSession, template_id: uuid.UUID) -> TaskTemplate:
    template = (
        await db.execute(select(TaskTemplate).where(TaskTemplate.id == template_id))
    ).scalar_one_or_none()
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return template


@router.get("", response_model=list[TaskTemplateOut])
async def list_templates(
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
) -> list[TaskTemplateOut]:
    stmt = select(TaskTemplate)
    if not include_inactive:
        stmt = stmt.where(TaskTemplate.is_active.is_(True))
    templates = (
        await db.execute(stmt.order_by(TaskTemplate.priority, TaskTemplate.created_at, TaskTemplate.id))
    ).scalars().all()
    return [template_to_out(t) for t in templates]


@router.post("", response_model=TaskTemplateOut, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: TaskTemplateCreate,
    db: AsyncSession = Depends(get_db),
) -> TaskTemplateOut:
    template = new_template(payload)
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return template_to_out(template)


@router.get("/{template_id}", response_model=TaskTemplateOut)
async def get_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> TaskTemplateOut:
    return template_to_out(await _get_template_or_404(db, template_id))


@router.patch("/{template_id}", response_model=TaskTemplateOut)
async def update_template(
    template_id: uuid.UUID,
    payload: TaskTemplateUpdate,
    db: AsyncSession = Depends(get_db),
) -> TaskTemplateOut:
    template = await _get_template_or_404(db, template_id)
    try:
        apply_template_update(template, payload)
    except MalformedRecurrenceError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    await db.commit()
    await db.refresh(template)
    return template_to_out(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> Response:
    template = await _get_template_or_404(db, template_id)
    await db.delete(template)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
