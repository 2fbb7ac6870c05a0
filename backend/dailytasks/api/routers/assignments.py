from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.db import get_db
from dailytasks.models.task_assignment import TaskAssignment
from dailytasks.models.task_template import TaskTemplate
from dailytasks.schemas.assignment import (
    AssignmentChangeResult,
    AssignmentCreate,
    AssignmentOut,
    AssignmentToActiveUsers,
)
from dailytasks.services.assignments import (
    assign_template,
    assign_template_to_active_users,
    delete_assignment,
    remove_assignment,
)
from dailytasks.services.errors import AssignmentWindowError


router = APIRouter()


async def _get_template_id_or_404(db: AsyncSession, template_id: uuid.UUID) -> uuid.UUID:
    found = (
        await db.execute(select(TaskTemplate.id).where(TaskTemplate.id == template_id))
    ).scalar_one_or_none()
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return found


def _to_out(a: TaskAssignment) -> AssignmentOut:
    return AssignmentOut(
        template_id=a.template_id,
        user_id=a.user_id,
        assigned_by=a.assigned_by,
        assigned_at=a.assigned_at,
        start_date=a.start_date,
        end_date=a.end_date,
        is_active=a.is_active,
    )


@router.get("", response_model=list[AssignmentOut])
async def list_assignments(
    template_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
) -> list[AssignmentOut]:
    stmt = select(TaskAssignment)
    if template_id is not None:
        stmt = stmt.where(TaskAssignment.template_id == template_id)
    if user_id is not None:
        stmt = stmt.where(TaskAssignment.user_id == user_id)
    if not include_inactive:
        stmt = stmt.where(TaskAssignment.is_active.is_(True))
    rows = (await db.execute(stmt.order_by(TaskAssignment.assigned_at.desc()))).scalars().all()
    return [_to_out(a) for a in rows]


@router.post("", response_model=AssignmentChangeResult)
async def create_assignments(
    payload: AssignmentCreate,
    db: AsyncSession = Depends(get_db),
) -> AssignmentChangeResult:
    await _get_template_id_or_404(db, payload.template_id)
    try:
        affected = await assign_template(
            db=db,
            template_id=payload.template_id,
            user_ids=payload.user_ids,
            assigned_by=payload.assigned_by,
            start_date=payload.start_date,
            end_date=payload.end_date,
        )
    except AssignmentWindowError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    await db.commit()
    return AssignmentChangeResult(affected=affected)


@router.post("/assign-to-all-active", response_model=AssignmentChangeResult)
async def assign_to_all_active_users(
    payload: AssignmentToActiveUsers,
    db: AsyncSession = Depends(get_db),
) -> AssignmentChangeResult:
    await _get_template_id_or_404(db, payload.template_id)
    try:
        affected = await assign_template_to_active_users(
            db=db,
            template_id=payload.template_id,
            assigned_by=payload.assigned_by,
            start_date=payload.start_date,
            end_date=payload.end_date,
        )
    except AssignmentWindowError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    await db.commit()
    return AssignmentChangeResult(affected=affected)


@router.post("/{template_id}/deactivate", response_model=AssignmentChangeResult)
async def deactivate_assignments(
    template_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    db: AsyncSession = Depends(get_db),
) -> AssignmentChangeResult:
    affected = await remove_assignment(db=db, template_id=template_id, user_id=user_id)
    await db.commit()
    return AssignmentChangeResult(affected=affected)


@router.delete("/{template_id}", response_model=AssignmentChangeResult)
async def delete_assignments(
    template_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    remove_completions: bool = False,
    db: AsyncSession = Depends(get_db),
) -> AssignmentChangeResult:
    affected = await delete_assignment(
        db=db,
        template_id=template_id,
        user_id=user_id,
        remove_completions=remove_completions,
    )
    if user_id is not None and affected == 0:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No assignment found for that user")
    await db.commit()
    return AssignmentChangeResult(affected=affected)
