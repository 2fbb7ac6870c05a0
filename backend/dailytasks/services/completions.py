from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.models.task_completion import TaskCompletion


logger = logging.getLogger(__name__)


async def mark_complete(
    *,
    db: AsyncSession,
    template_id: uuid.UUID,
    user_id: uuid.UUID,
    for_date: date,
    remarks: str | None = None,
) -> TaskCompletion:
    """
    Mark one occurrence done.

    The (template, user, date) slot is upserted, so completing again after an undo
    reactivates the same row and refreshes completed_at.
    """
    now = datetime.now(timezone.utc)
    stmt = pg_insert(TaskCompletion).values(
        id=uuid.uuid4(),
        template_id=template_id,
        user_id=user_id,
        for_date=for_date,
        completed_at=now,
        remarks=remarks,
        is_active=True,
        deleted_at=None,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["template_id", "user_id", "for_date"],
        set_={
            "completed_at": stmt.excluded.completed_at,
            "remarks": stmt.excluded.remarks,
            "is_active": True,
            "deleted_at": None,
            "updated_at": now,
        },
    )
    await db.execute(stmt)

    row = (
        await db.execute(
            select(TaskCompletion)
            .where(TaskCompletion.template_id == template_id)
            .where(TaskCompletion.user_id == user_id)
            .where(TaskCompletion.for_date == for_date)
            .execution_options(populate_existing=True)
        )
    ).scalar_one()
    logger.info("Completion recorded for template %s user %s on %s", template_id, user_id, for_date)
    return row


async def undo_complete(
    *,
    db: AsyncSession,
    template_id: uuid.UUID,
    user_id: uuid.UUID,
    for_date: date,
) -> bool:
    """Retract a completion; the row is kept for audit. Returns False if nothing was active."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        update(TaskCompletion)
        .where(TaskCompletion.template_id == template_id)
        .where(TaskCompletion.user_id == user_id)
        .where(TaskCompletion.for_date == for_date)
        .where(TaskCompletion.is_active.is_(True))
        .values(is_active=False, deleted_at=now, updated_at=now)
    )
    undone = (result.rowcount or 0) > 0
    if undone:
        logger.info("Completion undone for template %s user %s on %s", template_id, user_id, for_date)
    return undone
