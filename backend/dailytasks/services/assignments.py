from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.models.task_assignment import TaskAssignment
from dailytasks.models.task_completion import TaskCompletion
from dailytasks.models.user import User
from dailytasks.services.errors import AssignmentWindowError


logger = logging.getLogger(__name__)


async def assign_template(
    *,
    db: AsyncSession,
    template_id: uuid.UUID,
    user_ids: Iterable[uuid.UUID],
    assigned_by: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> int:
    """
    Assign a template to users.

    Existing (template, user) rows are reactivated and get a fresh assigned_at and window
    instead of being duplicated.
    """
    if start_date is not None and end_date is not None and start_date > end_date:
        raise AssignmentWindowError(f"start_date {start_date} is after end_date {end_date}")

    unique_ids = list(dict.fromkeys(user_ids))
    if not unique_ids:
        return 0

    now = datetime.now(timezone.utc)
    rows = [
        {
            "id": uuid.uuid4(),
            "template_id": template_id,
            "user_id": uid,
            "assigned_by": assigned_by,
            "assigned_at": now,
            "start_date": start_date,
            "end_date": end_date,
            "is_active": True,
        }
        for uid in unique_ids
    ]
    stmt = pg_insert(TaskAssignment).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=["template_id", "user_id"],
        set_={
            "assigned_by": stmt.excluded.assigned_by,
            "assigned_at": stmt.excluded.assigned_at,
            "start_date": stmt.excluded.start_date,
            "end_date": stmt.excluded.end_date,
            "is_active": True,
        },
    )
    await db.execute(stmt)
    logger.info("Template %s assigned to %d user(s)", template_id, len(unique_ids))
    return len(unique_ids)


async def assign_template_to_active_users(
    *,
    db: AsyncSession,
    template_id: uuid.UUID,
    assigned_by: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> int:
    """Assign a template to every active user; same upsert rules as assign_template."""
    if start_date is not None and end_date is not None and start_date > end_date:
        raise AssignmentWindowError(f"start_date {start_date} is after end_date {end_date}")

    user_ids = (
        await db.execute(select(User.id).where(User.is_active.is_(True)).order_by(User.id))
    ).scalars().all()
    if not user_ids:
        logger.info("No active users to assign template %s to", template_id)
        return 0
    return await assign_template(
        db=db,
        template_id=template_id,
        user_ids=user_ids,
        assigned_by=assigned_by,
        start_date=start_date,
        end_date=end_date,
    )


async def remove_assignment(
    *,
    db: AsyncSession,
    template_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
) -> int:
    """Deactivate the assignment of one user, or of every user when user_id is None."""
    stmt = (
        update(TaskAssignment)
        .where(TaskAssignment.template_id == template_id)
        .where(TaskAssignment.is_active.is_(True))
    )
    if user_id is not None:
        stmt = stmt.where(TaskAssignment.user_id == user_id)
    result = await db.execute(stmt.values(is_active=False))
    return result.rowcount or 0


async def delete_assignment(
    *,
    db: AsyncSession,
    template_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    remove_completions: bool = False,
) -> int:
    """Hard delete assignment rows, optionally with the completion history they cover."""
    if remove_completions:
        completions_stmt = delete(TaskCompletion).where(TaskCompletion.template_id == template_id)
        if user_id is not None:
            completions_stmt = completions_stmt.where(TaskCompletion.user_id == user_id)
        await db.execute(completions_stmt)

    stmt = delete(TaskAssignment).where(TaskAssignment.template_id == template_id)
    if user_id is not None:
        stmt = stmt.where(TaskAssignment.user_id == user_id)
    result = await db.execute(stmt)
    deleted = result.rowcount or 0
    logger.info(
        "Deleted %d assignment(s) for template %s (completions removed: %s)",
        deleted,
        template_id,
        remove_completions,
    )
    return deleted
