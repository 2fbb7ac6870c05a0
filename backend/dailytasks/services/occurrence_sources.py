from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterable, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.config import settings
from dailytasks.domain import AssignmentSnapshot, CompletionSnapshot, TemplateSnapshot
from dailytasks.models.task_assignment import TaskAssignment
from dailytasks.models.task_completion import TaskCompletion
from dailytasks.models.task_template import TaskTemplate
from dailytasks.services.calendar_dates import as_calendar_datetime
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.recurrence import build_recurrence


logger = logging.getLogger(__name__)


class TemplateSource(Protocol):
    async def list_active_templates(self) -> list[TemplateSnapshot]: ...

    async def get_template(self, template_id: uuid.UUID) -> TemplateSnapshot | None: ...

    async def list_templates_for_user(self, user_id: uuid.UUID) -> list[TemplateSnapshot]: ...


class AssignmentSource(Protocol):
    async def get_assignment(self, template_id: uuid.UUID, user_id: uuid.UUID) -> AssignmentSnapshot | None: ...

    async def list_assignments(self, template_id: uuid.UUID) -> list[AssignmentSnapshot]: ...

    async def list_assignments_for_templates(self, template_ids: Sequence[uuid.UUID]) -> list[AssignmentSnapshot]: ...

    async def list_assignments_for_user(self, user_id: uuid.UUID) -> list[AssignmentSnapshot]: ...


class CompletionSource(Protocol):
    async def get_completion(
        self, template_id: uuid.UUID, user_id: uuid.UUID, for_date: date
    ) -> CompletionSnapshot | None: ...

    async def list_completions(
        self, template_ids: Sequence[uuid.UUID], user_id: uuid.UUID, from_date: date, to_date: date
    ) -> list[CompletionSnapshot]: ...

    async def list_completions_on(
        self, template_ids: Sequence[uuid.UUID], for_date: date
    ) -> list[CompletionSnapshot]: ...


def template_snapshot(row: TaskTemplate) -> TemplateSnapshot:
    """Raises MalformedRecurrenceError when the stored recurrence fields are inconsistent."""
    return TemplateSnapshot(
        id=row.id,
        title=row.title,
        recurrence=build_recurrence(row.recurrence_type, row.recurrence_weekdays, row.once_date),
        priority=row.priority,
        is_active=bool(row.is_active),
    )


def assignment_snapshot(row: TaskAssignment, timezone: str) -> AssignmentSnapshot:
    return AssignmentSnapshot(
        template_id=row.template_id,
        user_id=row.user_id,
        assigned_at=as_calendar_datetime(row.assigned_at, timezone),
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=bool(row.is_active),
    )


def completion_snapshot(row: TaskCompletion, timezone: str) -> CompletionSnapshot:
    completed_at = row.completed_at
    return CompletionSnapshot(
        template_id=row.template_id,
        user_id=row.user_id,
        for_date=row.for_date,
        completed_at=as_calendar_datetime(completed_at, timezone) if completed_at is not None else None,
        remarks=row.remarks,
        is_active=bool(row.is_active),
    )


def _valid_templates(rows: Iterable[TaskTemplate]) -> list[TemplateSnapshot]:
    out: list[TemplateSnapshot] = []
    for row in rows:
        try:
            out.append(template_snapshot(row))
        except MalformedRecurrenceError:
            logger.error("Skipping template %s with malformed recurrence", row.id, exc_info=True)
    return out


class SqlTemplateSource:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_active_templates(self) -> list[TemplateSnapshot]:
        rows = (
            await self.db.execute(
                select(TaskTemplate)
                .where(TaskTemplate.is_active.is_(True))
                .order_by(TaskTemplate.priority, TaskTemplate.created_at, TaskTemplate.id)
            )
        ).scalars().all()
        return _valid_templates(rows)

    async def get_template(self, template_id: uuid.UUID) -> TemplateSnapshot | None:
        row = (
            await self.db.execute(select(TaskTemplate).where(TaskTemplate.id == template_id))
        ).scalar_one_or_none()
        if row is None:
            return None
        return template_snapshot(row)

    async def list_templates_for_user(self, user_id: uuid.UUID) -> list[TemplateSnapshot]:
        """Active templates the user has any assignment row for, active or not."""
        rows = (
            await self.db.execute(
                select(TaskTemplate)
                .join(TaskAssignment, TaskAssignment.template_id == TaskTemplate.id)
                .where(TaskAssignment.user_id == user_id)
                .where(TaskTemplate.is_active.is_(True))
                .order_by(TaskTemplate.priority, TaskTemplate.created_at, TaskTemplate.id)
            )
        ).scalars().all()
        return _valid_templates(rows)


class SqlAssignmentSource:
    def __init__(self, db: AsyncSession, timezone: str | None = None) -> None:
        self.db = db
        self.timezone = timezone or settings.REPORT_TIMEZONE

    async def _list(self, stmt) -> list[AssignmentSnapshot]:
        rows = (await self.db.execute(stmt.order_by(TaskAssignment.assigned_at, TaskAssignment.user_id))).scalars().all()
        return [assignment_snapshot(row, self.timezone) for row in rows]

    async def get_assignment(self, template_id: uuid.UUID, user_id: uuid.UUID) -> AssignmentSnapshot | None:
        row = (
            await self.db.execute(
                select(TaskAssignment)
                .where(TaskAssignment.template_id == template_id)
                .where(TaskAssignment.user_id == user_id)
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        return assignment_snapshot(row, self.timezone)

    async def list_assignments(self, template_id: uuid.UUID) -> list[AssignmentSnapshot]:
        return await self._list(select(TaskAssignment).where(TaskAssignment.template_id == template_id))

    async def list_assignments_for_templates(self, template_ids: Sequence[uuid.UUID]) -> list[AssignmentSnapshot]:
        if not template_ids:
            return []
        return await self._list(select(TaskAssignment).where(TaskAssignment.template_id.in_(template_ids)))

    async def list_assignments_for_user(self, user_id: uuid.UUID) -> list[AssignmentSnapshot]:
        return await self._list(select(TaskAssignment).where(TaskAssignment.user_id == user_id))


class SqlCompletionSource:
    def __init__(self, db: AsyncSession, timezone: str | None = None) -> None:
        self.db = db
        self.timezone = timezone or settings.REPORT_TIMEZONE

    async def _list(self, stmt) -> list[CompletionSnapshot]:
        rows = (await self.db.execute(stmt.where(TaskCompletion.is_active.is_(True)))).scalars().all()
        return [completion_snapshot(row, self.timezone) for row in rows]

    async def get_completion(
        self, template_id: uuid.UUID, user_id: uuid.UUID, for_date: date
    ) -> CompletionSnapshot | None:
        row = (
            await self.db.execute(
                select(TaskCompletion)
                .where(TaskCompletion.template_id == template_id)
                .where(TaskCompletion.user_id == user_id)
                .where(TaskCompletion.for_date == for_date)
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        return completion_snapshot(row, self.timezone)

    async def list_completions(
        self, template_ids: Sequence[uuid.UUID], user_id: uuid.UUID, from_date: date, to_date: date
    ) -> list[CompletionSnapshot]:
        if not template_ids:
            return []
        return await self._list(
            select(TaskCompletion)
            .where(TaskCompletion.template_id.in_(template_ids))
            .where(TaskCompletion.user_id == user_id)
            .where(TaskCompletion.for_date.between(from_date, to_date))
        )

    async def list_completions_on(
        self, template_ids: Sequence[uuid.UUID], for_date: date
    ) -> list[CompletionSnapshot]:
        if not template_ids:
            return []
        return await self._list(
            select(TaskCompletion)
            .where(TaskCompletion.template_id.in_(template_ids))
            .where(TaskCompletion.for_date == for_date)
        )
