from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.domain import OccurrenceCell, OccurrenceStatus, TemplateSnapshot, UserOccurrenceCell
from dailytasks.services.calendar_dates import parse_month
from dailytasks.services.completion_ledger import CompletionLedger
from dailytasks.services.occurrence_report import (
    TemplateSummary,
    generate_for_all_users,
    generate_range,
    summarize,
)
from dailytasks.services.occurrence_sources import (
    AssignmentSource,
    CompletionSource,
    SqlAssignmentSource,
    SqlCompletionSource,
    SqlTemplateSource,
    TemplateSource,
)
from dailytasks.services.occurrence_status import resolve


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthReport:
    from_date: date
    to_date: date
    templates: list[TemplateSnapshot]
    cells: list[OccurrenceCell]
    summaries: dict[uuid.UUID, TemplateSummary]


class OccurrenceResolver:
    """
    Loads snapshots from the sources, then hands them to the pure occurrence engine.

    `today` is always passed in by the caller so every cell of one request is judged
    against the same date.
    """

    def __init__(
        self,
        templates: TemplateSource,
        assignments: AssignmentSource,
        completions: CompletionSource,
    ) -> None:
        self.templates = templates
        self.assignments = assignments
        self.completions = completions

    @classmethod
    def for_session(cls, db: AsyncSession, timezone: str | None = None) -> "OccurrenceResolver":
        return cls(
            SqlTemplateSource(db),
            SqlAssignmentSource(db, timezone),
            SqlCompletionSource(db, timezone),
        )

    async def resolve_one(
        self, template_id: uuid.UUID, user_id: uuid.UUID, target: date, today: date
    ) -> OccurrenceStatus:
        template = await self.templates.get_template(template_id)
        assignment = await self.assignments.get_assignment(template_id, user_id)
        record = await self.completions.get_completion(template_id, user_id, target)
        completion = CompletionLedger([record] if record is not None else []).lookup(template_id, user_id, target)
        return resolve(template, assignment, completion, target, today)

    async def resolve_templates(
        self,
        templates: list[TemplateSnapshot],
        user_id: uuid.UUID,
        from_date: date,
        to_date: date,
        today: date,
    ) -> list[OccurrenceCell]:
        if from_date > to_date or not templates:
            return []
        assignments = {
            (a.template_id, a.user_id): a for a in await self.assignments.list_assignments_for_user(user_id)
        }
        template_ids = [t.id for t in templates]
        ledger = CompletionLedger(
            await self.completions.list_completions(template_ids, user_id, from_date, to_date)
        )
        cells = generate_range(templates, assignments, ledger, user_id, from_date, to_date, today)
        logger.debug(
            "Resolved %d occurrence cells for user %s between %s and %s",
            len(cells),
            user_id,
            from_date,
            to_date,
        )
        return cells

    async def resolve_range(
        self, user_id: uuid.UUID, from_date: date, to_date: date, today: date
    ) -> list[OccurrenceCell]:
        if from_date > to_date:
            return []
        templates = await self.templates.list_templates_for_user(user_id)
        return await self.resolve_templates(templates, user_id, from_date, to_date, today)

    async def resolve_month(self, user_id: uuid.UUID, month: str, today: date) -> MonthReport:
        from_date, to_date = parse_month(month)
        templates = await self.templates.list_templates_for_user(user_id)
        cells = await self.resolve_templates(templates, user_id, from_date, to_date, today)
        return MonthReport(
            from_date=from_date,
            to_date=to_date,
            templates=templates,
            cells=cells,
            summaries=summarize(cells),
        )

    async def resolve_all_users(
        self, template_id: uuid.UUID | None, target: date, today: date
    ) -> list[UserOccurrenceCell]:
        if template_id is None:
            templates = await self.templates.list_active_templates()
            template_ids = [t.id for t in templates]
            assignments = await self.assignments.list_assignments_for_templates(template_ids)
        else:
            template = await self.templates.get_template(template_id)
            if template is None:
                return []
            templates = [template]
            template_ids = [template_id]
            assignments = await self.assignments.list_assignments(template_id)
        if not templates:
            return []

        ledger = CompletionLedger(await self.completions.list_completions_on(template_ids, target))
        return generate_for_all_users(templates, assignments, ledger, target, today)
