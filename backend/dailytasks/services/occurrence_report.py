from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Sequence

from dailytasks.domain import (
    AssignmentSnapshot,
    OccurrenceCell,
    TemplateSnapshot,
    UserOccurrenceCell,
)
from dailytasks.models.enums import OccurrenceState
from dailytasks.services.calendar_dates import iter_dates
from dailytasks.services.completion_ledger import CompletionLedger
from dailytasks.services.occurrence_status import resolve


AssignmentKey = tuple[uuid.UUID, uuid.UUID]


def generate_range(
    templates: Sequence[TemplateSnapshot],
    assignments: Mapping[AssignmentKey, AssignmentSnapshot],
    completions: CompletionLedger,
    user_id: uuid.UUID,
    from_date: date,
    to_date: date,
    today: date,
) -> list[OccurrenceCell]:
    """
    One cell per (template, date) for a single user over [from_date, to_date].

    Templates keep the order they are given in and dates ascend within each template.
    A template without an assignment row for the user resolves as not assigned.
    """
    if from_date > to_date:
        return []

    dates = list(iter_dates(from_date, to_date))
    cells: list[OccurrenceCell] = []
    for template in templates:
        assignment = assignments.get((template.id, user_id))
        for day in dates:
            completion = completions.lookup(template.id, user_id, day)
            status = resolve(template, assignment, completion, day, today)
            cells.append(
                OccurrenceCell(
                    template_id=template.id,
                    for_date=day,
                    status=status,
                    completion=completion if status.is_completed else None,
                )
            )
    return cells


def generate_for_all_users(
    templates: Sequence[TemplateSnapshot],
    assignments: Iterable[AssignmentSnapshot],
    completions: CompletionLedger,
    target: date,
    today: date,
) -> list[UserOccurrenceCell]:
    """One cell per (template, assigned user) on a fixed date, templates in the given order."""
    by_template: dict[uuid.UUID, list[AssignmentSnapshot]] = {}
    for assignment in assignments:
        by_template.setdefault(assignment.template_id, []).append(assignment)

    cells: list[UserOccurrenceCell] = []
    for template in templates:
        seen: set[uuid.UUID] = set()
        for assignment in by_template.get(template.id, []):
            if assignment.user_id in seen:
                continue
            seen.add(assignment.user_id)
            completion = completions.lookup(template.id, assignment.user_id, target)
            status = resolve(template, assignment, completion, target, today)
            cells.append(
                UserOccurrenceCell(
                    template_id=template.id,
                    user_id=assignment.user_id,
                    status=status,
                    completion=completion if status.is_completed else None,
                )
            )
    return cells


@dataclass(frozen=True)
class TemplateSummary:
    due: int
    completed: int
    late: int
    pending: int
    not_assigned: int


def summarize(cells: Iterable[OccurrenceCell]) -> dict[uuid.UUID, TemplateSummary]:
    counts: dict[uuid.UUID, Counter] = {}
    for cell in cells:
        counts.setdefault(cell.template_id, Counter())[cell.status.state] += 1

    out: dict[uuid.UUID, TemplateSummary] = {}
    for template_id, counter in counts.items():
        on_time = counter[OccurrenceState.COMPLETED_ON_TIME]
        late = counter[OccurrenceState.COMPLETED_LATE]
        pending = counter[OccurrenceState.PENDING_COMPLETION]
        out[template_id] = TemplateSummary(
            due=on_time + late + pending,
            completed=on_time + late,
            late=late,
            pending=pending,
            not_assigned=counter[OccurrenceState.NOT_YET_ASSIGNED],
        )
    return out
