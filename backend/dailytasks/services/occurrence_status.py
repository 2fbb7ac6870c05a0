from __future__ import annotations

from datetime import date

from dailytasks.domain import (
    COMPLETED_ON_TIME,
    FUTURE,
    NOT_SCHEDULED,
    NOT_YET_ASSIGNED,
    PENDING_COMPLETION,
    AssignmentSnapshot,
    CompletionSnapshot,
    OccurrenceStatus,
    TemplateSnapshot,
)
from dailytasks.services.assignment_window import is_assignment_active_on
from dailytasks.services.completion_ledger import compute_lateness
from dailytasks.services.recurrence import is_scheduled


def resolve(
    template: TemplateSnapshot | None,
    assignment: AssignmentSnapshot | None,
    completion: CompletionSnapshot | None,
    target: date,
    today: date,
) -> OccurrenceStatus:
    """
    Status of one (template, user, date) occurrence.

    Rules are checked in order and the first match wins:
    not scheduled, future, not assigned on that date, pending, completed (on time or late).
    A missing template is treated like one that never schedules.
    """
    if template is None or not is_scheduled(template, target):
        return NOT_SCHEDULED
    if target > today:
        return FUTURE
    if not is_assignment_active_on(assignment, target):
        return NOT_YET_ASSIGNED
    if completion is None or not completion.is_active or completion.completed_at is None:
        return PENDING_COMPLETION

    lateness = compute_lateness(completion, target)
    if lateness.late:
        return OccurrenceStatus.completed_late(lateness.hours_late)
    return COMPLETED_ON_TIME
