from __future__ import annotations

from datetime import date

from dailytasks.domain import AssignmentSnapshot


def window_start(assignment: AssignmentSnapshot) -> date:
    """First calendar date an assignment covers; an explicit start_date wins over assigned_at."""
    if assignment.start_date is not None:
        return assignment.start_date
    return assignment.assigned_at.date()


def is_assignment_active_on(assignment: AssignmentSnapshot | None, target: date) -> bool:
    if assignment is None or not assignment.is_active:
        return False
    if target < window_start(assignment):
        return False
    if assignment.end_date is not None and target > assignment.end_date:
        return False
    return True
