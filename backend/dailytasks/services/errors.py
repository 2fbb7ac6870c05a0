from __future__ import annotations


class MalformedRecurrenceError(ValueError):
    """A template row or payload whose recurrence fields do not describe a valid rule."""


class CompletionPreconditionError(ValueError):
    """Lateness was requested for a completion record that has no completion time."""


class AssignmentWindowError(ValueError):
    """An assignment whose start_date falls after its end_date."""
