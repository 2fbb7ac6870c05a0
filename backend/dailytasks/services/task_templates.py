from __future__ import annotations

from dailytasks.models.enums import RecurrenceType
from dailytasks.models.task_template import TaskTemplate
from dailytasks.schemas.task_template import TaskTemplateCreate, TaskTemplateOut, TaskTemplateUpdate
from dailytasks.services.recurrence import build_recurrence, parse_weekdays, recurrence_columns


RECURRENCE_FIELDS = ("recurrence_type", "recurrence_weekdays", "once_date")


def new_template(payload: TaskTemplateCreate) -> TaskTemplate:
    return TaskTemplate(
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        assigned_by=payload.assigned_by,
        is_active=payload.is_active,
        **recurrence_columns(payload.recurrence()),
    )


def apply_template_update(template: TaskTemplate, payload: TaskTemplateUpdate) -> dict:
    """
    Apply a partial update in place and return the changed fields.

    Recurrence fields are merged with the stored ones and re-validated as a whole;
    switching to daily drops weekdays and once_date, switching to once drops weekdays.
    Raises MalformedRecurrenceError for an inconsistent result.
    """
    fields = payload.model_dump(exclude_unset=True)
    changes: dict = {}

    if any(name in fields for name in RECURRENCE_FIELDS):
        recurrence_type = fields.get("recurrence_type") or template.recurrence_type
        if isinstance(recurrence_type, RecurrenceType):
            recurrence_type = recurrence_type.value
        weekdays = fields.get("recurrence_weekdays", template.recurrence_weekdays)
        once_date = fields.get("once_date", template.once_date)
        recurrence = build_recurrence(recurrence_type, weekdays, once_date)
        changes.update(recurrence_columns(recurrence))

    for name in ("title", "description", "priority", "assigned_by", "is_active"):
        if name in fields:
            if name in ("title", "priority", "is_active") and fields[name] is None:
                continue
            changes[name] = fields[name]

    for name, value in changes.items():
        setattr(template, name, value)
    return changes


def template_to_out(template: TaskTemplate) -> TaskTemplateOut:
    weekdays = parse_weekdays(template.recurrence_weekdays)
    return TaskTemplateOut(
        id=template.id,
        title=template.title,
        description=template.description,
        priority=template.priority,
        assigned_by=template.assigned_by,
        recurrence_type=template.recurrence_type,
        recurrence_weekdays=sorted(weekdays, key=lambda day: day.index),
        once_date=template.once_date,
        is_active=template.is_active,
        created_at=template.created_at,
        updated_at=template.updated_at,
    )
