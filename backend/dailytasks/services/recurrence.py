from __future__ import annotations

from datetime import date
from typing import Iterable

from dailytasks.domain import Daily, Once, Recurrence, TemplateSnapshot, Weekly
from dailytasks.models.enums import WEEKEND_DAYS, WORKING_DAYS, RecurrenceType, Weekday
from dailytasks.services.errors import MalformedRecurrenceError


# Shorthands accepted from clients; both are stored as weekly templates.
RECURRENCE_ALIASES: dict[str, frozenset[Weekday]] = {
    "weekdays": WORKING_DAYS,
    "weekends": WEEKEND_DAYS,
}


def parse_weekdays(value: str | Iterable[str] | None) -> frozenset[Weekday]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    codes = [str(item).strip().lower() for item in value]
    try:
        return frozenset(Weekday(code) for code in codes if code)
    except ValueError as exc:
        raise MalformedRecurrenceError(f"Unknown weekday code in {sorted(codes)!r}") from exc


def weekdays_to_csv(weekdays: Iterable[Weekday]) -> str | None:
    ordered = sorted(set(weekdays), key=lambda day: day.index)
    if not ordered:
        return None
    return ",".join(day.value for day in ordered)


def build_recurrence(
    recurrence_type: RecurrenceType | str | None,
    weekdays: str | Iterable[str] | None = None,
    once_date: date | None = None,
) -> Recurrence:
    raw = recurrence_type.value if isinstance(recurrence_type, RecurrenceType) else recurrence_type
    raw = (raw or "").strip().lower()

    if raw in RECURRENCE_ALIASES:
        return Weekly(RECURRENCE_ALIASES[raw])
    if raw == RecurrenceType.DAILY.value:
        return Daily()
    if raw == RecurrenceType.WEEKLY.value:
        days = parse_weekdays(weekdays)
        if not days:
            raise MalformedRecurrenceError("Weekly recurrence requires at least one weekday")
        return Weekly(days)
    if raw == RecurrenceType.ONCE.value:
        if once_date is None:
            raise MalformedRecurrenceError("Once recurrence requires a date")
        return Once(once_date)
    raise MalformedRecurrenceError(f"Unknown recurrence type {recurrence_type!r}")


def recurrence_columns(recurrence: Recurrence) -> dict:
    """Storage form of a recurrence: recurrence_type, recurrence_weekdays, once_date."""
    if isinstance(recurrence, Weekly):
        return {
            "recurrence_type": RecurrenceType.WEEKLY,
            "recurrence_weekdays": weekdays_to_csv(recurrence.weekdays),
            "once_date": None,
        }
    if isinstance(recurrence, Once):
        return {"recurrence_type": RecurrenceType.ONCE, "recurrence_weekdays": None, "once_date": recurrence.on}
    return {"recurrence_type": RecurrenceType.DAILY, "recurrence_weekdays": None, "once_date": None}


def matches_recurrence(recurrence: Recurrence, target: date) -> bool:
    if isinstance(recurrence, Daily):
        return True
    if isinstance(recurrence, Weekly):
        return Weekday.of(target) in recurrence.weekdays
    if isinstance(recurrence, Once):
        return recurrence.on == target
    return False


def is_scheduled(template: TemplateSnapshot, target: date) -> bool:
    if not template.is_active:
        return False
    return matches_recurrence(template.recurrence, target)
