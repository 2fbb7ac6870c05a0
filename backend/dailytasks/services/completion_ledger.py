from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable

from dailytasks.domain import CompletionSnapshot
from dailytasks.services.errors import CompletionPreconditionError


# Completions up to and including 24h after the start of the occurrence date are on time.
ON_TIME_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class Lateness:
    late: bool
    hours_late: int


def compute_lateness(record: CompletionSnapshot, for_date: date) -> Lateness:
    completed_at = record.completed_at
    if completed_at is None:
        raise CompletionPreconditionError(
            f"Completion for template {record.template_id} user {record.user_id} "
            f"on {for_date.isoformat()} has no completed_at"
        )
    # Midnight in the same frame as the timestamp (naive stays naive).
    start = datetime.combine(for_date, time.min, tzinfo=completed_at.tzinfo)
    elapsed = completed_at - start
    hours = elapsed // timedelta(hours=1)
    return Lateness(late=elapsed > ON_TIME_WINDOW, hours_late=hours)


class CompletionLedger:
    """Active completion records of one snapshot, keyed by (template_id, user_id, for_date)."""

    def __init__(self, records: Iterable[CompletionSnapshot] = ()) -> None:
        self._records: dict[tuple[uuid.UUID, uuid.UUID, date], CompletionSnapshot] = {}
        for record in records:
            if record.is_active and record.completed_at is not None:
                self._records[record.key] = record

    def __len__(self) -> int:
        return len(self._records)

    def lookup(self, template_id: uuid.UUID, user_id: uuid.UUID, for_date: date) -> CompletionSnapshot | None:
        return self._records.get((template_id, user_id, for_date))
