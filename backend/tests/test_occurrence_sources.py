import unittest
import uuid
from datetime import date, datetime, timezone
from types import SimpleNamespace

from dailytasks.domain import Daily, Weekly
from dailytasks.models.enums import RecurrenceType, TaskPriority, Weekday
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.occurrence_sources import (
    SqlAssignmentSource,
    SqlCompletionSource,
    SqlTemplateSource,
)


class _Scalars:
    def __init__(self, rows) -> None:
        self._rows = rows

    def all(self):
        return list(self._rows)


class _Result:
    def __init__(self, rows) -> None:
        self._rows = rows

    def scalars(self):
        return _Scalars(self._rows)

    def scalar_one_or_none(self):
        return self._rows[0] if self._rows else None


class FakeAsyncSession:
    def __init__(self, rows) -> None:
        self.rows = rows
        self.executed = []

    async def execute(self, stmt):
        self.executed.append(stmt)
        return _Result(self.rows)


def _template_row(**overrides):
    values = {
        "id": uuid.uuid4(),
        "title": "Cash count",
        "priority": TaskPriority.HIGH,
        "recurrence_type": RecurrenceType.WEEKLY,
        "recurrence_weekdays": "mon,fri",
        "once_date": None,
        "is_active": True,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSqlTemplateSource(unittest.IsolatedAsyncioTestCase):
    async def test_rows_become_snapshots(self) -> None:
        row = _template_row()
        db = FakeAsyncSession([row, _template_row(recurrence_type=RecurrenceType.DAILY, recurrence_weekdays=None)])
        templates = await SqlTemplateSource(db).list_active_templates()
        self.assertEqual(templates[0].id, row.id)
        self.assertEqual(templates[0].recurrence, Weekly(frozenset({Weekday.MON, Weekday.FRI})))
        self.assertEqual(templates[1].recurrence, Daily())
        self.assertIn("is_active", str(db.executed[0].whereclause))

    async def test_malformed_rows_are_skipped_in_lists(self) -> None:
        good = _template_row()
        bad = _template_row(recurrence_weekdays=None)
        db = FakeAsyncSession([bad, good])
        with self.assertLogs("dailytasks.services.occurrence_sources", level="ERROR"):
            templates = await SqlTemplateSource(db).list_templates_for_user(uuid.uuid4())
        self.assertEqual([t.id for t in templates], [good.id])

    async def test_get_template_raises_for_a_malformed_row(self) -> None:
        db = FakeAsyncSession([_template_row(recurrence_type=RecurrenceType.ONCE)])
        with self.assertRaises(MalformedRecurrenceError):
            await SqlTemplateSource(db).get_template(uuid.uuid4())

    async def test_get_template_missing(self) -> None:
        self.assertIsNone(await SqlTemplateSource(FakeAsyncSession([])).get_template(uuid.uuid4()))


class TestSqlAssignmentAndCompletionSources(unittest.IsolatedAsyncioTestCase):
    async def test_assigned_at_is_read_in_the_report_timezone(self) -> None:
        row = SimpleNamespace(
            template_id=uuid.uuid4(),
            user_id=uuid.uuid4(),
            assigned_at=datetime(2024, 1, 10, 3, 0, tzinfo=timezone.utc),
            start_date=None,
            end_date=None,
            is_active=True,
        )
        source = SqlAssignmentSource(FakeAsyncSession([row]), "America/New_York")
        snapshot = await source.get_assignment(row.template_id, row.user_id)
        # 03:00 UTC is still the 9th in New York.
        self.assertEqual(snapshot.assigned_at, datetime(2024, 1, 9, 22, 0))

    async def test_empty_template_list_skips_the_query(self) -> None:
        db = FakeAsyncSession([])
        self.assertEqual(await SqlAssignmentSource(db, "UTC").list_assignments_for_templates([]), [])
        self.assertEqual(await SqlCompletionSource(db, "UTC").list_completions_on([], date(2024, 1, 3)), [])
        self.assertEqual(db.executed, [])

    async def test_completions_are_filtered_to_active_rows(self) -> None:
        row = SimpleNamespace(
            template_id=uuid.uuid4(),
            user_id=uuid.uuid4(),
            for_date=date(2024, 1, 3),
            completed_at=datetime(2024, 1, 4, 5, 0, tzinfo=timezone.utc),
            remarks=None,
            is_active=True,
        )
        db = FakeAsyncSession([row])
        records = await SqlCompletionSource(db, "America/New_York").list_completions(
            [row.template_id], row.user_id, date(2024, 1, 1), date(2024, 1, 31)
        )
        self.assertEqual(records[0].completed_at, datetime(2024, 1, 4, 0, 0))
        self.assertIn("is_active", str(db.executed[0].whereclause))


if __name__ == "__main__":
    unittest.main()
