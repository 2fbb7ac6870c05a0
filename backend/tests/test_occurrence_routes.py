import unittest
import uuid
from datetime import date, datetime
from unittest.mock import patch

from fastapi import HTTPException

from dailytasks.api.routers.occurrences import (
    all_users_occurrences,
    single_occurrence,
    user_month_report,
    user_occurrences,
)
from dailytasks.domain import (
    PENDING_COMPLETION,
    CompletionSnapshot,
    Daily,
    OccurrenceCell,
    OccurrenceStatus,
    TemplateSnapshot,
    UserOccurrenceCell,
)
from dailytasks.models.enums import OccurrenceState
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.occurrence_report import TemplateSummary
from dailytasks.services.occurrence_service import MonthReport


TODAY = date(2024, 1, 10)
T1 = uuid.uuid4()
U1 = uuid.uuid4()
U2 = uuid.uuid4()


class FakeResolver:
    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls = []

    async def _answer(self, name, *args):
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.result

    async def resolve_one(self, *args):
        return await self._answer("one", *args)

    async def resolve_range(self, *args):
        return await self._answer("range", *args)

    async def resolve_month(self, *args):
        return await self._answer("month", *args)

    async def resolve_all_users(self, *args):
        return await self._answer("all_users", *args)


class _Rows:
    def __init__(self, rows) -> None:
        self._rows = rows

    def all(self):
        return list(self._rows)


class FakeAsyncSession:
    def __init__(self, rows=()) -> None:
        self.rows = rows
        self.executed = []

    async def execute(self, stmt):
        self.executed.append(stmt)
        return _Rows(self.rows)


@patch("dailytasks.api.routers.occurrences.today_in", return_value=TODAY)
class TestOccurrenceRoutes(unittest.IsolatedAsyncioTestCase):
    async def test_single_occurrence_defaults_to_today(self, _today) -> None:
        resolver = FakeResolver(result=OccurrenceStatus.completed_late(34))
        out = await single_occurrence(template_id=T1, user_id=U1, for_date=None, resolver=resolver)
        self.assertEqual(out.for_date, TODAY)
        self.assertEqual(out.status.state, OccurrenceState.COMPLETED_LATE)
        self.assertEqual(out.status.hours_late, 34)
        self.assertEqual(resolver.calls, [("one", (T1, U1, TODAY, TODAY))])

    async def test_malformed_template_is_a_conflict(self, _today) -> None:
        resolver = FakeResolver(error=MalformedRecurrenceError("weekly template without weekdays"))
        with self.assertRaises(HTTPException) as context:
            await single_occurrence(template_id=T1, user_id=U1, for_date=date(2024, 1, 3), resolver=resolver)
        self.assertEqual(context.exception.status_code, 409)

    async def test_user_range(self, _today) -> None:
        done = CompletionSnapshot(
            template_id=T1, user_id=U1, for_date=date(2024, 1, 3), completed_at=datetime(2024, 1, 3, 9, 0), remarks="ok"
        )
        cells = [
            OccurrenceCell(T1, date(2024, 1, 3), OccurrenceStatus(OccurrenceState.COMPLETED_ON_TIME), done),
            OccurrenceCell(T1, date(2024, 1, 4), PENDING_COMPLETION),
        ]
        out = await user_occurrences(
            user_id=U1, from_date=date(2024, 1, 3), to_date=date(2024, 1, 4), resolver=FakeResolver(result=cells)
        )
        self.assertEqual(out.today, TODAY)
        self.assertEqual(len(out.cells), 2)
        self.assertEqual(out.cells[0].completed_at, datetime(2024, 1, 3, 9, 0))
        self.assertEqual(out.cells[0].remarks, "ok")
        self.assertIsNone(out.cells[1].completed_at)

    async def test_month_report(self, _today) -> None:
        template = TemplateSnapshot(id=T1, title="Open shop", recurrence=Daily())
        report = MonthReport(
            from_date=date(2024, 1, 1),
            to_date=date(2024, 1, 31),
            templates=[template],
            cells=[OccurrenceCell(T1, date(2024, 1, 1), PENDING_COMPLETION)],
            summaries={T1: TemplateSummary(due=1, completed=0, late=0, pending=1, not_assigned=0)},
        )
        out = await user_month_report(user_id=U1, month="2024-01", resolver=FakeResolver(result=report))
        self.assertEqual(out.month, "2024-01")
        self.assertEqual(out.to_date, date(2024, 1, 31))
        self.assertEqual(len(out.summaries), 1)
        self.assertEqual(out.summaries[0].title, "Open shop")
        self.assertEqual(out.summaries[0].pending, 1)

    async def test_month_report_rejects_invalid_month(self, _today) -> None:
        resolver = FakeResolver(error=ValueError("Invalid month '2024-13', expected YYYY-MM"))
        with self.assertRaises(HTTPException) as context:
            await user_month_report(user_id=U1, month="2024-13", resolver=resolver)
        self.assertEqual(context.exception.status_code, 422)

    async def test_all_users_rows_carry_names(self, _today) -> None:
        cells = [
            UserOccurrenceCell(T1, U1, PENDING_COMPLETION),
            UserOccurrenceCell(T1, U2, OccurrenceStatus(OccurrenceState.NOT_YET_ASSIGNED)),
        ]
        db = FakeAsyncSession(rows=[(U1, "Ana Hoxha")])
        out = await all_users_occurrences(for_date=None, template_id=None, db=db, resolver=FakeResolver(result=cells))
        self.assertEqual(out.for_date, TODAY)
        self.assertEqual([r.user_full_name for r in out.rows], ["Ana Hoxha", None])
        self.assertEqual(len(db.executed), 1)

    async def test_all_users_without_rows_skips_the_name_lookup(self, _today) -> None:
        db = FakeAsyncSession()
        out = await all_users_occurrences(
            for_date=date(2024, 1, 2), template_id=T1, db=db, resolver=FakeResolver(result=[])
        )
        self.assertEqual(out.rows, [])
        self.assertEqual(db.executed, [])


if __name__ == "__main__":
    unittest.main()
