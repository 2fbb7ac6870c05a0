import unittest
import uuid
from datetime import date, timedelta

from dailytasks.domain import Daily, Once, TemplateSnapshot, Weekly
from dailytasks.models.enums import RecurrenceType, Weekday
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.recurrence import (
    build_recurrence,
    is_scheduled,
    matches_recurrence,
    parse_weekdays,
    recurrence_columns,
    weekdays_to_csv,
)


def _template(recurrence, is_active: bool = True) -> TemplateSnapshot:
    return TemplateSnapshot(id=uuid.uuid4(), title="Check inbox", recurrence=recurrence, is_active=is_active)


class TestParseWeekdays(unittest.TestCase):
    def test_csv_is_trimmed_and_case_insensitive(self) -> None:
        self.assertEqual(parse_weekdays(" Mon,WED , fri"), {Weekday.MON, Weekday.WED, Weekday.FRI})

    def test_list_input_and_empty_items(self) -> None:
        self.assertEqual(parse_weekdays(["tue", "", "tue"]), {Weekday.TUE})
        self.assertEqual(parse_weekdays(None), frozenset())
        self.assertEqual(parse_weekdays(""), frozenset())

    def test_unknown_code_is_rejected(self) -> None:
        with self.assertRaises(MalformedRecurrenceError):
            parse_weekdays("mon,funday")

    def test_csv_is_written_in_week_order(self) -> None:
        self.assertEqual(weekdays_to_csv({Weekday.SUN, Weekday.MON, Weekday.THU}), "mon,thu,sun")
        self.assertIsNone(weekdays_to_csv([]))


class TestBuildRecurrence(unittest.TestCase):
    def test_daily(self) -> None:
        self.assertEqual(build_recurrence("daily"), Daily())
        self.assertEqual(build_recurrence(RecurrenceType.DAILY, "mon"), Daily())

    def test_weekly_requires_days(self) -> None:
        self.assertEqual(build_recurrence("weekly", "mon,fri"), Weekly(frozenset({Weekday.MON, Weekday.FRI})))
        with self.assertRaises(MalformedRecurrenceError):
            build_recurrence("weekly", None)
        with self.assertRaises(MalformedRecurrenceError):
            build_recurrence(RecurrenceType.WEEKLY, " , ")

    def test_once_requires_date(self) -> None:
        self.assertEqual(build_recurrence("once", once_date=date(2024, 1, 3)), Once(date(2024, 1, 3)))
        with self.assertRaises(MalformedRecurrenceError):
            build_recurrence("once")

    def test_aliases_expand_to_weekly(self) -> None:
        workdays = build_recurrence("Weekdays")
        self.assertEqual(
            workdays,
            Weekly(frozenset({Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI})),
        )
        self.assertEqual(build_recurrence("weekends"), Weekly(frozenset({Weekday.SAT, Weekday.SUN})))

    def test_unknown_type_is_rejected(self) -> None:
        for value in ("monthly", "", None):
            with self.subTest(value=value):
                with self.assertRaises(MalformedRecurrenceError):
                    build_recurrence(value)

    def test_storage_columns(self) -> None:
        self.assertEqual(
            recurrence_columns(build_recurrence("weekends")),
            {"recurrence_type": RecurrenceType.WEEKLY, "recurrence_weekdays": "sat,sun", "once_date": None},
        )
        self.assertEqual(
            recurrence_columns(Once(date(2024, 2, 29))),
            {"recurrence_type": RecurrenceType.ONCE, "recurrence_weekdays": None, "once_date": date(2024, 2, 29)},
        )
        self.assertEqual(
            recurrence_columns(Daily()),
            {"recurrence_type": RecurrenceType.DAILY, "recurrence_weekdays": None, "once_date": None},
        )


class TestIsScheduled(unittest.TestCase):
    def test_weekly_mon_wed_fri_over_one_week(self) -> None:
        template = _template(build_recurrence("weekly", "mon,wed,fri"))
        monday = date(2024, 1, 1)
        scheduled = [monday + timedelta(days=i) for i in range(7) if is_scheduled(template, monday + timedelta(days=i))]
        self.assertEqual(scheduled, [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5)])

    def test_daily_schedules_every_day(self) -> None:
        template = _template(Daily())
        start = date(2024, 2, 26)
        self.assertTrue(all(is_scheduled(template, start + timedelta(days=i)) for i in range(7)))

    def test_once_schedules_a_single_day(self) -> None:
        recurrence = Once(date(2024, 3, 15))
        self.assertTrue(matches_recurrence(recurrence, date(2024, 3, 15)))
        self.assertFalse(matches_recurrence(recurrence, date(2024, 3, 16)))
        self.assertFalse(matches_recurrence(recurrence, date(2023, 3, 15)))

    def test_inactive_template_never_schedules(self) -> None:
        template = _template(Daily(), is_active=False)
        self.assertFalse(is_scheduled(template, date(2024, 1, 1)))

    def test_sunday_maps_to_sun(self) -> None:
        self.assertEqual(Weekday.of(date(2024, 1, 7)), Weekday.SUN)
        self.assertTrue(matches_recurrence(Weekly(frozenset({Weekday.SUN})), date(2024, 1, 7)))


if __name__ == "__main__":
    unittest.main()
