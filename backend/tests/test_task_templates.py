import unittest
import uuid
from datetime import date, datetime, timezone

from pydantic import ValidationError

from dailytasks.domain import Weekly
from dailytasks.models.enums import RecurrenceType, TaskPriority, Weekday
from dailytasks.models.task_template import TaskTemplate
from dailytasks.schemas.task_template import TaskTemplateCreate, TaskTemplateUpdate
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.task_templates import apply_template_update, new_template, template_to_out


def _stored_template(**overrides) -> TaskTemplate:
    values = {
        "id": uuid.uuid4(),
        "title": "Cash count",
        "priority": TaskPriority.MEDIUM,
        "recurrence_type": RecurrenceType.WEEKLY,
        "recurrence_weekdays": "mon,wed",
        "once_date": None,
        "is_active": True,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return TaskTemplate(**values)


class TestTaskTemplateCreate(unittest.TestCase):
    def test_weekly_needs_weekdays(self) -> None:
        with self.assertRaises(ValidationError):
            TaskTemplateCreate(title="Cash count", recurrence_type="weekly")

    def test_once_needs_a_date(self) -> None:
        with self.assertRaises(ValidationError):
            TaskTemplateCreate(title="Inventory", recurrence_type="once")

    def test_unknown_weekday_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            TaskTemplateCreate(title="Cash count", recurrence_type="weekly", recurrence_weekdays=["mon", "xyz"])

    def test_alias_is_stored_as_weekly(self) -> None:
        payload = TaskTemplateCreate(title="Weekend check", recurrence_type="weekends")
        self.assertEqual(payload.recurrence(), Weekly(frozenset({Weekday.SAT, Weekday.SUN})))
        template = new_template(payload)
        self.assertEqual(template.recurrence_type, RecurrenceType.WEEKLY)
        self.assertEqual(template.recurrence_weekdays, "sat,sun")
        self.assertIsNone(template.once_date)
        self.assertEqual(template.priority, TaskPriority.LOW)

    def test_csv_weekdays_are_normalized(self) -> None:
        template = new_template(
            TaskTemplateCreate(title="Cash count", recurrence_type="weekly", recurrence_weekdays="FRI, mon")
        )
        self.assertEqual(template.recurrence_weekdays, "mon,fri")


class TestApplyTemplateUpdate(unittest.TestCase):
    def test_title_only_keeps_recurrence(self) -> None:
        template = _stored_template()
        changes = apply_template_update(template, TaskTemplateUpdate(title="Till count"))
        self.assertEqual(changes, {"title": "Till count"})
        self.assertEqual(template.recurrence_weekdays, "mon,wed")

    def test_switching_to_daily_clears_weekdays(self) -> None:
        template = _stored_template()
        apply_template_update(template, TaskTemplateUpdate(recurrence_type="daily"))
        self.assertEqual(template.recurrence_type, RecurrenceType.DAILY)
        self.assertIsNone(template.recurrence_weekdays)

    def test_new_weekdays_merge_with_stored_type(self) -> None:
        template = _stored_template()
        apply_template_update(template, TaskTemplateUpdate(recurrence_weekdays=["sun"]))
        self.assertEqual(template.recurrence_type, RecurrenceType.WEEKLY)
        self.assertEqual(template.recurrence_weekdays, "sun")

    def test_switching_to_once_requires_a_date(self) -> None:
        template = _stored_template()
        with self.assertRaises(MalformedRecurrenceError):
            apply_template_update(template, TaskTemplateUpdate(recurrence_type="once"))
        self.assertEqual(template.recurrence_type, RecurrenceType.WEEKLY)

        changes = apply_template_update(
            template, TaskTemplateUpdate(recurrence_type="once", once_date=date(2024, 5, 1))
        )
        self.assertEqual(changes["once_date"], date(2024, 5, 1))
        self.assertIsNone(template.recurrence_weekdays)

    def test_explicit_nulls_do_not_blank_required_fields(self) -> None:
        template = _stored_template()
        changes = apply_template_update(template, TaskTemplateUpdate(title=None, is_active=None, description=None))
        self.assertEqual(changes, {"description": None})
        self.assertEqual(template.title, "Cash count")
        self.assertTrue(template.is_active)

    def test_out_lists_weekdays_in_week_order(self) -> None:
        out = template_to_out(_stored_template(recurrence_weekdays="wed,mon"))
        self.assertEqual(out.recurrence_weekdays, [Weekday.MON, Weekday.WED])
        once = template_to_out(
            _stored_template(recurrence_type=RecurrenceType.ONCE, recurrence_weekdays=None, once_date=date(2024, 5, 1))
        )
        self.assertEqual(once.recurrence_weekdays, [])


if __name__ == "__main__":
    unittest.main()
