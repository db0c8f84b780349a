"""Unit tests for recurrence module."""

from datetime import UTC, datetime, timedelta

import pytest

from callboard.models import PersonalEvent, RecurrenceRule
from callboard.recurrence import build_rule, expand_recurring_event, expand_recurring_events

pytestmark = pytest.mark.unit

WINDOW_START = datetime(2024, 6, 1, tzinfo=UTC)
WINDOW_END = datetime(2024, 7, 31, tzinfo=UTC)


def weekly(**rule):
    return PersonalEvent.model_validate(
        {
            "id": "e1",
            "title": "Voice lesson",
            "start": "2024-06-03T18:00:00Z",
            "end": "2024-06-03T19:00:00Z",
            "isRecurring": True,
            "recurrenceRule": {"freq": "WEEKLY", **rule},
        }
    )


class TestExpandRecurringEvent:
    """Tests for expand_recurring_event()."""

    def test_count_limits_instances(self):
        instances = expand_recurring_event(weekly(count=4), WINDOW_START, WINDOW_END)

        assert [i.start.day for i in instances] == [3, 10, 17, 24]
        assert instances[0].id == "e1_1717437600000"
        assert instances[1].id == "e1_1718042400000"
        assert all(i.original_event_id == "e1" and i.is_instance for i in instances)
        assert all(i.end - i.start == timedelta(hours=1) for i in instances)

    def test_until_wins_over_count(self):
        instances = expand_recurring_event(weekly(count=10, until="2024-06-17T18:00:00Z"), WINDOW_START, WINDOW_END)
        assert [i.start.day for i in instances] == [3, 10, 17]

    def test_window_bounds_expansion(self):
        instances = expand_recurring_event(
            weekly(), datetime(2024, 6, 5, tzinfo=UTC), datetime(2024, 6, 20, tzinfo=UTC)
        )
        assert [i.start.day for i in instances] == [10, 17]

    def test_by_day(self):
        instances = expand_recurring_event(
            weekly(byDay=["MO", "WE"]), WINDOW_START, datetime(2024, 6, 10, tzinfo=UTC)
        )
        assert [i.start.day for i in instances] == [3, 5]

    def test_naive_event_with_aware_window(self):
        event = PersonalEvent(
            id="n1",
            title="Daily warmup",
            start=datetime(2024, 6, 1, 8, 0),
            end=datetime(2024, 6, 1, 8, 30),
            is_recurring=True,
            recurrence_rule=RecurrenceRule(frequency="daily", count=3),
        )
        instances = expand_recurring_event(event, WINDOW_START, WINDOW_END)
        assert [i.start for i in instances] == [datetime(2024, 6, d, 8, 0) for d in (1, 2, 3)]

    def test_non_recurring_event_returned_as_is(self):
        event = weekly().model_copy(update={"is_recurring": False})
        assert expand_recurring_event(event, WINDOW_START, WINDOW_END) == [event]

    def test_unknown_frequency_returned_as_is(self):
        event = weekly().model_copy(update={"recurrence_rule": RecurrenceRule(frequency="HOURLY")})
        assert expand_recurring_event(event, WINDOW_START, WINDOW_END) == [event]
        assert build_rule(event.recurrence_rule, event.start) is None


class TestExpandRecurringEvents:
    def test_results_sorted_by_start(self):
        single = PersonalEvent(
            id="s1",
            title="Fitting",
            start=datetime(2024, 6, 4, 12, 0, tzinfo=UTC),
            end=datetime(2024, 6, 4, 13, 0, tzinfo=UTC),
        )

        result = expand_recurring_events([weekly(count=2), single], WINDOW_START, WINDOW_END)

        assert [e.id for e in result] == ["e1_1717437600000", "s1", "e1_1718042400000"]
