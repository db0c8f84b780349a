"""Unit tests for conflicts module."""

from datetime import UTC, datetime

import pytest

from callboard.conflicts import (
    CSV_HEADER,
    NO_EVENTS_MESSAGE,
    build_conflict_csv,
    build_conflict_days,
    build_conflict_plain_text,
    conflict_events_from,
    date_key_in,
    format_date_heading,
    ranges_overlap,
)
from callboard.models import EventType, PersonalEvent, ProductionDateEvent, UserRole

pytestmark = pytest.mark.unit

TZ = "America/Chicago"


def personal(event_id, title, start_hour, end_hour, day=1):
    return PersonalEvent(
        id=event_id,
        title=title,
        start=datetime(2024, 6, day, start_hour, 0),
        end=datetime(2024, 6, day, end_hour, 0),
    )


class TestRangesOverlap:
    def test_touching_ranges_do_not_overlap(self):
        a = datetime(2024, 6, 1, 18, 0)
        b = datetime(2024, 6, 1, 20, 0)
        c = datetime(2024, 6, 1, 21, 0)
        assert ranges_overlap(a, b, b, c) is False
        assert ranges_overlap(a, c, b, c) is True


class TestConflictEvents:
    """Tests for conflict_events_from() and date grouping."""

    def test_personal_events_read_in_calendar_zone(self):
        converted = conflict_events_from([personal("e1", "Dinner", 18, 20)], TZ)[0]

        assert converted.type == "personal_event"
        assert converted.start.utcoffset().total_seconds() == -5 * 3600

    def test_all_day_production_dates_are_skipped(self):
        events = [
            ProductionDateEvent(
                type=EventType.REHEARSAL, title="Hamlet - Rehearsal", date=datetime(2024, 6, 1), user_role=UserRole.CAST
            ),
            ProductionDateEvent(
                type=EventType.AUDITION_SLOT,
                title="Hamlet - Audition Slot",
                date=datetime(2024, 6, 1, 23, 0, tzinfo=UTC),
                start_time=datetime(2024, 6, 1, 23, 0, tzinfo=UTC),
                end_time=datetime(2024, 6, 1, 23, 15, tzinfo=UTC),
                slot_id="s1",
                user_role=UserRole.OWNER,
            ),
        ]

        converted = conflict_events_from(events, TZ)

        assert [(e.id, e.type) for e in converted] == [("s1", "audition_slot")]

    def test_date_key_uses_calendar_zone(self):
        key = date_key_in(TZ)
        assert key(datetime(2024, 6, 2, 2, 0, tzinfo=UTC)) == "2024-06-01"


class TestConflictDays:
    """Tests for build_conflict_days() and the exports."""

    def setup_method(self):
        events = conflict_events_from(
            [
                personal("c", "Choir", 20, 21),
                personal("a", "Dinner, late", 18, 20),
                personal("b", "Work", 19, 21),
                personal("d", "Gym", 7, 8, day=2),
            ],
            TZ,
        )
        self.days = build_conflict_days(events, date_key_in(TZ))

    def test_days_sorted_with_conflicts(self):
        assert [d.date_key for d in self.days] == ["2024-06-01", "2024-06-02"]
        first = self.days[0]
        assert [e.id for e in first.events] == ["a", "b", "c"]
        assert first.conflicts == {"a": ["b"], "b": ["a", "c"], "c": ["b"]}
        assert self.days[1].conflicts == {}

    def test_csv(self):
        lines = build_conflict_csv(self.days, tz_name=TZ).split("\n")

        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1] == '06/01/2024,6:00 PM,8:00 PM,"Dinner, late",personal_event,1'
        assert lines[2] == "06/01/2024,7:00 PM,9:00 PM,Work,personal_event,2"
        assert lines[-1] == "06/02/2024,7:00 AM,8:00 AM,Gym,personal_event,0"

    def test_csv_hides_names(self):
        csv_text = build_conflict_csv(self.days, include_names=False, tz_name=TZ)
        assert "Dinner" not in csv_text
        assert csv_text.split("\n")[1].split(",")[3] == "Busy"

    def test_plain_text(self):
        text = build_conflict_plain_text(self.days, "Jamie Doe", tz_name=TZ)
        lines = text.split("\n")

        assert lines[:4] == ["Jamie Doe — Conflicts", "Time Zone: America/Chicago", "", "Saturday, June 1, 2024"]
        assert "- 6:00 PM - 8:00 PM  Dinner, late (conflict)" in lines
        assert "- 7:00 AM - 8:00 AM  Gym" in lines

    def test_plain_text_hides_names(self):
        text = build_conflict_plain_text(self.days, "Jamie Doe", include_names=False, tz_name=TZ)

        assert "- Busy from 6:00 PM to 8:00 PM (conflict)" in text
        assert "Dinner" not in text

    def test_plain_text_without_events(self):
        text = build_conflict_plain_text([], "Jamie Doe", tz_name=TZ)
        assert text.endswith(NO_EVENTS_MESSAGE)

    def test_heading_format(self):
        assert format_date_heading("2024-06-02") == "Sunday, June 2, 2024"
