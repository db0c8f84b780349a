"""Unit tests for models module."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from callboard.models import (
    AgendaItem,
    AuditionRecord,
    CastMembership,
    EventType,
    PersonalEvent,
    ProductionDateEvent,
    ResumeProfile,
    Slot,
    UserRole,
    WatermarkSettings,
)

pytestmark = pytest.mark.unit


class TestBackendRows:
    """Validation of backend-shaped rows."""

    def test_audition_record_aliases_and_tokens(self, hamlet_audition):
        record = AuditionRecord.model_validate(hamlet_audition)

        assert record.show.title == "Hamlet"
        assert record.audition_location == "Lobby"
        assert record.rehearsal_dates == ["2024-06-01", "not-a-date", "2024-06-03"]
        assert record.workflow_status.value == "rehearsing"

    def test_date_tokens_drop_blanks(self):
        record = AuditionRecord.model_validate({"performance_dates": ["2024-07-01", None, " "]})
        assert record.performance_dates == ["2024-07-01"]

    def test_cast_membership_navigation(self, cast_membership):
        membership = CastMembership.model_validate(cast_membership)

        assert membership.audition.audition_id == "a1"
        assert membership.role_name == "Ophelia"

    def test_agenda_item_times_normalized(self):
        item = AgendaItem.model_validate(
            {"rehearsal_agenda_items_id": "i1", "title": "Notes", "start_time": "9:05:00", "end_time": "10:00"}
        )
        assert (item.start_time, item.end_time) == ("09:05", "10:00")

    def test_agenda_item_bad_time(self):
        with pytest.raises(ValidationError):
            AgendaItem(id="i1", title="Notes", start_time="noon", end_time="13:00")

    def test_personal_event_camel_case(self):
        event = PersonalEvent.model_validate(
            {
                "id": "e1",
                "title": "Lesson",
                "start": "2024-06-03T18:00:00Z",
                "end": "2024-06-03T19:00:00Z",
                "isRecurring": True,
                "recurrenceRule": {"freq": "WEEKLY", "byDay": ["MO"]},
            }
        )
        assert event.is_recurring
        assert event.recurrence_rule.by_day == ["MO"]

    def test_slot_capacity_and_timing(self, hamlet_slot):
        slot = Slot.model_validate({**hamlet_slot, "current_signups": None})

        assert slot.capacity == 1
        assert slot.is_open
        assert slot.is_future(datetime(2024, 5, 20, 17, 0, tzinfo=UTC))
        assert not slot.is_future(datetime(2024, 5, 20, 18, 0, tzinfo=UTC))


class TestProductionDateEvent:
    def setup_method(self):
        self.event = ProductionDateEvent(
            type=EventType.REHEARSAL,
            title="Hamlet - Rehearsal",
            date=datetime(2024, 6, 1),
            user_role=UserRole.OWNER,
        )

    def test_frozen(self):
        with pytest.raises(ValidationError):
            self.event.title = "Changed"

    def test_serializes_iso_dates(self):
        data = self.event.model_dump()

        assert data["date"] == "2024-06-01T00:00:00"
        assert data["start_time"] is None
        assert data["type"] is EventType.REHEARSAL

    def test_all_day(self):
        assert self.event.is_all_day


class TestExportModels:
    def test_resume_full_name(self):
        assert ResumeProfile(first_name="Jamie", middle_name="Lee", last_name="Doe").full_name == "Jamie Lee Doe"
        assert ResumeProfile().full_name == "Actor Resume"

    def test_watermark_opacity_bounds(self):
        with pytest.raises(ValidationError):
            WatermarkSettings(text="DRAFT", opacity=1.5)
