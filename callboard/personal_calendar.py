"""Personal calendar assembly.

Combines every relationship a user has with productions (cast member, owner,
production team member) into one deduplicated event list, alongside their
own audition and callback appointments and expanded personal events.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from .deduplicator import EventDeduplicator
from .event_generator import EventGenerator, generate_audition_calendar_events, generate_user_calendar_events
from .models import (
    AuditionRecord,
    CalendarEvent,
    PersonalEvent,
    ProductionDateEvent,
    UserRole,
)
from .protocols import CalendarDataSource, TimeProvider
from .recurrence import expand_recurring_events
from .timeutils import now_utc

logger = logging.getLogger(__name__)

# Personal events are loaded this far either side of "now"
DEFAULT_WINDOW_MONTHS = 6


@dataclass
class PersonalCalendar:
    """Result of assembling a user's calendar."""

    production_events: list[ProductionDateEvent] = field(default_factory=list)
    personal_events: list[PersonalEvent] = field(default_factory=list)
    appointments: list[CalendarEvent] = field(default_factory=list)
    window_start: Optional[datetime.datetime] = None
    window_end: Optional[datetime.datetime] = None

    @property
    def total_events(self) -> int:
        return len(self.production_events) + len(self.personal_events) + len(self.appointments)


class PersonalCalendarBuilder:
    """Runs the per-role generators and merges their output.

    Priority order for deduplication: cast, owner, production team, assigned
    production events, managed production events.
    """

    def __init__(
        self,
        generator: Optional[EventGenerator] = None,
        deduplicator: Optional[EventDeduplicator] = None,
    ):
        self.generator = generator or EventGenerator()
        self.deduplicator = deduplicator or EventDeduplicator()

    def build(
        self,
        cast_shows: Sequence[Any] = (),
        owned_auditions: Sequence[Any] = (),
        team_auditions: Sequence[Any] = (),
        owned_slots: Sequence[Any] = (),
        team_slots: Sequence[Any] = (),
        cast_rehearsal_events: Sequence[Any] = (),
        owned_rehearsal_events: Sequence[Any] = (),
        team_rehearsal_events: Sequence[Any] = (),
        assigned_production_events: Sequence[Any] = (),
        managed_production_events: Sequence[Any] = (),
    ) -> list[ProductionDateEvent]:
        """Generate, merge and deduplicate the production side of the calendar.

        Each rehearsal list is the one fetched through that relationship. A
        rehearsal reached both as cast and as owner is kept as cast.
        """
        all_slots = [*owned_slots, *team_slots]

        generate = self.generator.generate_production_events
        merged = self.deduplicator.merge_event_lists(
            generate(cast_shows, UserRole.CAST, [], cast_rehearsal_events),
            generate(owned_auditions, UserRole.OWNER, all_slots, owned_rehearsal_events),
            generate(team_auditions, UserRole.PRODUCTION_TEAM, all_slots, team_rehearsal_events),
            self.generator.map_production_events(assigned_production_events, UserRole.CAST),
            self.generator.map_production_events(managed_production_events, UserRole.OWNER),
        )

        logger.info(
            "Personal calendar: %d production events (%d owned, %d team, %d cast auditions)",
            len(merged),
            len(owned_auditions),
            len(team_auditions),
            len(cast_shows),
        )
        return merged


class PersonalCalendarService:
    """Pulls a user's records from a data source and builds their calendar."""

    def __init__(
        self,
        source: CalendarDataSource,
        builder: Optional[PersonalCalendarBuilder] = None,
        time_provider: TimeProvider = now_utc,
        window_months: int = DEFAULT_WINDOW_MONTHS,
    ):
        self.source = source
        self.builder = builder or PersonalCalendarBuilder()
        self.time_provider = time_provider
        self.window_months = window_months

    def load(self, user_id: str, personal_events: Iterable[Any] = ()) -> PersonalCalendar:
        """Fetch every record for ``user_id`` and assemble the calendar.

        The user's own audition signups and accepted callbacks become timed
        appointments. Recurring personal events are expanded inside a window
        of ``window_months`` either side of the current time.
        """
        source = self.source
        production_events = self.builder.build(
            cast_shows=source.fetch_cast_shows(user_id),
            owned_auditions=source.fetch_owned_auditions(user_id),
            team_auditions=source.fetch_production_team_auditions(user_id),
            owned_slots=source.fetch_owned_slots(user_id),
            team_slots=source.fetch_production_team_slots(user_id),
            cast_rehearsal_events=source.fetch_rehearsal_events_for_user(user_id, UserRole.CAST),
            owned_rehearsal_events=source.fetch_rehearsal_events_for_user(user_id, UserRole.OWNER),
            team_rehearsal_events=source.fetch_rehearsal_events_for_user(user_id, UserRole.PRODUCTION_TEAM),
            assigned_production_events=source.fetch_assigned_production_events(user_id),
            managed_production_events=source.fetch_managed_production_events(user_id),
        )
        appointments = generate_user_calendar_events(
            source.fetch_user_signups(user_id),
            source.fetch_user_callbacks(user_id),
        )

        now = self.time_provider()
        window_start = now - relativedelta(months=self.window_months)
        window_end = now + relativedelta(months=self.window_months)
        personal = [
            event if isinstance(event, PersonalEvent) else PersonalEvent.model_validate(event)
            for event in personal_events
        ]

        return PersonalCalendar(
            production_events=production_events,
            personal_events=expand_recurring_events(personal, window_start, window_end),
            appointments=appointments,
            window_start=window_start,
            window_end=window_end,
        )

    def audition_calendar(self, audition: Any, callback_slots: Iterable[Any] = ()) -> list[CalendarEvent]:
        """Export-shape events for one audition, slots fetched from the source."""
        record = audition if isinstance(audition, AuditionRecord) else AuditionRecord.model_validate(audition)
        slots = self.source.fetch_slots_for_audition(record.audition_id) if record.audition_id else []
        return generate_audition_calendar_events(record, slots, callback_slots)
