"""Calendar event generation from casting records.

Turns the heterogeneous rows a user can reach (owned auditions, production team
memberships, cast memberships, audition slots, rehearsal events, production
events) into uniform :class:`ProductionDateEvent` objects tagged with the
relationship that surfaced them. Inputs are never mutated.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from .models import (
    AuditionRecord,
    CalendarEvent,
    CastMembership,
    EventType,
    ProductionDateEvent,
    ProductionEvent,
    ProductionTeamMembership,
    RehearsalEvent,
    ShowInfo,
    Slot,
    UserRole,
)
from .timeutils import clock_to_minutes, combine_date_and_time, parse_local_date

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Human-readable labels for exports (PDF colour coding keys off these)
EVENT_TYPE_LABELS: dict[EventType, str] = {
    EventType.REHEARSAL: "Rehearsal",
    EventType.PERFORMANCE: "Performance",
    EventType.AUDITION_SLOT: "Audition",
    EventType.REHEARSAL_EVENT: "Rehearsal",
    EventType.AGENDA_ITEM: "Agenda Item",
    EventType.PRODUCTION_EVENT: "Production",
    EventType.CAST: "Cast",
}


def _coerce(model_cls: type[ModelT], item: Any) -> ModelT:
    """Validate a backend row into ``model_cls`` unless it already is one."""
    if isinstance(item, model_cls):
        return item
    return model_cls.model_validate(item)


def parse_date_tokens(tokens: Iterable[str] | str | None) -> list[datetime.date]:
    """Parse date tokens (list or comma-joined string), skipping malformed ones."""
    if tokens is None:
        return []
    if isinstance(tokens, str):
        tokens = tokens.split(",")

    dates = []
    for token in tokens:
        parsed = parse_local_date(token)
        if parsed is None:
            if token and str(token).strip():
                logger.debug("Skipping malformed date token %r", token)
            continue
        dates.append(parsed)
    return dates


def get_date_range(
    date_data: Iterable[str] | str | None,
) -> tuple[datetime.date | None, datetime.date | None]:
    """First and last valid date of a date list, or (None, None)."""
    dates = sorted(parse_date_tokens(date_data))
    if not dates:
        return None, None
    return dates[0], dates[-1]


def _midnight(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time.min)


class EventGenerator:
    """Builds unified calendar events for one relationship category at a time."""

    def generate_production_events(
        self,
        source_records: Iterable[Any],
        role: UserRole | str,
        slots: Iterable[Any] | None = None,
        rehearsal_events: Iterable[Any] | None = None,
    ) -> list[ProductionDateEvent]:
        """Generate calendar events for the records reached through ``role``.

        Args:
            source_records: Owned auditions (owner), production team memberships
                (production_team) or cast memberships (cast)
            role: Relationship the records were fetched through
            slots: Audition slots; each slot belonging to one of the records'
                auditions becomes an ``audition_slot`` event
            rehearsal_events: Rehearsal events; each becomes one
                ``rehearsal_event`` carrying its agenda items

        Returns:
            New list of events tagged with ``user_role=role``
        """
        role = UserRole(role)
        events: list[ProductionDateEvent] = []

        auditions: dict[str, AuditionRecord] = {}
        role_titles: dict[str, str] = {}

        for item in source_records:
            audition, role_title = self._unwrap_record(item, role)
            if audition is None or audition.show is None:
                logger.debug("Skipping %s record without audition/show data", role.value)
                continue

            if audition.audition_id:
                auditions.setdefault(audition.audition_id, audition)
                if role_title:
                    role_titles.setdefault(audition.audition_id, role_title)

            events.extend(self._date_list_events(audition, role, role_title))

        for raw_slot in slots or ():
            slot = _coerce(Slot, raw_slot)
            event = self._slot_event(slot, auditions, role, role_titles)
            if event is not None:
                events.append(event)

        for raw_event in rehearsal_events or ():
            rehearsal = _coerce(RehearsalEvent, raw_event)
            event = self._rehearsal_event(rehearsal, auditions, role, role_titles)
            if event is not None:
                events.append(event)

        logger.debug("Generated %d %s events", len(events), role.value)
        return events

    def _unwrap_record(
        self, item: Any, role: UserRole
    ) -> tuple[AuditionRecord | None, str | None]:
        """Find the audition inside a record according to its relationship shape."""
        if role is UserRole.CAST:
            membership = _coerce(CastMembership, item)
            return membership.audition, membership.role_name
        if role is UserRole.PRODUCTION_TEAM:
            team = _coerce(ProductionTeamMembership, item)
            return team.audition, team.role_title
        return _coerce(AuditionRecord, item), None

    def _date_list_events(
        self,
        audition: AuditionRecord,
        role: UserRole,
        role_title: str | None,
    ) -> list[ProductionDateEvent]:
        """All-day rehearsal/performance events from the audition's date lists."""
        show = audition.show
        events = []

        for event_type, tokens, location in (
            (EventType.REHEARSAL, audition.rehearsal_dates, audition.rehearsal_location),
            (EventType.PERFORMANCE, audition.performance_dates, audition.performance_location),
        ):
            label = EVENT_TYPE_LABELS[event_type]
            for day in parse_date_tokens(tokens):
                events.append(
                    ProductionDateEvent(
                        type=event_type,
                        title=f"{show.title} - {label}",
                        date=_midnight(day),
                        location=location,
                        audition_id=audition.audition_id,
                        show=show,
                        role=role_title,
                        user_role=role,
                    )
                )
        return events

    def _slot_event(
        self,
        slot: Slot,
        auditions: Mapping[str, AuditionRecord],
        role: UserRole,
        role_titles: Mapping[str, str],
    ) -> ProductionDateEvent | None:
        audition_id = slot.audition.audition_id if slot.audition else None
        audition = auditions.get(audition_id or "")
        if audition is None and role is not UserRole.CAST and slot.audition and slot.audition.show:
            # Managers' slot queries already embed the owning audition
            audition = slot.audition
        if audition is None:
            logger.debug("Skipping slot %s not belonging to a %s audition", slot.id, role.value)
            return None

        show = (slot.audition.show if slot.audition else None) or audition.show

        return ProductionDateEvent(
            type=EventType.AUDITION_SLOT,
            title=f"{show.title} - Audition Slot",
            date=slot.start_time,
            start_time=slot.start_time,
            end_time=slot.end_time,
            location=slot.location or audition.audition_location,
            slot_id=slot.id,
            audition_id=audition_id,
            show=show,
            role=role_titles.get(audition_id),
            user_role=role,
        )

    def _rehearsal_event(
        self,
        rehearsal: RehearsalEvent,
        auditions: Mapping[str, AuditionRecord],
        role: UserRole,
        role_titles: Mapping[str, str],
    ) -> ProductionDateEvent | None:
        audition = rehearsal.audition
        # Prefer the full record: embedded auditions often carry only id and show
        if audition is not None and audition.audition_id in auditions:
            audition = auditions[audition.audition_id]
        if audition is None or audition.show is None:
            logger.debug("Skipping rehearsal event %s without audition/show data", rehearsal.id)
            return None

        start = combine_date_and_time(rehearsal.date, rehearsal.start_time)
        end = combine_date_and_time(rehearsal.date, rehearsal.end_time)

        # Agenda items stay nested: they are detail content, not calendar entries
        agenda = sorted(rehearsal.agenda_items, key=lambda item: clock_to_minutes(item.start_time))

        return ProductionDateEvent(
            type=EventType.REHEARSAL_EVENT,
            title=f"{audition.show.title} - Rehearsal",
            date=start,
            start_time=start,
            end_time=end,
            location=rehearsal.location or audition.rehearsal_location,
            description=rehearsal.notes,
            event_id=rehearsal.id,
            audition_id=audition.audition_id,
            show=audition.show,
            role=role_titles.get(audition.audition_id or ""),
            user_role=role,
            agenda_items=agenda,
        )

    def map_production_events(
        self,
        rows: Iterable[Any],
        role: UserRole | str,
    ) -> list[ProductionDateEvent]:
        """Map production event rows to ``production_event`` calendar entries.

        Rows with both start and end times become timed events; others are all-day.
        """
        role = UserRole(role)
        events = []
        for row in rows:
            production_event = _coerce(ProductionEvent, row)
            show = production_event.audition.show if production_event.audition else None
            type_name = (
                production_event.event_type.name if production_event.event_type else "Production Event"
            )
            title = f"{show.title} - {type_name}" if show else type_name

            start_time = end_time = None
            if production_event.start_time and production_event.end_time:
                start_time = combine_date_and_time(production_event.date, production_event.start_time)
                end_time = combine_date_and_time(production_event.date, production_event.end_time)

            audition_id = production_event.audition_id or (
                production_event.audition.audition_id if production_event.audition else None
            )
            events.append(
                ProductionDateEvent(
                    type=EventType.PRODUCTION_EVENT,
                    title=title,
                    date=start_time or _midnight(production_event.date),
                    start_time=start_time,
                    end_time=end_time,
                    location=production_event.location,
                    description=production_event.notes,
                    production_event_id=production_event.id,
                    audition_id=audition_id,
                    show=show,
                    user_role=role,
                )
            )
        return events

    def generate_agenda_item_events(self, rehearsal_events: Iterable[Any]) -> list[ProductionDateEvent]:
        """Flatten agenda items into standalone ``agenda_item`` events.

        Used for call sheets. The personal calendar keeps agenda items nested in
        their rehearsal instead; these events share the rehearsal's ``event_id``
        and must not be deduplicated together with it.
        """
        events = []
        for raw_event in rehearsal_events:
            rehearsal = _coerce(RehearsalEvent, raw_event)
            audition = rehearsal.audition
            if audition is None or audition.show is None:
                continue

            for item in rehearsal.agenda_items:
                start = combine_date_and_time(rehearsal.date, item.start_time)
                events.append(
                    ProductionDateEvent(
                        type=EventType.AGENDA_ITEM,
                        title=f"{audition.show.title} - {item.title}",
                        date=start,
                        start_time=start,
                        end_time=combine_date_and_time(rehearsal.date, item.end_time),
                        location=rehearsal.location,
                        description=item.description,
                        event_id=rehearsal.id,
                        agenda_item_id=item.id,
                        audition_id=audition.audition_id,
                        show=audition.show,
                        user_role=UserRole.CAST,
                    )
                )
        return events


_default_generator = EventGenerator()


def generate_events(
    source_records: Iterable[Any],
    role: UserRole | str,
    slots: Iterable[Any] | None = None,
    rehearsal_events: Iterable[Any] | None = None,
) -> list[ProductionDateEvent]:
    """Module-level shortcut for :meth:`EventGenerator.generate_production_events`."""
    return _default_generator.generate_production_events(source_records, role, slots, rehearsal_events)


def map_production_events(rows: Iterable[Any], role: UserRole | str) -> list[ProductionDateEvent]:
    return _default_generator.map_production_events(rows, role)


def generate_agenda_item_events(rehearsal_events: Iterable[Any]) -> list[ProductionDateEvent]:
    return _default_generator.generate_agenda_item_events(rehearsal_events)


def filter_events_by_audition_id(
    events: Iterable[ProductionDateEvent], audition_id: str
) -> list[ProductionDateEvent]:
    return [event for event in events if event.audition_id == audition_id]


# Export-shape generators


def to_calendar_event(event: ProductionDateEvent) -> CalendarEvent:
    """Convert a unified event into the export shape."""
    return CalendarEvent(
        title=event.title,
        start=event.start_time or event.date,
        end=event.end_time,
        all_day=event.is_all_day,
        description=event.description,
        location=event.location,
        type_label=EVENT_TYPE_LABELS[event.type],
    )


def to_calendar_events(events: Iterable[ProductionDateEvent]) -> list[CalendarEvent]:
    return [to_calendar_event(event) for event in events]


def _all_day(title: str, description: str, location: str | None, day: datetime.date, label: str) -> CalendarEvent:
    return CalendarEvent(
        title=title,
        description=description,
        location=location,
        start=_midnight(day),
        end=_midnight(day + datetime.timedelta(days=1)),
        all_day=True,
        type_label=label,
    )


def _slot_from_signup(item: Any, nested_key: str) -> Slot:
    """Signup rows nest the slot under ``audition_slots`` / ``callback_slots``."""
    if isinstance(item, Mapping) and nested_key in item:
        item = item[nested_key]
    return _coerce(Slot, item)


def generate_audition_calendar_events(
    audition: Any,
    slots: Iterable[Any] = (),
    callback_slots: Iterable[Any] = (),
) -> list[CalendarEvent]:
    """Everything a production team member may want in their own calendar app.

    Audition days, performance and rehearsal days are all-day events; audition
    and callback slots are timed.
    """
    record = _coerce(AuditionRecord, audition)
    show_title = record.show.title if record.show else "Audition"
    events: list[CalendarEvent] = []

    for day in parse_date_tokens(record.audition_dates):
        events.append(
            _all_day(
                f"Audition - {show_title}",
                f"Audition day for {show_title}",
                record.audition_location,
                day,
                "Audition",
            )
        )

    for raw_slot in slots:
        slot = _coerce(Slot, raw_slot)
        events.append(
            CalendarEvent(
                title=f"Audition Slot - {show_title}",
                description=f"Audition time slot for {show_title}",
                location=slot.location or record.audition_location,
                start=slot.start_time,
                end=slot.end_time,
                type_label="Audition",
            )
        )

    for day in parse_date_tokens(record.rehearsal_dates):
        events.append(
            _all_day(
                f"Rehearsal - {show_title}",
                f"Rehearsal for {show_title}",
                record.rehearsal_location,
                day,
                "Rehearsal",
            )
        )

    for day in parse_date_tokens(record.performance_dates):
        events.append(
            _all_day(
                f"Performance - {show_title}",
                f"Performance of {show_title}",
                record.performance_location,
                day,
                "Performance",
            )
        )

    for raw_slot in callback_slots:
        slot = _coerce(Slot, raw_slot)
        events.append(
            CalendarEvent(
                title=f"Callback - {show_title}",
                description=f"Callback audition for {show_title}",
                location=slot.location or record.audition_location,
                start=slot.start_time,
                end=slot.end_time,
                type_label="Callback",
            )
        )

    return events


def generate_user_calendar_events(
    signups: Iterable[Any] = (),
    callbacks: Iterable[Any] = (),
    production_events: Iterable[ProductionDateEvent] = (),
) -> list[CalendarEvent]:
    """A performer's personal export: signups, accepted callbacks, production dates."""
    events: list[CalendarEvent] = []

    for signup in signups:
        slot = _slot_from_signup(signup, "audition_slots")
        show: ShowInfo | None = slot.audition.show if slot.audition else None
        title = show.title if show else "Audition"
        events.append(
            CalendarEvent(
                title=f"Audition - {title}",
                description=f"Your audition appointment for {title}",
                location=slot.location,
                start=slot.start_time,
                end=slot.end_time,
                type_label="Audition",
            )
        )

    for callback in callbacks:
        slot = _slot_from_signup(callback, "callback_slots")
        show = slot.audition.show if slot.audition else None
        title = show.title if show else "Callback"
        events.append(
            CalendarEvent(
                title=f"Callback - {title}",
                description=f"Callback audition for {title}",
                location=slot.location,
                start=slot.start_time,
                end=slot.end_time,
                type_label="Callback",
            )
        )

    events.extend(to_calendar_events(production_events))
    return events


__all__ = [
    "EVENT_TYPE_LABELS",
    "EventGenerator",
    "filter_events_by_audition_id",
    "generate_agenda_item_events",
    "generate_audition_calendar_events",
    "generate_events",
    "generate_user_calendar_events",
    "get_date_range",
    "map_production_events",
    "parse_date_tokens",
    "to_calendar_event",
    "to_calendar_events",
]
