"""Per-day conflict detection and conflict exports (CSV / plain text).

Performers share their availability with a production as a list of busy
windows. Event names can be hidden, in which case every entry reads "Busy".
"""

from __future__ import annotations

import csv
import datetime
import io
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .models import EventType, PersonalEvent, ProductionDateEvent
from .timeutils import DEFAULT_CALENDAR_TIMEZONE, ensure_aware, get_zone

logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "Start", "End", "Title", "Type", "Conflicts With (count)"]
NO_EVENTS_MESSAGE = "No events found for the current filters."

_CONFLICT_TYPES = {
    EventType.AUDITION_SLOT: "audition_slot",
    EventType.REHEARSAL_EVENT: "rehearsal_event",
    EventType.PRODUCTION_EVENT: "production_event",
}


@dataclass(frozen=True)
class ConflictEvent:
    """A busy window considered for conflict detection."""

    id: str
    type: str
    title: str
    start: datetime.datetime
    end: datetime.datetime
    location: str | None = None


@dataclass
class ConflictDay:
    """Events of one day, sorted by start, each with the ids it overlaps."""

    date_key: str
    events: list[ConflictEvent] = field(default_factory=list)
    conflicts: dict[str, list[str]] = field(default_factory=dict)

    def conflicts_for(self, event: ConflictEvent) -> list[str]:
        return self.conflicts.get(event.id, [])


def ranges_overlap(
    start1: datetime.datetime,
    end1: datetime.datetime,
    start2: datetime.datetime,
    end2: datetime.datetime,
) -> bool:
    """Half-open overlap: touching ranges do not conflict."""
    return start1 < end2 and start2 < end1


def conflict_events_from(
    events: Iterable[ProductionDateEvent | PersonalEvent],
    tz_name: str = DEFAULT_CALENDAR_TIMEZONE,
) -> list[ConflictEvent]:
    """Convert calendar events to busy windows.

    All-day production dates have no time window and are left out. Naive
    times are read in ``tz_name``.
    """
    result = []
    for event in events:
        if isinstance(event, PersonalEvent):
            result.append(
                ConflictEvent(
                    id=event.id,
                    type="personal_event",
                    title=event.title,
                    start=ensure_aware(event.start, tz_name),
                    end=ensure_aware(event.end, tz_name),
                    location=event.location,
                )
            )
            continue

        if event.start_time is None or event.end_time is None:
            logger.debug("Skipping all-day event %r for conflict export", event.title)
            continue
        identifier = event.production_event_id or event.event_id or event.slot_id or event.title
        result.append(
            ConflictEvent(
                id=identifier,
                type=_CONFLICT_TYPES.get(event.type, "other"),
                title=event.title,
                start=ensure_aware(event.start_time, tz_name),
                end=ensure_aware(event.end_time, tz_name),
                location=event.location,
            )
        )
    return result


def date_key_in(tz_name: str) -> Callable[[datetime.datetime], str]:
    """Date key function grouping by calendar day in ``tz_name``."""
    zone = get_zone(tz_name)

    def _key(value: datetime.datetime) -> str:
        return ensure_aware(value, tz_name).astimezone(zone).strftime("%Y-%m-%d")

    return _key


def build_conflict_days(
    events: Iterable[ConflictEvent],
    date_key: Callable[[datetime.datetime], str],
) -> list[ConflictDay]:
    """Group events by ``date_key(start)`` and find overlapping pairs within each day.

    Days come back in ascending order.
    """
    grouped: dict[str, list[ConflictEvent]] = {}
    for event in events:
        grouped.setdefault(date_key(event.start), []).append(event)

    days = []
    for key in sorted(grouped):
        day_events = sorted(grouped[key], key=lambda e: e.start)
        conflicts: dict[str, list[str]] = {}
        for i, first in enumerate(day_events):
            for second in day_events[i + 1 :]:
                if ranges_overlap(first.start, first.end, second.start, second.end):
                    conflicts.setdefault(first.id, []).append(second.id)
                    conflicts.setdefault(second.id, []).append(first.id)
        days.append(ConflictDay(date_key=key, events=day_events, conflicts=conflicts))

    logger.debug("Built %d conflict days", len(days))
    return days


def format_date(value: datetime.datetime) -> str:
    return value.strftime("%m/%d/%Y")


def format_time(value: datetime.datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


def format_date_heading(date_key: str) -> str:
    day = datetime.date.fromisoformat(date_key)
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"


def build_conflict_csv(
    days: Iterable[ConflictDay],
    include_names: bool = True,
    tz_name: str = DEFAULT_CALENDAR_TIMEZONE,
    date_format: Callable[[datetime.datetime], str] = format_date,
    time_format: Callable[[datetime.datetime], str] = format_time,
) -> str:
    """CSV with one row per event; values with commas, quotes or newlines are quoted."""
    zone = get_zone(tz_name)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for day in days:
        for event in day.events:
            start = event.start.astimezone(zone)
            end = event.end.astimezone(zone)
            writer.writerow(
                [
                    date_format(start),
                    time_format(start),
                    time_format(end),
                    event.title if include_names else "Busy",
                    event.type,
                    str(len(day.conflicts_for(event))),
                ]
            )

    return buffer.getvalue().removesuffix("\n")


def build_conflict_plain_text(
    days: Iterable[ConflictDay],
    user_name: str,
    include_names: bool = True,
    tz_name: str = DEFAULT_CALENDAR_TIMEZONE,
    heading_format: Callable[[str], str] = format_date_heading,
    time_format: Callable[[datetime.datetime], str] = format_time,
) -> str:
    """Plain-text conflict summary suitable for pasting into an email."""
    zone = get_zone(tz_name)
    days = list(days)
    lines = [f"{user_name} — Conflicts", f"Time Zone: {tz_name}", ""]

    if not days:
        lines.append(NO_EVENTS_MESSAGE)
        return "\n".join(lines)

    for day in days:
        lines.append(heading_format(day.date_key))
        for event in sorted(day.events, key=lambda e: e.start):
            start = time_format(event.start.astimezone(zone))
            end = time_format(event.end.astimezone(zone))
            marker = " (conflict)" if day.conflicts_for(event) else ""
            if include_names:
                lines.append(f"- {start} - {end}  {event.title}{marker}")
            else:
                lines.append(f"- Busy from {start} to {end}{marker}")
        lines.append("")

    return "\n".join(lines)
