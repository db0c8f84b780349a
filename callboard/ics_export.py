"""RFC 5545 calendar export built on the icalendar library."""

from __future__ import annotations

import datetime
import logging
import re
import uuid
from collections.abc import Iterable

from icalendar import Calendar, Event as ICalEvent

from .exceptions import EmptyExportError
from .models import CalendarEvent
from .timeutils import DEFAULT_CALENDAR_TIMEZONE, now_utc

logger = logging.getLogger(__name__)

ICS_MIME_TYPE = "text/calendar;charset=utf-8"
DEFAULT_PRODID = "-//Callboard//Casting Calendar//EN"
DEFAULT_UID_DOMAIN = "callboard.local"
DEFAULT_CALENDAR_NAME = "Production Calendar"

# Timed events with no end get this length
DEFAULT_TIMED_DURATION = datetime.timedelta(hours=1)

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9]+")


def generate_uid(domain: str = DEFAULT_UID_DOMAIN) -> str:
    """Random per-export UID; not stable across exports of the same event."""
    return f"{uuid.uuid4()}@{domain}"


def _ical_datetime(value: datetime.datetime) -> datetime.datetime:
    """Aware values are written in UTC ("Z" form); naive values stay floating."""
    if value.tzinfo is not None:
        return value.astimezone(datetime.UTC)
    return value


def event_bounds(event: CalendarEvent) -> tuple[datetime.date | datetime.datetime, datetime.date | datetime.datetime]:
    """DTSTART/DTEND values for an event.

    All-day ends are exclusive: a missing end, or one not after the start,
    becomes the following day.
    """
    if event.all_day:
        start_day = event.start.date()
        end_day = event.end.date() if event.end is not None else None
        if end_day is None or end_day <= start_day:
            end_day = start_day + datetime.timedelta(days=1)
        return start_day, end_day

    end = event.end if event.end is not None else event.start + DEFAULT_TIMED_DURATION
    return _ical_datetime(event.start), _ical_datetime(end)


def build_vevent(
    event: CalendarEvent,
    stamp: datetime.datetime,
    uid_domain: str = DEFAULT_UID_DOMAIN,
) -> ICalEvent:
    """Build one VEVENT component."""
    vevent = ICalEvent()
    start, end = event_bounds(event)

    vevent.add("uid", generate_uid(uid_domain))
    vevent.add("dtstamp", stamp)
    vevent.add("dtstart", start)
    vevent.add("dtend", end)
    vevent.add("summary", event.title)
    if event.description:
        vevent.add("description", event.description)
    if event.location:
        vevent.add("location", event.location)
    vevent.add("status", "CONFIRMED")
    vevent.add("sequence", 0)
    return vevent


def build_calendar(
    events: Iterable[CalendarEvent],
    calendar_name: str = DEFAULT_CALENDAR_NAME,
    timezone_name: str = DEFAULT_CALENDAR_TIMEZONE,
    prodid: str = DEFAULT_PRODID,
    uid_domain: str = DEFAULT_UID_DOMAIN,
    method: str = "PUBLISH",
) -> Calendar:
    """Build a VCALENDAR holding one VEVENT per event.

    Raises:
        EmptyExportError: if there are no events
    """
    events = list(events)
    if not events:
        raise EmptyExportError("No events to export")

    calendar = Calendar()
    calendar.add("prodid", prodid)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("method", method)
    calendar.add("x-wr-calname", calendar_name)
    calendar.add("x-wr-timezone", timezone_name)

    stamp = now_utc()
    for event in events:
        calendar.add_component(build_vevent(event, stamp, uid_domain))

    logger.debug("Built calendar %r with %d events", calendar_name, len(events))
    return calendar


def to_ics(
    events: Iterable[CalendarEvent],
    calendar_name: str = DEFAULT_CALENDAR_NAME,
    timezone_name: str = DEFAULT_CALENDAR_TIMEZONE,
    prodid: str = DEFAULT_PRODID,
    uid_domain: str = DEFAULT_UID_DOMAIN,
) -> str:
    """Serialize events to ICS text (CRLF line endings, folded lines)."""
    calendar = build_calendar(events, calendar_name, timezone_name, prodid, uid_domain)
    return calendar.to_ical().decode("utf-8")


def single_event_ics(
    event: CalendarEvent,
    prodid: str = DEFAULT_PRODID,
    uid_domain: str = DEFAULT_UID_DOMAIN,
) -> str:
    """ICS invitation for one event (``METHOD:REQUEST``), e.g. for an email attachment."""
    calendar = Calendar()
    calendar.add("prodid", prodid)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("method", "REQUEST")
    calendar.add_component(build_vevent(event, now_utc(), uid_domain))
    return calendar.to_ical().decode("utf-8")


def ics_filename(title: str) -> str:
    """Download filename: non-alphanumeric runs collapsed to underscores."""
    sanitized = _UNSAFE_FILENAME_RE.sub("_", title).strip("_")
    return f"{sanitized or 'calendar'}_calendar.ics"
