"""Recurring personal event expansion using dateutil rrule."""

import datetime
import logging
from collections.abc import Iterable

from dateutil import rrule

from .models import PersonalEvent, RecurrenceRule
from .timeutils import to_epoch_millis

logger = logging.getLogger(__name__)

FREQUENCIES = {
    "DAILY": rrule.DAILY,
    "WEEKLY": rrule.WEEKLY,
    "MONTHLY": rrule.MONTHLY,
    "YEARLY": rrule.YEARLY,
}

WEEKDAYS = {
    "MO": rrule.MO,
    "TU": rrule.TU,
    "WE": rrule.WE,
    "TH": rrule.TH,
    "FR": rrule.FR,
    "SA": rrule.SA,
    "SU": rrule.SU,
}


def _align(value: datetime.datetime, reference: datetime.datetime) -> datetime.datetime:
    """Match ``value``'s awareness to ``reference`` so rrule can compare them."""
    if reference.tzinfo is None:
        if value.tzinfo is not None:
            return value.astimezone(datetime.UTC).replace(tzinfo=None)
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value


def build_rule(rule: RecurrenceRule, dtstart: datetime.datetime) -> rrule.rrule | None:
    """Translate a stored recurrence rule to a dateutil rrule, or None if unsupported."""
    freq = FREQUENCIES.get(rule.frequency.upper())
    if freq is None:
        return None

    kwargs = {
        "dtstart": dtstart,
        "interval": rule.interval or 1,
    }
    # UNTIL wins over COUNT; RFC 5545 forbids both
    if rule.until is not None:
        kwargs["until"] = _align(rule.until, dtstart)
    elif rule.count:
        kwargs["count"] = rule.count

    weekdays = [WEEKDAYS[day.upper()] for day in rule.by_day if day.upper() in WEEKDAYS]
    if weekdays:
        kwargs["byweekday"] = weekdays
    if rule.by_month_day:
        kwargs["bymonthday"] = rule.by_month_day
    if rule.by_month:
        kwargs["bymonth"] = rule.by_month

    return rrule.rrule(freq, **kwargs)


def expand_recurring_event(
    event: PersonalEvent,
    window_start: datetime.datetime,
    window_end: datetime.datetime,
) -> list[PersonalEvent]:
    """Expand a recurring event into instances inside [window_start, window_end].

    Non-recurring events and rules with an unknown frequency come back
    unchanged as a one-element list. Each instance keeps the master's duration
    and gets the id "<master id>_<epoch millis of instance start>".
    """
    if not event.is_recurring or event.recurrence_rule is None:
        return [event]

    try:
        rule = build_rule(event.recurrence_rule, event.start)
        if rule is None:
            logger.warning(
                "Unknown recurrence frequency %r for event %s", event.recurrence_rule.frequency, event.id
            )
            return [event]
        occurrences = rule.between(_align(window_start, event.start), _align(window_end, event.start), inc=True)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to expand recurring event %s: %s", event.id, e)
        return [event]

    duration = event.end - event.start
    instances = [
        event.model_copy(
            update={
                "id": f"{event.id}_{to_epoch_millis(occurrence)}",
                "start": occurrence,
                "end": occurrence + duration,
                "original_event_id": event.id,
                "is_instance": True,
            }
        )
        for occurrence in occurrences
    ]
    logger.debug("Expanded recurring event %s into %d instances", event.id, len(instances))
    return instances


def expand_recurring_events(
    events: Iterable[PersonalEvent],
    window_start: datetime.datetime,
    window_end: datetime.datetime,
) -> list[PersonalEvent]:
    """Expand every event and return all instances sorted by start."""
    expanded: list[PersonalEvent] = []
    for event in events:
        expanded.extend(expand_recurring_event(event, window_start, window_end))
    expanded.sort(key=lambda e: to_epoch_millis(e.start))
    return expanded
