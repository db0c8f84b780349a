"""Time-range validation for agenda items nested inside rehearsal windows.

Times are wall-clock values on the same day as the bounding rehearsal and are
compared as integer minutes since midnight.
"""

from __future__ import annotations

import datetime
import logging

from .exceptions import InvertedRangeError, OutOfBoundsError
from .models import AgendaItem, RehearsalEvent
from .timeutils import clock_to_minutes, minutes_to_clock

logger = logging.getLogger(__name__)

ClockValue = str | datetime.time


def validate_within_bounds(
    bound_start: ClockValue,
    bound_end: ClockValue,
    candidate_start: ClockValue,
    candidate_end: ClockValue,
) -> None:
    """Confirm a candidate window lies inside the bounding window.

    Start and end are each checked against both bounds independently, then the
    candidate itself must be non-empty.

    Args:
        bound_start: Bounding window start (e.g. rehearsal start)
        bound_end: Bounding window end (e.g. rehearsal end)
        candidate_start: Candidate start (e.g. agenda item start)
        candidate_end: Candidate end (e.g. agenda item end)

    Raises:
        OutOfBoundsError: if either candidate endpoint falls outside the bounds
        InvertedRangeError: if the candidate end is not after its start
        TimeFormatError: if any value is not a valid HH:MM time
    """
    lo = clock_to_minutes(bound_start)
    hi = clock_to_minutes(bound_end)
    start = clock_to_minutes(candidate_start)
    end = clock_to_minutes(candidate_end)

    if start < lo or start > hi:
        raise OutOfBoundsError("start", minutes_to_clock(start), minutes_to_clock(lo), minutes_to_clock(hi))
    if end < lo or end > hi:
        raise OutOfBoundsError("end", minutes_to_clock(end), minutes_to_clock(lo), minutes_to_clock(hi))
    if end <= start:
        raise InvertedRangeError(minutes_to_clock(start), minutes_to_clock(end))


def validate_agenda_item(rehearsal: RehearsalEvent, item: AgendaItem) -> None:
    """Validate that an agenda item fits inside its rehearsal event."""
    logger.debug(
        "Validating agenda item %s (%s-%s) against rehearsal %s (%s-%s)",
        item.id,
        item.start_time,
        item.end_time,
        rehearsal.id,
        rehearsal.start_time,
        rehearsal.end_time,
    )
    validate_within_bounds(rehearsal.start_time, rehearsal.end_time, item.start_time, item.end_time)


def quick_select_times(
    bound_start: ClockValue,
    bound_end: ClockValue,
    step_minutes: int = 30,
) -> list[str]:
    """Suggested picker times for an agenda item inside a rehearsal.

    Returns the bound start, every ``step_minutes`` boundary after it and the
    bound end, formatted as "HH:MM". An inverted bound yields just the start.
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    lo = clock_to_minutes(bound_start)
    hi = clock_to_minutes(bound_end)

    times = [minutes_to_clock(lo)]
    if hi <= lo:
        return times

    current = lo + step_minutes
    while current < hi:
        times.append(minutes_to_clock(current))
        current += step_minutes

    if times[-1] != minutes_to_clock(hi):
        times.append(minutes_to_clock(hi))
    return times
