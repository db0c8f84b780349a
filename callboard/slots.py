"""Slot capacity bookkeeping for audition and callback slots.

Everything here is advisory: it reads signup counts that were fetched earlier.
The persistence layer remains the enforcement point when two performers race
for the last place in a slot.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from enum import Enum

from .models import Slot

logger = logging.getLogger(__name__)


class SlotCapacity(str, Enum):
    """Fill state of a slot."""

    OPEN = "open"
    FULL = "full"
    OVER_CAPACITY = "over_capacity"


class SlotStatusFilter(str, Enum):
    """Slot list filter offered to performers and managers."""

    ALL = "all"
    OPEN = "open"
    FILLED = "filled"


def slot_capacity(slot: Slot) -> SlotCapacity:
    """Classify a slot as open, exactly full, or over capacity."""
    if slot.current_signups < slot.capacity:
        return SlotCapacity.OPEN
    if slot.current_signups == slot.capacity:
        return SlotCapacity.FULL
    return SlotCapacity.OVER_CAPACITY


def _as_utc(now: datetime.datetime) -> datetime.datetime:
    # Slot timestamps without an offset are read as UTC; do the same for "now"
    return now if now.tzinfo is not None else now.replace(tzinfo=datetime.UTC)


def is_slot_available(slot: Slot, now: datetime.datetime) -> bool:
    """A slot is available when it starts in the future and is not full.

    ``max_signups`` defaults to 1 when absent.
    """
    return slot.start_time > _as_utc(now) and slot.current_signups < slot.capacity


def select_next_available(slots: Iterable[Slot], now: datetime.datetime) -> Slot | None:
    """Return the earliest available slot, or None.

    Slots sharing a start time keep their input order (stable sort).
    """
    available = sorted(
        (slot for slot in slots if is_slot_available(slot, now)),
        key=lambda slot: slot.start_time,
    )
    return available[0] if available else None


def count_available(slots: Iterable[Slot], now: datetime.datetime) -> int:
    """Count slots satisfying :func:`is_slot_available`."""
    return sum(1 for slot in slots if is_slot_available(slot, now))


def filter_slots(
    slots: Iterable[Slot],
    now: datetime.datetime,
    status: SlotStatusFilter | str = SlotStatusFilter.ALL,
    include_past: bool = False,
) -> list[Slot]:
    """Filter and sort slots for a slot list view.

    Performers only see future slots; managers pass ``include_past=True``.
    The result is sorted by start time.

    Args:
        slots: Slots to filter
        now: Current time; naive values are read as UTC
        status: ``all``, ``open`` (has room) or ``filled`` (no room)
        include_past: Keep slots that already started
    """
    status = SlotStatusFilter(status)
    now = _as_utc(now)
    visible = [slot for slot in slots if include_past or slot.start_time > now]
    visible.sort(key=lambda slot: slot.start_time)

    if status is SlotStatusFilter.OPEN:
        visible = [slot for slot in visible if slot.is_open]
    elif status is SlotStatusFilter.FILLED:
        visible = [slot for slot in visible if not slot.is_open]

    logger.debug("Slot filter %s kept %d slots", status.value, len(visible))
    return visible


def group_slots_by_day(
    slots: Iterable[Slot],
    tz: datetime.tzinfo | None = None,
) -> dict[datetime.date, list[Slot]]:
    """Group slots by calendar day (in ``tz`` when given), days in ascending order."""
    grouped: dict[datetime.date, list[Slot]] = {}
    for slot in sorted(slots, key=lambda s: s.start_time):
        start = slot.start_time.astimezone(tz) if tz is not None else slot.start_time
        grouped.setdefault(start.date(), []).append(slot)
    return grouped
