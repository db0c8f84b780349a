"""Event deduplication for the personal calendar.

The same rehearsal or slot can surface through more than one relationship (a
user who owns a show and also sits on its production team). Events are
collapsed on a stable identity key, keeping the first occurrence.
"""

import logging
from collections.abc import Iterable

from .models import ProductionDateEvent
from .timeutils import to_epoch_millis

logger = logging.getLogger(__name__)


class EventDeduplicator:
    """Removes duplicate calendar events while preserving input order."""

    def event_key(self, event: ProductionDateEvent) -> str:
        """Identity key for an event.

        The first non-empty of ``production_event_id``, ``event_id`` and
        ``slot_id``; otherwise "{type}-{epoch millis of date}-{title}".
        Events without ids that share type, date and title collapse together.
        """
        for identifier in (event.production_event_id, event.event_id, event.slot_id):
            if identifier:
                return identifier
        return f"{event.type.value}-{to_epoch_millis(event.date)}-{event.title}"

    def deduplicate(self, events: Iterable[ProductionDateEvent]) -> list[ProductionDateEvent]:
        """Return events with duplicates removed, first occurrence wins.

        Args:
            events: Events in priority order (earlier sources win)

        Returns:
            New list in original relative order
        """
        seen: set[str] = set()
        unique = []
        duplicates = 0

        for event in events:
            key = self.event_key(event)
            if key in seen:
                duplicates += 1
                logger.debug("Dropping duplicate %s event %r (key %s)", event.type.value, event.title, key)
                continue
            seen.add(key)
            unique.append(event)

        if duplicates:
            logger.debug("Deduplication removed %d of %d events", duplicates, len(unique) + duplicates)
        return unique

    def merge_event_lists(self, *event_lists: Iterable[ProductionDateEvent]) -> list[ProductionDateEvent]:
        """Concatenate lists in the given priority order, then deduplicate."""
        return self.deduplicate(event for events in event_lists for event in events)


_default_deduplicator = EventDeduplicator()


def event_key(event: ProductionDateEvent) -> str:
    return _default_deduplicator.event_key(event)


def deduplicate(events: Iterable[ProductionDateEvent]) -> list[ProductionDateEvent]:
    return _default_deduplicator.deduplicate(events)


def merge_event_lists(*event_lists: Iterable[ProductionDateEvent]) -> list[ProductionDateEvent]:
    return _default_deduplicator.merge_event_lists(*event_lists)
