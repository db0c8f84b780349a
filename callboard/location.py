"""Best-effort city/state extraction from free-text US addresses.

Handles "Street, City, ST 00000" and "City, ST" shapes. Anything else yields
None, which callers treat as "could not determine" and drop from facet lists.
"""

import logging
import re
from collections.abc import Iterable
from typing import Optional

from .models import LocationData

logger = logging.getLogger(__name__)

_STATE_WITH_ZIP_RE = re.compile(r",\s*([A-Z]{2})\s+\d{5}")
_STATE_ONLY_RE = re.compile(r",\s*([A-Z]{2})\s*(?:,|$)")
_STATE_SEGMENT_RE = re.compile(r"^[A-Z]{2}(\s+\d{5})?")
_STREET_NUMBER_RE = re.compile(r"^\d+\s+")
_HAS_LETTER_RE = re.compile(r"[A-Za-z]")


def extract_state(location: Optional[str]) -> Optional[str]:
    """Two-letter state code, preferring a code followed by a ZIP."""
    if not location or not location.strip():
        return None

    match = _STATE_WITH_ZIP_RE.search(location) or _STATE_ONLY_RE.search(location)
    return match.group(1) if match else None


def extract_city(location: Optional[str]) -> Optional[str]:
    """City name: the comma segment right before the state segment."""
    if not location or not location.strip():
        return None

    segments = [segment.strip() for segment in location.split(",")]
    for index in range(1, len(segments)):
        if not _STATE_SEGMENT_RE.match(segments[index]):
            continue
        city = _STREET_NUMBER_RE.sub("", segments[index - 1]).strip()
        if not _HAS_LETTER_RE.search(city):
            return None
        return city
    return None


def parse_location(location: Optional[str]) -> Optional[LocationData]:
    """Parse a free-text location; None for empty input.

    Undetermined city/state stay None on the result.
    """
    if not location or not location.strip():
        return None

    state = extract_state(location)
    city = extract_city(location)
    if state is None and city is None:
        logger.debug("Could not determine city or state from %r", location)

    return LocationData(
        formatted_address=location.strip(),
        city=city,
        state=state,
        country="US" if state else None,
    )


def location_facets(locations: Iterable[Optional[str]]) -> tuple[list[str], list[str]]:
    """Sorted distinct states and cities found in ``locations``."""
    states: set[str] = set()
    cities: set[str] = set()
    for location in locations:
        state = extract_state(location)
        if state:
            states.add(state)
        city = extract_city(location)
        if city:
            cities.add(city)
    return sorted(states), sorted(cities)
