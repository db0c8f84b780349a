"""Custom exception hierarchy for callboard.

Validation failures are raised synchronously so callers can surface them as
inline form errors. Parse misses (locations, date tokens) are deliberately NOT
exceptions: those helpers return None or skip the token instead.
"""

from __future__ import annotations


class CallboardError(Exception):
    """Base exception for all callboard errors.

    Every custom exception in the package inherits from this class so callers
    can catch the whole family with a single handler.
    """


class TimeRangeError(CallboardError, ValueError):
    """A candidate time window is not acceptable.

    Raised by the time-range validator. Subclasses identify the reason.
    """


class OutOfBoundsError(TimeRangeError):
    """Candidate start or end falls outside the bounding window.

    Raised when:
    - An agenda item starts before its rehearsal starts or after it ends
    - An agenda item ends before its rehearsal starts or after it ends
    """

    def __init__(self, endpoint: str, value: str, bound_start: str, bound_end: str):
        self.endpoint = endpoint
        self.value = value
        self.bound_start = bound_start
        self.bound_end = bound_end
        super().__init__(
            f"{endpoint.capitalize()} time {value} must be between {bound_start} and {bound_end}"
        )


class InvertedRangeError(TimeRangeError):
    """Candidate end is not strictly after candidate start."""

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"End time {end} must be after start time {start}")


class TimeFormatError(TimeRangeError):
    """A wall-clock time string could not be parsed as HH:MM."""


class ExportError(CallboardError):
    """Calendar export failed.

    Raised when an ICS or PDF document cannot be produced. Optional assets
    (PDF logos) never raise this; they are dropped with a warning instead.
    """


class EmptyExportError(ExportError):
    """There are no events to export, so the export is aborted."""


class ConfigError(CallboardError):
    """Configuration file could not be loaded or has the wrong shape."""
