"""Protocol definitions for collaborators of the calendar core.

The persistence layer lives outside this package. These Protocols describe
what the personal calendar service needs from it; each method returns raw
backend rows (dicts or already-validated models).
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from typing import Any, Protocol

from .models import UserRole

Row = Any


class TimeProvider(Protocol):
    """Protocol for time provider callables."""

    def __call__(self) -> datetime.datetime:
        """Return current UTC time.

        Returns:
            Current UTC datetime
        """
        ...


class CalendarDataSource(Protocol):
    """Read-only access to the records a personal calendar is built from."""

    def fetch_slots_for_audition(self, audition_id: str) -> Sequence[Row]:
        """Audition slots of one audition, each embedding its audition and show."""
        ...

    def fetch_rehearsal_events_for_user(self, user_id: str, role: UserRole) -> Sequence[Row]:
        """Rehearsal events reached through one relationship, with agenda items.

        Owner and production team queries return every rehearsal of their
        auditions; the cast query returns the ones the user is called to.
        """
        ...

    def fetch_user_signups(self, user_id: str) -> Sequence[Row]:
        """The user's own audition signups (``audition_slots`` embedding audition and show)."""
        ...

    def fetch_user_callbacks(self, user_id: str) -> Sequence[Row]:
        """Callback invitations the user accepted (``callback_slots`` embedding audition and show)."""
        ...

    def fetch_owned_auditions(self, user_id: str) -> Sequence[Row]:
        """Auditions the user owns, with their show."""
        ...

    def fetch_production_team_auditions(self, user_id: str) -> Sequence[Row]:
        """Production team memberships (``auditions`` + ``role_title``)."""
        ...

    def fetch_cast_shows(self, user_id: str) -> Sequence[Row]:
        """Cast memberships (``audition_slots.auditions`` + ``roles``)."""
        ...

    def fetch_assigned_production_events(self, user_id: str) -> Sequence[Row]:
        """Production events the user is assigned to as cast."""
        ...

    def fetch_owned_slots(self, user_id: str) -> Sequence[Row]:
        """Slots of every audition the user owns."""
        ...

    def fetch_production_team_slots(self, user_id: str) -> Sequence[Row]:
        """Slots of every audition the user is on the production team of."""
        ...

    def fetch_managed_production_events(self, user_id: str) -> Sequence[Row]:
        """Production events of productions the user owns or manages."""
        ...
