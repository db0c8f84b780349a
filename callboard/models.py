"""Data models for casting schedule processing.

Backend rows arrive as loose dictionaries with nested relations (``auditions``,
``shows``, ``audition_slots``...). Each model accepts both the backend column
names and the short field names, so records are validated once at the boundary
and every transformation downstream works with typed objects.
"""

import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from .timeutils import parse_clock_time


class EventType(str, Enum):
    """Discriminator for unified calendar events."""

    REHEARSAL = "rehearsal"
    PERFORMANCE = "performance"
    AUDITION_SLOT = "audition_slot"
    REHEARSAL_EVENT = "rehearsal_event"
    AGENDA_ITEM = "agenda_item"
    PRODUCTION_EVENT = "production_event"
    CAST = "cast"


class UserRole(str, Enum):
    """Relationship through which a user reached an event."""

    OWNER = "owner"
    PRODUCTION_TEAM = "production_team"
    CAST = "cast"


class WorkflowStatus(str, Enum):
    """Linear production-stage label for an audition."""

    AUDITIONING = "auditioning"
    CASTING = "casting"
    OFFERING_ROLES = "offering_roles"
    REHEARSING = "rehearsing"
    PERFORMING = "performing"
    COMPLETED = "completed"


def _normalize_clock(value: Any) -> Any:
    """Normalize "HH:MM[:SS]" strings to "HH:MM"; leave None alone."""
    if value is None:
        return None
    parsed = parse_clock_time(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


class _Record(BaseModel):
    """Base for backend records: ignore unknown columns, accept field names too."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ShowInfo(_Record):
    """Show attached to an audition."""

    title: str = Field(..., description="Show title")
    author: Optional[str] = Field(default=None, description="Playwright / author")


class ShowDetails(ShowInfo):
    """Show header information for exported calendars."""

    role_name: Optional[str] = None
    is_understudy: bool = False
    workflow_status: Optional[WorkflowStatus] = None


class AuditionRecord(_Record):
    """Audition (casting call) with its show and production date ranges."""

    audition_id: Optional[str] = None
    show: Optional[ShowInfo] = Field(default=None, validation_alias=AliasChoices("show", "shows"))

    # Raw date tokens; malformed tokens are skipped by the generator, not here
    audition_dates: list[str] = Field(default_factory=list)
    rehearsal_dates: list[str] = Field(default_factory=list)
    performance_dates: list[str] = Field(default_factory=list)

    audition_location: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("audition_location", "location")
    )
    rehearsal_location: Optional[str] = None
    performance_location: Optional[str] = None
    workflow_status: Optional[WorkflowStatus] = None

    @field_validator("audition_dates", "rehearsal_dates", "performance_dates", mode="before")
    @classmethod
    def split_date_tokens(cls, value: Any) -> list[str]:
        """Accept comma-joined strings or lists of date strings."""
        if value is None:
            return []
        if isinstance(value, str):
            tokens = value.split(",")
        elif isinstance(value, (list, tuple)):
            tokens = [str(v) for v in value if v is not None]
        else:
            tokens = [str(value)]
        return [token.strip() for token in tokens if token and token.strip()]


class Slot(_Record):
    """Bookable audition or callback time window with a signup capacity."""

    id: str = Field(..., validation_alias=AliasChoices("id", "slot_id", "callback_slot_id"))
    start_time: datetime.datetime
    end_time: datetime.datetime
    location: Optional[str] = None
    max_signups: Optional[int] = Field(default=None, description="Capacity; None means 1")
    current_signups: int = 0
    audition: Optional[AuditionRecord] = Field(
        default=None, validation_alias=AliasChoices("audition", "auditions")
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def assume_utc_when_naive(cls, value: datetime.datetime) -> datetime.datetime:
        """Slots are stored as timestamps; a missing offset means UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.UTC)
        return value

    @field_validator("current_signups", mode="before")
    @classmethod
    def default_signups(cls, value: Any) -> Any:
        return 0 if value is None else value

    @model_validator(mode="after")
    def check_range(self) -> "Slot":
        if self.end_time <= self.start_time:
            raise ValueError("slot end_time must be after start_time")
        return self

    @property
    def capacity(self) -> int:
        """Maximum signups, defaulting to a single-signup slot."""
        return self.max_signups if self.max_signups is not None else 1

    @property
    def is_open(self) -> bool:
        return self.current_signups < self.capacity

    def is_future(self, now: datetime.datetime) -> bool:
        if now.tzinfo is None:
            now = now.replace(tzinfo=datetime.UTC)
        return self.start_time > now


class AgendaItem(_Record):
    """Discrete activity scheduled inside a rehearsal event."""

    id: str = Field(
        ...,
        validation_alias=AliasChoices("id", "agenda_item_id", "rehearsal_agenda_items_id"),
    )
    parent_event_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parent_event_id", "rehearsal_event_id", "rehearsal_events_id"),
    )
    title: str
    description: Optional[str] = None
    start_time: str = Field(..., description="HH:MM, same day as the parent rehearsal")
    end_time: str = Field(..., description="HH:MM, same day as the parent rehearsal")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_clock(cls, value: Any) -> Any:
        return _normalize_clock(value)


class RehearsalEvent(_Record):
    """Scheduled rehearsal block, optionally carrying its agenda."""

    id: str = Field(
        ..., validation_alias=AliasChoices("id", "rehearsal_events_id", "rehearsal_event_id")
    )
    date: datetime.date
    start_time: str
    end_time: str
    location: Optional[str] = None
    notes: Optional[str] = None
    audition: Optional[AuditionRecord] = Field(
        default=None, validation_alias=AliasChoices("audition", "auditions")
    )
    agenda_items: list[AgendaItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("agenda_items", "rehearsal_agenda_items"),
    )

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_clock(cls, value: Any) -> Any:
        return _normalize_clock(value)

    @field_validator("agenda_items", mode="before")
    @classmethod
    def default_agenda(cls, value: Any) -> Any:
        return [] if value is None else value


class ProductionEventType(_Record):
    """User-defined production event category (e.g. "Tech", "Photo call")."""

    name: str
    color: Optional[str] = None


class ProductionEvent(_Record):
    """Generic calendar-worthy occurrence tied to a production."""

    id: str = Field(..., validation_alias=AliasChoices("id", "production_event_id"))
    audition_id: Optional[str] = None
    date: datetime.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    event_type: Optional[ProductionEventType] = Field(
        default=None, validation_alias=AliasChoices("event_type", "production_event_types")
    )
    audition: Optional[AuditionRecord] = Field(
        default=None, validation_alias=AliasChoices("audition", "auditions")
    )

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_clock(cls, value: Any) -> Any:
        return _normalize_clock(value)


class _SlotAuditionRef(_Record):
    audition: Optional[AuditionRecord] = Field(
        default=None, validation_alias=AliasChoices("audition", "auditions")
    )


class _RoleRef(_Record):
    role_name: Optional[str] = None


class CastMembership(_Record):
    """Cast membership row: the actor was cast via an audition slot."""

    slot: Optional[_SlotAuditionRef] = Field(
        default=None, validation_alias=AliasChoices("slot", "audition_slots")
    )
    role: Optional[_RoleRef] = Field(default=None, validation_alias=AliasChoices("role", "roles"))
    is_understudy: bool = False

    @property
    def audition(self) -> Optional[AuditionRecord]:
        return self.slot.audition if self.slot else None

    @property
    def role_name(self) -> Optional[str]:
        return self.role.role_name if self.role else None


class ProductionTeamMembership(_Record):
    """Production team membership row."""

    audition: Optional[AuditionRecord] = Field(
        default=None, validation_alias=AliasChoices("audition", "auditions")
    )
    role_title: Optional[str] = None


class RecurrenceRule(_Record):
    """Subset of RFC 5545 RRULE used by personal events."""

    frequency: str = Field(..., validation_alias=AliasChoices("frequency", "freq"))
    interval: int = 1
    until: Optional[datetime.datetime] = None
    count: Optional[int] = None
    by_day: list[str] = Field(default_factory=list, validation_alias=AliasChoices("by_day", "byDay"))
    by_month_day: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("by_month_day", "byMonthDay")
    )
    by_month: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("by_month", "byMonth")
    )


class PersonalEvent(_Record):
    """User-entered calendar event, possibly recurring."""

    id: str
    title: str
    start: datetime.datetime
    end: datetime.datetime
    location: Optional[str] = None
    description: Optional[str] = None
    is_recurring: bool = Field(default=False, validation_alias=AliasChoices("is_recurring", "isRecurring"))
    recurrence_rule: Optional[RecurrenceRule] = Field(
        default=None, validation_alias=AliasChoices("recurrence_rule", "recurrenceRule")
    )

    # Set on expanded instances only
    original_event_id: Optional[str] = None
    is_instance: bool = False


class ProductionDateEvent(BaseModel):
    """Unified calendar event produced by the event generator.

    Identity for deduplication is the first non-null of ``production_event_id``,
    ``event_id`` and ``slot_id``; otherwise a composite of type, date and title.
    Instances are frozen: transformations build new events instead of editing.
    """

    type: EventType
    title: str
    date: datetime.datetime
    start_time: Optional[datetime.datetime] = None
    end_time: Optional[datetime.datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None

    event_id: Optional[str] = Field(default=None, description="Rehearsal event id")
    slot_id: Optional[str] = Field(default=None, description="Audition slot id")
    production_event_id: Optional[str] = None
    agenda_item_id: Optional[str] = None
    audition_id: Optional[str] = None

    show: Optional[ShowInfo] = None
    role: Optional[str] = Field(default=None, description="Role or team title of the user")
    user_role: UserRole
    agenda_items: list[AgendaItem] = Field(
        default_factory=list, description="Agenda shown inside the rehearsal detail view"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_all_day(self) -> bool:
        return self.start_time is None

    @field_serializer("date", "start_time", "end_time", when_used="unless-none")
    def serialize_datetime(self, dt: datetime.datetime) -> str:
        return dt.isoformat()


class LocationCoordinates(BaseModel):
    lat: float
    lng: float


class LocationData(BaseModel):
    """Parsed location; fields the parser could not determine stay None."""

    formatted_address: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[LocationCoordinates] = None


class CalendarEvent(BaseModel):
    """Export-ready event consumed by the ICS and PDF writers."""

    title: str
    start: datetime.datetime
    end: Optional[datetime.datetime] = Field(
        default=None, description="Exclusive end; all-day events default to start + 1 day"
    )
    all_day: bool = False
    description: Optional[str] = None
    location: Optional[str] = None
    type_label: Optional[str] = Field(default=None, description="Label used by PDF colour coding")


class CastingCredit(BaseModel):
    """One line of an actor resume."""

    show_name: Optional[str] = None
    role: Optional[str] = None
    company_name: Optional[str] = None
    date_of_production: Optional[str] = None
    is_understudy: bool = False
    verified: bool = False


class ResumeProfile(BaseModel):
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    skills: list[str] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p) or "Actor Resume"


class ResumeData(BaseModel):
    profile: ResumeProfile
    casting_history: list[CastingCredit] = Field(default_factory=list)
    manual_credits: list[CastingCredit] = Field(default_factory=list)


class WatermarkSettings(BaseModel):
    """Optional resume watermark: tiled text or a centred logo."""

    text: Optional[str] = None
    logo_url: Optional[str] = None
    logo_bytes: Optional[bytes] = None
    opacity: float = Field(default=0.1, ge=0.0, le=1.0)
