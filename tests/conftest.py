import copy
import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import pytest

from callboard.config import ENV_KEYS


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure callboard environment variables do not leak between tests.

    Some tests set CALLBOARD_TEST_TIME to freeze time, others set config
    overrides. Clear all of them before each test.
    """
    for key in ("CALLBOARD_TEST_TIME", "CALLBOARD_DEBUG", *ENV_KEYS):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def restore_logger_levels() -> Generator[None, Any, None]:
    """configure_logging() mutates global logger levels; put them back."""
    names = ["", "callboard", "httpx", "httpcore", "reportlab"]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time: 2024-05-15 12:00 UTC."""
    return datetime(2024, 5, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def hamlet_audition() -> dict[str, Any]:
    """Owned audition row as returned by the backend."""
    return {
        "audition_id": "a1",
        "shows": {"title": "Hamlet", "author": "William Shakespeare"},
        "audition_dates": ["2024-05-20"],
        "location": "Lobby",
        "rehearsal_dates": "2024-06-01,not-a-date,2024-06-03",
        "rehearsal_location": "Studio B",
        "performance_dates": ["2024-07-01"],
        "performance_location": "Main Stage",
        "workflow_status": "rehearsing",
        "created_at": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def hamlet_slot() -> dict[str, Any]:
    """Audition slot row embedding its audition."""
    return {
        "slot_id": "s1",
        "start_time": "2024-05-20T18:00:00Z",
        "end_time": "2024-05-20T18:15:00Z",
        "max_signups": 1,
        "current_signups": 0,
        "auditions": {"audition_id": "a1", "shows": {"title": "Hamlet"}},
    }


@pytest.fixture
def hamlet_rehearsal() -> dict[str, Any]:
    """Rehearsal event row with agenda items out of order."""
    return {
        "rehearsal_events_id": "r1",
        "date": "2024-06-05",
        "start_time": "18:00:00",
        "end_time": "21:00:00",
        "location": "Studio A",
        "notes": "Bring scripts",
        "auditions": {"audition_id": "a1", "shows": {"title": "Hamlet"}},
        "rehearsal_agenda_items": [
            {"rehearsal_agenda_items_id": "i2", "title": "Act 2", "start_time": "19:30", "end_time": "21:00"},
            {"rehearsal_agenda_items_id": "i1", "title": "Act 1", "start_time": "18:00", "end_time": "19:30"},
        ],
    }


@pytest.fixture
def cast_membership(hamlet_audition: dict[str, Any]) -> dict[str, Any]:
    return {
        "audition_slots": {"auditions": copy.deepcopy(hamlet_audition)},
        "roles": {"role_name": "Ophelia"},
        "is_understudy": False,
    }


@pytest.fixture
def team_membership(hamlet_audition: dict[str, Any]) -> dict[str, Any]:
    return {"auditions": copy.deepcopy(hamlet_audition), "role_title": "Stage Manager"}
