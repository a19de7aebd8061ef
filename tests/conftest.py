"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Deterministic configuration, set before any src module reads it
os.environ["CHRONOBOT_TIMEZONE"] = "UTC"
os.environ["CHRONOBOT_API_KEY"] = "test-key"
os.environ["GEMINI_API_KEY"] = ""
os.environ["SEED_DEMO_DATA"] = "false"

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.events import EventKind, TimeEvent, User  # noqa: E402

UTC = timezone.utc


def at(day: int, hour: int, minute: int = 0, month: int = 11) -> datetime:
    """UTC instant in November 2025."""
    return datetime(2025, month, day, hour, minute, tzinfo=UTC)


class EventFactory:
    """Builds TimeEvents with sequential ids."""

    def __init__(self):
        self.counter = 0

    def _make(self, kind, user_id, when, event_id=None, notes=None):
        self.counter += 1
        return TimeEvent(
            id=event_id or f"e{self.counter:03d}",
            user_id=user_id,
            kind=kind,
            occurred_at=when,
            notes=notes,
        )

    def clock_in(self, user_id, when, event_id=None, notes=None):
        return self._make(EventKind.CLOCK_IN, user_id, when, event_id, notes)

    def clock_out(self, user_id, when, event_id=None, notes=None):
        return self._make(EventKind.CLOCK_OUT, user_id, when, event_id, notes)


@pytest.fixture
def make_event():
    return EventFactory()


@pytest.fixture
def roster():
    """Sample roster for testing."""
    return [
        User(id="u1", display_name="AlexEngineer", avatar_ref="a1.png"),
        User(id="u2", display_name="SarahDesign", avatar_ref="a2.png"),
        User(id="u3", display_name="MikeManager", avatar_ref="a3.png", role="admin"),
    ]


@pytest.fixture
def now():
    """Evaluation instant: Monday 3 Nov 2025, 18:00 UTC."""
    return at(3, 18)


@pytest.fixture
def two_day_events(make_event):
    """u1 works 8.5h on Nov 1 and 9h on Nov 2."""
    return [
        make_event.clock_in("u1", at(1, 9)),
        make_event.clock_out("u1", at(1, 17, 30)),
        make_event.clock_in("u1", at(2, 8)),
        make_event.clock_out("u1", at(2, 17)),
    ]


@pytest.fixture
def sample_event_dict():
    """Sample raw event dictionary, as sent by the chat client."""
    return {
        "id": "evt-1",
        "userId": "u1",
        "type": "CLOCK_IN",
        "timestamp": "2025-11-01T09:00:00Z",
        "notes": "Morning standup",
    }

