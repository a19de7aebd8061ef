"""
Data models for clock events and derived timesheet figures.

Events are immutable records; everything else is recomputed from the
event log on every query and never stored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class EventKind(str, Enum):
    """Kind of clock event."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"


@dataclass(frozen=True)
class TimeEvent:
    """A single clock-in or clock-out for one user."""

    id: str
    user_id: str
    kind: EventKind
    occurred_at: datetime  # timezone-aware
    notes: str | None = None

    @property
    def sort_key(self) -> tuple[datetime, str]:
        """Processing order: timestamp, then id for coinciding timestamps."""
        return (self.occurred_at, self.id)


@dataclass(frozen=True)
class User:
    """Roster entry."""

    id: str
    display_name: str
    avatar_ref: str = ""
    role: str = "employee"  # "admin" or "employee"


@dataclass(frozen=True)
class DailyBreakdown:
    """Hours worked by one user on one calendar day."""

    calendar_day: date
    total_hours: float
    overtime_hours: float
    events: tuple[TimeEvent, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EmployeeSummary:
    """Totals and live status for one roster member."""

    user_id: str
    display_name: str
    avatar_ref: str
    total_hours: float
    overtime_hours: float
    status: str  # "working" or "offline"
    last_action_at: datetime | None = None


@dataclass(frozen=True)
class CurrentStatus:
    """Whether a user is clocked in, and since when."""

    is_working: bool
    since: datetime | None = None
