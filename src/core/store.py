"""
In-memory append-only event store shared by the API and chat handler.

Readers take a snapshot before aggregating so a single query always sees a
consistent set of events.
"""

import threading
from collections.abc import Callable, Iterable
from typing import Any

from core.validation import coerce_event
from models.events import TimeEvent, User


class EventStore:
    """Append-only clock event log plus the user roster."""

    def __init__(self, roster: Iterable[User] = (), events: Iterable[TimeEvent] = ()):
        self._lock = threading.Lock()
        self._roster: dict[str, User] = {user.id: user for user in roster}
        self._events: list[TimeEvent] = [coerce_event(e) for e in events]

    def append(self, event) -> TimeEvent:
        """Validate and append one event. Returns the stored event."""
        parsed = coerce_event(event)
        with self._lock:
            self._events.append(parsed)
        return parsed

    def append_if(self, decide: Callable[[tuple[TimeEvent, ...]], tuple[Any, Any]]) -> Any:
        """
        Run a check-then-append step atomically.

        ``decide`` receives a snapshot and returns ``(result, event)``. The
        event, if not None, is appended before any other writer can run.
        ``decide`` must not call back into the store.
        """
        with self._lock:
            result, event = decide(tuple(self._events))
            if event is not None:
                self._events.append(coerce_event(event))
        return result

    def snapshot(self) -> tuple[TimeEvent, ...]:
        """Immutable copy of the event log."""
        with self._lock:
            return tuple(self._events)

    def roster(self) -> list[User]:
        """Roster in insertion order."""
        with self._lock:
            return list(self._roster.values())

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            return self._roster.get(user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
