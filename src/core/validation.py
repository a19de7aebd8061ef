"""
Event parsing and structural validation.

Only structurally invalid input is rejected here. Irregular but well-formed
sequences (orphan clock-outs, repeated clock-ins) are left to the aggregator.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from models.events import EventKind, TimeEvent, User


class ValidationError(ValueError):
    """Structurally invalid input. Carries one message per problem found."""

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or []


def parse_timestamp(value) -> datetime:
    """
    Parse an ISO-8601 string or datetime into an aware datetime.

    Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(
                f"Invalid timestamp '{value}'", ["Expected ISO-8601, e.g. 2025-11-03T09:00:00Z"]
            )
    else:
        raise ValidationError(f"Invalid timestamp {value!r}", ["Timestamp is missing"])

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_kind(value) -> EventKind:
    """Parse an event kind, rejecting anything but CLOCK_IN / CLOCK_OUT."""
    if isinstance(value, EventKind):
        return value
    try:
        return EventKind(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unknown event kind '{value}'",
            [f"Expected one of: {', '.join(k.value for k in EventKind)}"],
        )


def parse_event(raw: Mapping) -> TimeEvent:
    """
    Build a TimeEvent from a dict.

    Accepts both snake_case and the camelCase keys used by the chat client
    (userId, type/kind, timestamp/occurredAt).
    """
    errors = []
    event_id = raw.get("id")
    user_id = raw.get("user_id", raw.get("userId"))
    kind = raw.get("kind", raw.get("type"))
    occurred_at = raw.get("occurred_at", raw.get("occurredAt", raw.get("timestamp")))

    if not event_id:
        errors.append("Missing event id")
    if not user_id:
        errors.append("Missing user id")
    if errors:
        raise ValidationError("Invalid event", errors)

    return TimeEvent(
        id=str(event_id),
        user_id=str(user_id),
        kind=parse_kind(kind),
        occurred_at=parse_timestamp(occurred_at),
        notes=raw.get("notes") or None,
    )


def coerce_event(event) -> TimeEvent:
    """Pass TimeEvents through (normalizing naive timestamps), parse dicts."""
    if isinstance(event, TimeEvent):
        if not isinstance(event.kind, EventKind):
            raise ValidationError(f"Unknown event kind '{event.kind}'")
        if not isinstance(event.occurred_at, datetime):
            raise ValidationError(f"Invalid timestamp {event.occurred_at!r}")
        if event.occurred_at.tzinfo is None:
            return TimeEvent(
                id=event.id,
                user_id=event.user_id,
                kind=event.kind,
                occurred_at=event.occurred_at.replace(tzinfo=timezone.utc),
                notes=event.notes,
            )
        return event
    if isinstance(event, Mapping):
        return parse_event(event)
    raise ValidationError(f"Cannot interpret {type(event).__name__} as a time event")


def coerce_events(events: Iterable) -> list[TimeEvent]:
    """Coerce a whole event log. Fails on the first invalid event."""
    return [coerce_event(event) for event in events]


def require_user(user_id: str, events: list[TimeEvent], roster: Iterable[User] | None) -> None:
    """
    Reject a query for a user known to neither the roster nor the event log.

    Without a roster there is nothing to check against, so only an empty
    user id is rejected.
    """
    if not user_id:
        raise ValidationError("Missing user id")
    if roster is None:
        return
    if any(user.id == user_id for user in roster):
        return
    if any(event.user_id == user_id for event in events):
        return
    raise ValidationError(f"Unknown user '{user_id}'", [f"No roster entry or events for '{user_id}'"])
