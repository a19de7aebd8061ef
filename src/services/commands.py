"""
Chat command handling.

Decides whether a clock request is valid for the user's current status and
builds the reply. Rejected requests never produce an event.
"""

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from core.config import REFERENCE_TIMEZONE
from core.store import EventStore
from core.validation import ValidationError, parse_timestamp
from models.events import EventKind, TimeEvent, User
from services.intent import BotIntent, IntentResult, classify_intent
from services.timesheets import STATUS_WORKING, compute_employee_summaries, current_status

PREFIX_COMMANDS = {
    "!in": BotIntent.CLOCK_IN,
    "!out": BotIntent.CLOCK_OUT,
    "!stats": BotIntent.STATUS,
    "!status": BotIntent.STATUS,
}

HELP_MESSAGE = "I didn't quite catch that. Try saying 'Clock in', 'Clock out', or check your 'Status'."


@dataclass(frozen=True)
class CommandResult:
    """Reply text plus the event to append, if the command was accepted."""

    message: str
    intent: BotIntent
    event: TimeEvent | None = None


def parse_prefix_command(content: str) -> IntentResult | None:
    """Recognize '!in', '!out', '!stats' shortcuts."""
    text = content.strip().lower()
    for prefix, intent in PREFIX_COMMANDS.items():
        if text.startswith(prefix):
            # "!inx" is not "!in"
            rest = text[len(prefix):]
            if not rest or rest[0].isspace():
                return IntentResult(intent=intent, confidence=1.0)
    return None


def format_clock_time(moment: datetime, tz: tzinfo | None = None) -> str:
    """Format as HH:MM:SS in the reference timezone."""
    return moment.astimezone(tz or REFERENCE_TIMEZONE).strftime("%H:%M:%S")


def _new_event(user: User, kind: EventKind, at: datetime, notes: str | None) -> TimeEvent:
    return TimeEvent(id=str(uuid.uuid4()), user_id=user.id, kind=kind, occurred_at=at, notes=notes)


def execute_command(
    intent_result: IntentResult,
    user: User,
    events: Iterable,
    now,
    roster: Iterable[User] | None = None,
    tz: tzinfo | None = None,
) -> CommandResult:
    """
    Run an intent for a user against a snapshot of the event log.

    Raises:
        ValidationError: if the backdating offset is negative.
    """
    events = list(events)
    now = parse_timestamp(now)
    intent = intent_result.intent

    offset = intent_result.time_offset_minutes or 0
    if offset < 0:
        raise ValidationError(f"Invalid time offset {offset}", ["Offset must be minutes in the past"])
    effective_time = now - timedelta(minutes=offset)

    status = current_status(user.id, events)

    if intent is BotIntent.CLOCK_IN:
        if status.is_working:
            return CommandResult(
                message=f"You are already clocked in since {format_clock_time(status.since, tz)}.",
                intent=intent,
            )
        if status.since is not None and effective_time <= status.since:
            return CommandResult(
                message=(
                    f"You clocked out at {format_clock_time(status.since, tz)}, "
                    "so you can't clock in before that."
                ),
                intent=intent,
            )
        event = _new_event(user, EventKind.CLOCK_IN, effective_time, intent_result.notes)
        return CommandResult(
            message=(
                f"✅ **Clocked In** at {format_clock_time(effective_time, tz)} \n"
                f"Have a great shift, {user.display_name}!"
            ),
            intent=intent,
            event=event,
        )

    if intent is BotIntent.CLOCK_OUT:
        if not status.is_working:
            return CommandResult(message="You aren't currently clocked in.", intent=intent)
        # Must land after the open clock-in or it would not close the session
        if effective_time <= status.since:
            return CommandResult(
                message=(
                    f"You clocked in at {format_clock_time(status.since, tz)}, "
                    "so you can't clock out before that."
                ),
                intent=intent,
            )
        event = _new_event(user, EventKind.CLOCK_OUT, effective_time, intent_result.notes)
        duration_hours = (effective_time - status.since).total_seconds() / 3600
        return CommandResult(
            message=(
                f"👋 **Clocked Out** at {format_clock_time(effective_time, tz)} \n"
                f"Session Duration: **{duration_hours:.2f} hours**. See you next time!"
            ),
            intent=intent,
            event=event,
        )

    if intent is BotIntent.STATUS:
        summaries = compute_employee_summaries(events, roster or [user], now, tz=tz)
        mine = next((s for s in summaries if s.user_id == user.id), None)
        if mine is None:
            return CommandResult(message="No data found.", intent=intent)
        state = "🟢 Working" if mine.status == STATUS_WORKING else "🔴 Offline"
        return CommandResult(
            message=(
                f"**Stats for {user.display_name}**\n"
                f"Status: {state}\n"
                f"Total Hours: **{mine.total_hours:.2f}h**\n"
                f"Overtime: **{mine.overtime_hours:.2f}h**"
            ),
            intent=intent,
        )

    return CommandResult(message=HELP_MESSAGE, intent=BotIntent.UNKNOWN)


def handle_message(
    content: str,
    user: User,
    store: EventStore,
    now,
    classifier: Callable[[str], IntentResult] = classify_intent,
) -> tuple[IntentResult, CommandResult]:
    """
    Interpret a chat message and apply it to the store.

    Prefix commands skip the classifier. The status check and the append of
    an accepted clock event happen under the store lock, so two commands
    from the same user cannot both pass the same check.
    """
    intent_result = parse_prefix_command(content) or classifier(content)
    roster = store.roster()

    def decide(events):
        result = execute_command(intent_result, user, events, now, roster=roster)
        return result, result.event

    return intent_result, store.append_if(decide)
