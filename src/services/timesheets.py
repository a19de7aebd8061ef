"""
Time-log aggregation.

Turns an unordered clock event log into per-day totals, overtime and
per-employee summaries. Every function here is pure: the evaluation instant
is passed in by the caller and nothing is read from a clock.

Session rules:
- A CLOCK_IN opens a session, replacing any session already open.
- A CLOCK_OUT closes the open session; the whole duration counts toward the
  calendar day the session started on, even across midnight.
- A CLOCK_OUT with no open session is listed on its day but adds nothing.
- A session still open at the end counts up to `now` only when it started
  on the same calendar day as `now`.
"""

import math
from collections.abc import Iterable
from datetime import date, datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from core.config import REFERENCE_TIMEZONE, STANDARD_DAY_HOURS
from core.validation import coerce_events, parse_timestamp, require_user
from models.events import (
    CurrentStatus,
    DailyBreakdown,
    EmployeeSummary,
    EventKind,
    TimeEvent,
    User,
)

STATUS_WORKING = "working"
STATUS_OFFLINE = "offline"


# =============================================================================
# HELPERS
# =============================================================================


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def calendar_day(moment: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day containing `moment` in the reference timezone."""
    return moment.astimezone(tz or REFERENCE_TIMEZONE).date()


def round_hours(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def overtime_for(total_hours: float) -> float:
    return max(0.0, total_hours - STANDARD_DAY_HOURS)


def format_duration(minutes: float) -> str:
    """Format minutes as e.g. '7h 45m'."""
    hours = math.floor(minutes / 60)
    mins = round(minutes % 60)
    return f"{hours}h {mins}m"


def sort_events(events: Iterable[TimeEvent]) -> list[TimeEvent]:
    """Stable chronological order with id as tie-break."""
    return sorted(events, key=lambda e: e.sort_key)


def events_for_user(user_id: str, events: Iterable[TimeEvent]) -> list[TimeEvent]:
    return sort_events(e for e in events if e.user_id == user_id)


# =============================================================================
# DAILY BREAKDOWN
# =============================================================================


class _DayTally(NamedTuple):
    minutes: int
    events: tuple[TimeEvent, ...]


def _with_event(tally: _DayTally | None, event: TimeEvent) -> _DayTally:
    if tally is None:
        return _DayTally(0, (event,))
    return tally._replace(events=tally.events + (event,))


def _with_minutes(tally: _DayTally | None, minutes: int) -> _DayTally:
    if tally is None:
        return _DayTally(max(0, minutes), ())
    return tally._replace(minutes=tally.minutes + max(0, minutes))


def compute_daily_breakdown(
    user_id: str,
    events: Iterable,
    now,
    roster: Iterable[User] | None = None,
    tz: tzinfo | None = None,
) -> list[DailyBreakdown]:
    """
    Per-day hours for one user, most recent day first.

    Args:
        user_id: User to report on.
        events: Full event log (TimeEvents or event dicts), any order.
        now: Evaluation instant, used only for a session still open today.
        roster: Optional roster; when given, a user missing from both the
            roster and the events is rejected.
        tz: Timezone defining calendar days. Defaults to REFERENCE_TIMEZONE.

    Raises:
        ValidationError: on unparseable timestamps, unknown kinds or an
            unknown user.
    """
    all_events = coerce_events(events)
    now = parse_timestamp(now)
    if roster is not None:
        roster = list(roster)
    require_user(user_id, all_events, roster)

    days: dict[date, _DayTally] = {}
    open_start: TimeEvent | None = None

    for event in events_for_user(user_id, all_events):
        day = calendar_day(event.occurred_at, tz)
        days[day] = _with_event(days.get(day), event)

        if event.kind is EventKind.CLOCK_IN:
            open_start = event
        elif open_start is not None:
            start_day = calendar_day(open_start.occurred_at, tz)
            duration = minutes_between(open_start.occurred_at, event.occurred_at)
            days[start_day] = _with_minutes(days.get(start_day), duration)
            open_start = None

    if open_start is not None:
        start_day = calendar_day(open_start.occurred_at, tz)
        if start_day == calendar_day(now, tz):
            duration = minutes_between(open_start.occurred_at, now)
            days[start_day] = _with_minutes(days.get(start_day), duration)

    breakdown = []
    for day in sorted(days, reverse=True):
        tally = days[day]
        total_hours = tally.minutes / 60
        breakdown.append(
            DailyBreakdown(
                calendar_day=day,
                total_hours=total_hours,
                overtime_hours=overtime_for(total_hours),
                events=tally.events,
            )
        )
    return breakdown


# =============================================================================
# STATUS AND SUMMARIES
# =============================================================================


def current_status(user_id: str, events: Iterable) -> CurrentStatus:
    """
    Live status from the user's most recent event.

    `since` is the timestamp of that event (the clock-in while working, the
    clock-out while offline), or None when the user has no events.
    """
    user_events = events_for_user(user_id, coerce_events(events))
    if not user_events:
        return CurrentStatus(is_working=False, since=None)
    last = user_events[-1]
    return CurrentStatus(is_working=last.kind is EventKind.CLOCK_IN, since=last.occurred_at)


def compute_employee_summaries(
    events: Iterable,
    roster: Iterable[User],
    now,
    tz: tzinfo | None = None,
) -> list[EmployeeSummary]:
    """
    One summary per roster member, in roster order.

    Totals are the sums of the daily breakdowns, rounded to 2 decimals.
    """
    all_events = coerce_events(events)
    now = parse_timestamp(now)
    summaries = []

    for user in roster:
        days = compute_daily_breakdown(user.id, all_events, now, tz=tz)
        total_hours = math.fsum(d.total_hours for d in days)
        overtime_hours = math.fsum(d.overtime_hours for d in days)
        status = current_status(user.id, all_events)

        summaries.append(
            EmployeeSummary(
                user_id=user.id,
                display_name=user.display_name,
                avatar_ref=user.avatar_ref,
                total_hours=round_hours(total_hours),
                overtime_hours=round_hours(overtime_hours),
                status=STATUS_WORKING if status.is_working else STATUS_OFFLINE,
                last_action_at=status.since,
            )
        )

    return summaries
