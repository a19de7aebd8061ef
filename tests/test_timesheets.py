"""
Tests for time-log aggregation.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from core.validation import ValidationError
from models.events import EventKind, TimeEvent, User
from services.timesheets import (
    STANDARD_DAY_HOURS,
    calendar_day,
    compute_daily_breakdown,
    compute_employee_summaries,
    current_status,
    format_duration,
    minutes_between,
    round_hours,
)

UTC = timezone.utc


def at(day, hour, minute=0):
    return datetime(2025, 11, day, hour, minute, tzinfo=UTC)


# =============================================================================
# HELPERS
# =============================================================================


def test_minutes_between_truncates_partial_minutes():
    assert minutes_between(at(1, 9), at(1, 9, 1) + timedelta(seconds=59)) == 1
    assert minutes_between(at(1, 9), at(1, 9) + timedelta(seconds=59)) == 0


def test_minutes_between_negative():
    assert minutes_between(at(1, 10), at(1, 9)) == -60


def test_calendar_day_uses_given_timezone():
    moment = at(2, 3)  # 23:00 on Nov 1 in New York
    assert calendar_day(moment, UTC) == date(2025, 11, 2)
    assert calendar_day(moment, ZoneInfo("America/New_York")) == date(2025, 11, 1)


@pytest.mark.parametrize(
    "value,expected",
    [(1.005, 1.01), (2.345, 2.35), (0.333333, 0.33), (17.5, 17.5), (0.0, 0.0)],
)
def test_round_hours_half_away_from_zero(value, expected):
    assert round_hours(value) == expected


def test_format_duration():
    assert format_duration(0) == "0h 0m"
    assert format_duration(125) == "2h 5m"
    assert format_duration(480) == "8h 0m"


# =============================================================================
# DAILY BREAKDOWN
# =============================================================================


def test_single_session(make_event, now):
    events = [make_event.clock_in("u1", at(1, 9)), make_event.clock_out("u1", at(1, 17))]

    days = compute_daily_breakdown("u1", events, now)

    assert len(days) == 1
    assert days[0].calendar_day == date(2025, 11, 1)
    assert days[0].total_hours == 8.0
    assert days[0].overtime_hours == 0.0
    assert [e.kind for e in days[0].events] == [EventKind.CLOCK_IN, EventKind.CLOCK_OUT]


def test_overtime_beyond_standard_day(make_event, now):
    events = [make_event.clock_in("u1", at(1, 8)), make_event.clock_out("u1", at(1, 18, 30))]

    day = compute_daily_breakdown("u1", events, now)[0]

    assert day.total_hours == 10.5
    assert day.overtime_hours == 2.5


def test_overtime_invariant_holds_for_every_day(two_day_events, make_event, now):
    events = two_day_events + [
        make_event.clock_in("u1", at(3, 9)),
        make_event.clock_out("u1", at(3, 11)),
    ]
    for day in compute_daily_breakdown("u1", events, now):
        assert day.overtime_hours == max(0.0, day.total_hours - STANDARD_DAY_HOURS)


def test_multiple_sessions_same_day_accumulate(make_event, now):
    events = [
        make_event.clock_in("u1", at(1, 9)),
        make_event.clock_out("u1", at(1, 12)),
        make_event.clock_in("u1", at(1, 13)),
        make_event.clock_out("u1", at(1, 17, 30)),
    ]

    day = compute_daily_breakdown("u1", events, now)[0]

    assert day.total_hours == 7.5
    assert len(day.events) == 4


def test_overnight_session_attributed_to_start_day(make_event, now):
    events = [
        make_event.clock_in("u1", at(1, 23, 50)),
        make_event.clock_out("u1", at(2, 0, 10)),
    ]

    days = compute_daily_breakdown("u1", events, now)

    assert [d.calendar_day for d in days] == [date(2025, 11, 2), date(2025, 11, 1)]
    nov2, nov1 = days
    assert nov1.total_hours == 20 / 60
    assert nov2.total_hours == 0.0
    # Each event is still listed on its own day
    assert [e.kind for e in nov1.events] == [EventKind.CLOCK_IN]
    assert [e.kind for e in nov2.events] == [EventKind.CLOCK_OUT]


def test_orphan_clock_out_listed_with_zero_duration(make_event, now):
    orphan = make_event.clock_out("u1", at(1, 12))

    days = compute_daily_breakdown("u1", [orphan], now)

    assert len(days) == 1
    assert days[0].total_hours == 0.0
    assert days[0].events == (orphan,)


def test_second_clock_out_after_session_is_orphan(make_event, now):
    events = [
        make_event.clock_in("u1", at(1, 9)),
        make_event.clock_out("u1", at(1, 17)),
        make_event.clock_out("u1", at(1, 18)),
    ]

    day = compute_daily_breakdown("u1", events, now)[0]

    assert day.total_hours == 8.0
    assert len(day.events) == 3


def test_repeated_clock_in_supersedes_open_session(make_event, now):
    events = [
        make_event.clock_in("u1", at(1, 8)),
        make_event.clock_in("u1", at(1, 10)),
        make_event.clock_out("u1", at(1, 12)),
    ]

    day = compute_daily_breakdown("u1", events, now)[0]

    assert day.total_hours == 2.0


def test_open_session_counts_up_to_now_on_same_day(make_event):
    start = at(3, 9)
    events = [make_event.clock_in("u1", start)]

    day = compute_daily_breakdown("u1", events, start + timedelta(minutes=90))[0]

    assert day.total_hours == 1.5
    assert day.overtime_hours == 0.0


def test_open_session_from_earlier_day_contributes_nothing(make_event, now):
    events = [
        make_event.clock_in("u1", at(1, 9)),
        make_event.clock_out("u1", at(1, 10)),
        make_event.clock_in("u1", at(2, 9)),
    ]

    days = compute_daily_breakdown("u1", events, now)

    assert [d.calendar_day for d in days] == [date(2025, 11, 2), date(2025, 11, 1)]
    assert days[0].total_hours == 0.0
    assert days[1].total_hours == 1.0


def test_inconsistent_clock_clamps_to_zero(make_event):
    # now earlier than the open clock-in on the same day
    events = [make_event.clock_in("u1", at(3, 12))]

    day = compute_daily_breakdown("u1", events, at(3, 11))[0]

    assert day.total_hours == 0.0


def test_out_of_order_input_is_sorted(make_event, now):
    clock_out = make_event.clock_out("u1", at(1, 17))
    clock_in = make_event.clock_in("u1", at(1, 9))

    day = compute_daily_breakdown("u1", [clock_out, clock_in], now)[0]

    assert day.total_hours == 8.0
    assert day.events == (clock_in, clock_out)


def test_coinciding_timestamps_break_ties_by_id(make_event, now):
    moment = at(1, 9)
    events = [
        make_event.clock_out("u1", moment, event_id="b"),
        make_event.clock_in("u1", moment, event_id="a"),
        make_event.clock_out("u1", at(1, 10), event_id="c"),
    ]

    day = compute_daily_breakdown("u1", events, now)[0]

    # "a" (CLOCK_IN) sorts before "b" (CLOCK_OUT): a zero-length session,
    # then "c" is an orphan
    assert [e.id for e in day.events] == ["a", "b", "c"]
    assert day.total_hours == 0.0


def test_days_ordered_most_recent_first(two_day_events, now):
    days = compute_daily_breakdown("u1", two_day_events, now)

    assert [d.calendar_day for d in days] == [date(2025, 11, 2), date(2025, 11, 1)]
    assert [d.total_hours for d in days] == [9.0, 8.5]


def test_only_requested_user_is_included(make_event, now):
    events = [
        make_event.clock_in("u1", at(1, 9)),
        make_event.clock_in("u2", at(1, 8)),
        make_event.clock_out("u2", at(1, 9)),
        make_event.clock_out("u1", at(1, 10)),
    ]

    day = compute_daily_breakdown("u1", events, now)[0]

    assert day.total_hours == 1.0
    assert all(e.user_id == "u1" for e in day.events)


def test_user_without_events_has_no_days(now):
    assert compute_daily_breakdown("u1", [], now) == []


def test_breakdown_is_idempotent(two_day_events, now):
    first = compute_daily_breakdown("u1", two_day_events, now)
    second = compute_daily_breakdown("u1", two_day_events, now)
    assert first == second


def test_closing_open_session_never_decreases_total(make_event):
    now = at(3, 12)
    events = [make_event.clock_in("u1", at(2, 9))]
    before = compute_daily_breakdown("u1", events, now)[0].total_hours

    events.append(make_event.clock_out("u1", at(2, 17)))
    after = compute_daily_breakdown("u1", events, now)[-1].total_hours

    assert before == 0.0
    assert after == 8.0


def test_closing_session_at_now_leaves_total_unchanged(make_event):
    now = at(3, 12)
    events = [make_event.clock_in("u1", at(3, 9))]
    before = compute_daily_breakdown("u1", events, now)[0].total_hours

    events.append(make_event.clock_out("u1", now))
    after = compute_daily_breakdown("u1", events, now)[0].total_hours

    assert before == after == 3.0


def test_input_events_are_not_mutated(two_day_events, now):
    original = list(two_day_events)
    compute_daily_breakdown("u1", two_day_events, now)
    assert two_day_events == original


def test_reference_timezone_moves_day_boundary(make_event):
    new_york = ZoneInfo("America/New_York")
    # 21:00-23:00 in New York on Nov 1 is 01:00-03:00 UTC on Nov 2
    events = [
        make_event.clock_in("u1", at(2, 1)),
        make_event.clock_out("u1", at(2, 3)),
    ]

    days = compute_daily_breakdown("u1", events, at(5, 12), tz=new_york)

    assert days[0].calendar_day == date(2025, 11, 1)
    assert days[0].total_hours == 2.0


def test_accepts_raw_event_dicts(now):
    events = [
        {"id": "1", "userId": "u1", "type": "CLOCK_IN", "timestamp": "2025-11-01T09:00:00Z"},
        {"id": "2", "userId": "u1", "type": "CLOCK_OUT", "timestamp": "2025-11-01T13:00:00Z"},
    ]

    day = compute_daily_breakdown("u1", events, now)[0]

    assert day.total_hours == 4.0


def test_unparseable_timestamp_raises(now):
    events = [{"id": "1", "userId": "u1", "type": "CLOCK_IN", "timestamp": "yesterday-ish"}]
    with pytest.raises(ValidationError):
        compute_daily_breakdown("u1", events, now)


def test_unknown_kind_raises(now):
    events = [{"id": "1", "userId": "u1", "type": "LUNCH", "timestamp": "2025-11-01T09:00:00Z"}]
    with pytest.raises(ValidationError, match="Unknown event kind"):
        compute_daily_breakdown("u1", events, now)


def test_unknown_user_rejected_when_roster_given(roster, two_day_events, now):
    with pytest.raises(ValidationError, match="Unknown user"):
        compute_daily_breakdown("ghost", two_day_events, now, roster=roster)


def test_user_with_events_but_not_in_roster_is_accepted(two_day_events, now):
    days = compute_daily_breakdown("u1", two_day_events, now, roster=[User(id="u9", display_name="X")])
    assert len(days) == 2


# =============================================================================
# STATUS
# =============================================================================


def test_status_working_after_latest_clock_in(make_event):
    events = [
        make_event.clock_in("u1", at(1, 9)),
        make_event.clock_out("u1", at(1, 17, 30)),
        make_event.clock_in("u1", at(1, 17, 45)),
    ]

    status = current_status("u1", events)

    assert status.is_working is True
    assert status.since == at(1, 17, 45)


def test_status_offline_after_clock_out(two_day_events):
    status = current_status("u1", two_day_events)

    assert status.is_working is False
    assert status.since == at(2, 17)


def test_status_without_events():
    status = current_status("u1", [])
    assert status.is_working is False
    assert status.since is None


def test_status_uses_chronological_order_not_insertion_order(make_event):
    events = [
        make_event.clock_in("u1", at(1, 18)),
        make_event.clock_out("u1", at(1, 12)),
    ]
    assert current_status("u1", events).is_working is True


# =============================================================================
# SUMMARIES
# =============================================================================


def test_summary_sums_daily_breakdowns(roster, two_day_events, now):
    summaries = compute_employee_summaries(two_day_events, roster, now)
    alex = summaries[0]

    assert alex.user_id == "u1"
    assert alex.display_name == "AlexEngineer"
    assert alex.avatar_ref == "a1.png"
    assert alex.total_hours == 17.5
    assert alex.overtime_hours == 1.5
    assert alex.status == "offline"
    assert alex.last_action_at == at(2, 17)


def test_summary_follows_roster_order(roster, now):
    summaries = compute_employee_summaries([], list(reversed(roster)), now)
    assert [s.user_id for s in summaries] == ["u3", "u2", "u1"]


def test_summary_for_user_without_events(roster, two_day_events, now):
    sarah = compute_employee_summaries(two_day_events, roster, now)[1]

    assert sarah.total_hours == 0
    assert sarah.overtime_hours == 0
    assert sarah.status == "offline"
    assert sarah.last_action_at is None


def test_summary_rounds_to_two_decimals(roster, make_event, now):
    events = [
        make_event.clock_in("u2", at(1, 9)),
        make_event.clock_out("u2", at(1, 9, 20)),  # 0.3333h
    ]

    sarah = compute_employee_summaries(events, roster, now)[1]

    assert sarah.total_hours == 0.33


def test_summary_includes_running_session(roster, make_event):
    events = [make_event.clock_in("u3", at(3, 9))]

    mike = compute_employee_summaries(events, roster, at(3, 19))[2]

    assert mike.status == "working"
    assert mike.total_hours == 10.0
    assert mike.overtime_hours == 2.0


def test_summary_ignores_events_for_users_outside_roster(roster, make_event, now):
    events = [
        make_event.clock_in("outsider", at(1, 9)),
        make_event.clock_out("outsider", at(1, 17)),
    ]
    summaries = compute_employee_summaries(events, roster, now)
    assert [s.user_id for s in summaries] == ["u1", "u2", "u3"]
    assert all(s.total_hours == 0 for s in summaries)


def test_summary_naive_timestamps_are_utc(roster, now):
    events = [
        TimeEvent("1", "u1", EventKind.CLOCK_IN, datetime(2025, 11, 1, 9)),
        TimeEvent("2", "u1", EventKind.CLOCK_OUT, datetime(2025, 11, 1, 10)),
    ]
    assert compute_employee_summaries(events, roster, now)[0].total_hours == 1.0
