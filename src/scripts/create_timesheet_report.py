#!/usr/bin/env python3
"""
Create an Excel timesheet report from a JSON clock event log.

The input file holds {"users": [...], "events": [...]}. Without a "users"
key the demo roster is used.

Usage:
    uv run python src/scripts/create_timesheet_report.py --events data/events.json
    uv run python src/scripts/create_timesheet_report.py --events data/events.json --now 2025-11-07T18:00:00Z
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import OUTPUT_DIR
from core.validation import ValidationError, coerce_events, parse_timestamp
from models.events import User
from services.mock_data import MOCK_USERS
from services.reports import build_dashboard_overview, create_timesheet_excel_report
from services.timesheets import compute_daily_breakdown, compute_employee_summaries, format_duration


def load_event_log(path: Path) -> tuple[list[User], list]:
    """Load roster and events from a JSON file."""
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, list):
        data = {"events": data}
    if "events" not in data:
        raise KeyError("Event log JSON must contain 'events' key")

    roster = MOCK_USERS
    if "users" in data:
        roster = [
            User(
                id=str(u["id"]),
                display_name=u.get("display_name", u.get("username", str(u["id"]))),
                avatar_ref=u.get("avatar_ref", u.get("avatar", "")),
                role=u.get("role", "employee"),
            )
            for u in data["users"]
        ]

    return roster, coerce_events(data["events"])


def print_summary(summaries):
    print("\n" + "=" * 70)
    print("EMPLOYEE SUMMARY")
    print("=" * 70)
    for s in summaries:
        flag = "working" if s.status == "working" else "offline"
        print(
            f"  {s.display_name:<20} {format_duration(s.total_hours * 60):>10}"
            f"  overtime {s.overtime_hours:>6.2f}h  [{flag}]"
        )

    overview = build_dashboard_overview(summaries)
    print(f"\n  Team total: {overview.total_hours:.2f}h, overtime {overview.total_overtime_hours:.2f}h")
    print(f"  Currently working: {overview.active_employees}")
    if overview.top_performer:
        print(f"  Top performer: {overview.top_performer.display_name}")


def main():
    parser = argparse.ArgumentParser(description="Generate Excel timesheet report from clock events")
    parser.add_argument("--events", type=Path, required=True, help="Path to JSON event log")
    parser.add_argument(
        "--now",
        help="Evaluation instant (ISO-8601). Open sessions count up to this time. Defaults to now.",
    )
    parser.add_argument("--output", type=Path, help="Output .xlsx path")
    args = parser.parse_args()

    try:
        now = parse_timestamp(args.now) if args.now else datetime.now(timezone.utc)
        roster, events = load_event_log(args.events)
        print(f"Loaded {len(events)} events for {len(roster)} users")

        summaries = compute_employee_summaries(events, roster, now)
        breakdowns = {u.id: compute_daily_breakdown(u.id, events, now) for u in roster}
        print_summary(summaries)

        output_path = args.output or (
            OUTPUT_DIR / "reports" / f"timesheet_report_{now.strftime('%Y_%m_%d')}.xlsx"
        )
        create_timesheet_excel_report(summaries, breakdowns, output_path)
        print("\nDone!")

    except FileNotFoundError as e:
        print(f"\nFile Error: {e}")
        sys.exit(1)
    except ValidationError as e:
        print(f"\nValidation Error: {e}")
        for detail in e.details:
            print(f"  - {detail}")
        sys.exit(1)
    except (KeyError, json.JSONDecodeError) as e:
        print(f"\nData Structure Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
