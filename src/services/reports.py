"""
Dashboard figures and Excel timesheet export.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import DAILY_HEADERS, REFERENCE_TIMEZONE, SUMMARY_HEADERS
from models.events import DailyBreakdown, EmployeeSummary
from services.timesheets import STATUS_WORKING, round_hours


def format_date_display(d: date) -> str:
    """Format date as M/D/YYYY (platform-safe, no zero-padding)."""
    return f"{d.month}/{d.day}/{d.year}"


def format_timestamp_display(moment: datetime | None, tz: tzinfo | None = None) -> str:
    """Format as 'M/D/YYYY HH:MM' in the reference timezone, '' if absent."""
    if moment is None:
        return ""
    local = moment.astimezone(tz or REFERENCE_TIMEZONE)
    return f"{format_date_display(local.date())} {local.strftime('%H:%M')}"


# =============================================================================
# DASHBOARD
# =============================================================================


@dataclass(frozen=True)
class DashboardOverview:
    """Team-level figures for the manager dashboard."""

    total_hours: float
    total_overtime_hours: float
    active_employees: int
    top_performer: EmployeeSummary | None
    chart: list[EmployeeSummary]  # sorted by total hours, highest first


def build_dashboard_overview(summaries: list[EmployeeSummary]) -> DashboardOverview:
    # sorted() is stable, so ties keep roster order
    chart = sorted(summaries, key=lambda s: s.total_hours, reverse=True)
    return DashboardOverview(
        total_hours=round_hours(math.fsum(s.total_hours for s in summaries)),
        total_overtime_hours=round_hours(math.fsum(s.overtime_hours for s in summaries)),
        active_employees=sum(1 for s in summaries if s.status == STATUS_WORKING),
        top_performer=chart[0] if chart else None,
        chart=chart,
    )


# =============================================================================
# EXCEL REPORT GENERATION
# =============================================================================


def write_header_row(ws, headers: list[str]):
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)


def write_excel_summary_sheet(ws, summaries: list[EmployeeSummary], tz: tzinfo | None = None):
    """
    Write the Employee Summary sheet with a SUM totals row.

    Columns: Employee, Total Hours, Overtime Hours, Status, Last Action
    """
    write_header_row(ws, SUMMARY_HEADERS)

    for row_idx, summary in enumerate(summaries, start=2):
        row_data = [
            summary.display_name,
            summary.total_hours,
            summary.overtime_hours,
            summary.status,
            format_timestamp_display(summary.last_action_at, tz),
        ]
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    last_row = len(summaries) + 1
    total_row = last_row + 1
    ws.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    if summaries:
        for col_idx in (2, 3):
            col_letter = get_column_letter(col_idx)
            ws.cell(row=total_row, column=col_idx, value=f"=SUM({col_letter}2:{col_letter}{last_row})")


def write_excel_daily_sheet(
    ws,
    summaries: list[EmployeeSummary],
    breakdowns: dict[str, list[DailyBreakdown]],
):
    """
    Write the Daily Breakdown sheet, one row per employee per day.

    Columns: Employee, Date, Hours, Overtime, Events
    """
    write_header_row(ws, DAILY_HEADERS)

    row_idx = 2
    for summary in summaries:
        for day in breakdowns.get(summary.user_id, []):
            row_data = [
                summary.display_name,
                format_date_display(day.calendar_day),
                round_hours(day.total_hours),
                round_hours(day.overtime_hours),
                len(day.events),
            ]
            for col_idx, value in enumerate(row_data, start=1):
                ws.cell(row=row_idx, column=col_idx, value=value)
            row_idx += 1


def create_timesheet_excel_report(
    summaries: list[EmployeeSummary],
    breakdowns: dict[str, list[DailyBreakdown]],
    output_path: Path,
    tz: tzinfo | None = None,
) -> Path:
    """
    Create Excel timesheet report with two sheets.

    Sheet 1: "Employee Summary" - one row per roster member plus totals
    Sheet 2: "Daily Breakdown" - per employee per day, most recent first
    """
    wb = Workbook()

    ws_summary = wb.active
    ws_summary.title = "Employee Summary"
    write_excel_summary_sheet(ws_summary, summaries, tz)

    ws_daily = wb.create_sheet(title="Daily Breakdown")
    write_excel_daily_sheet(ws_daily, summaries, breakdowns)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    print(f"Saved Excel report to: {output_path}")
    return output_path
