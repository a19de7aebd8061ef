"""Timesheet query and event ingestion endpoints."""

import time
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.dependencies import get_now, get_store, verify_api_key
from api.logging import RequestLog, log_request
from api.models.responses import (
    DailyBreakdownResponse,
    DashboardResponse,
    EmployeeSummaryResponse,
    ErrorCodes,
    EventRequest,
    StatusResponse,
    TimeEventResponse,
    UserResponse,
)
from core.store import EventStore
from core.validation import ValidationError
from services.reports import build_dashboard_overview
from services.timesheets import compute_daily_breakdown, compute_employee_summaries, current_status

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def validation_http_error(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "error": str(e),
            "code": ErrorCodes.VALIDATION_ERROR,
            "details": e.details,
        },
    )


def require_known_user(store: EventStore, user_id: str, events) -> None:
    """404 for a user in neither the roster nor the event log."""
    if store.get_user(user_id) is None and not any(e.user_id == user_id for e in events):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": f"Unknown user '{user_id}'",
                "code": ErrorCodes.NOT_FOUND,
                "details": [],
            },
        )


@router.get("/users", response_model=list[UserResponse])
async def list_users(store: EventStore = Depends(get_store)):
    """Roster in insertion order."""
    return [UserResponse.from_user(u) for u in store.roster()]


@router.get("/employees/summary", response_model=list[EmployeeSummaryResponse])
async def employee_summaries(
    store: EventStore = Depends(get_store),
    now: datetime = Depends(get_now),
):
    summaries = compute_employee_summaries(store.snapshot(), store.roster(), now)
    return [EmployeeSummaryResponse.from_summary(s) for s in summaries]


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    store: EventStore = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Team totals, active count and hours chart for the manager view."""
    overview = build_dashboard_overview(
        compute_employee_summaries(store.snapshot(), store.roster(), now)
    )
    top = overview.top_performer
    return DashboardResponse(
        total_hours=overview.total_hours,
        total_overtime_hours=overview.total_overtime_hours,
        active_employees=overview.active_employees,
        top_performer=EmployeeSummaryResponse.from_summary(top) if top else None,
        chart=[EmployeeSummaryResponse.from_summary(s) for s in overview.chart],
    )


@router.get("/employees/{user_id}/daily", response_model=list[DailyBreakdownResponse])
async def employee_daily(
    user_id: str,
    store: EventStore = Depends(get_store),
    now: datetime = Depends(get_now),
):
    events = store.snapshot()
    require_known_user(store, user_id, events)
    days = compute_daily_breakdown(user_id, events, now, roster=store.roster())
    return [DailyBreakdownResponse.from_breakdown(d) for d in days]


@router.get("/employees/{user_id}/status", response_model=StatusResponse)
async def employee_status(user_id: str, store: EventStore = Depends(get_store)):
    events = store.snapshot()
    require_known_user(store, user_id, events)
    result = current_status(user_id, events)
    return StatusResponse(user_id=user_id, is_working=result.is_working, since=result.since)


@router.post("/events", response_model=TimeEventResponse, status_code=status.HTTP_201_CREATED)
async def ingest_event(
    request: Request,
    body: EventRequest,
    store: EventStore = Depends(get_store),
):
    """
    Append a raw clock event.

    Unlike chat commands this does not check the user's current status;
    irregular sequences are absorbed by the aggregation rules.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/events",
        method="POST",
        client_ip=get_client_ip(request),
        user_id=body.user_id,
    )

    try:
        require_known_user(store, body.user_id, ())
        raw = body.model_dump()
        raw["id"] = raw["id"] or str(uuid.uuid4())
        event = store.append(raw)

        request_log.status_code = 201
        request_log.event_id = event.id
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        return TimeEventResponse.from_event(event)

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        raise

    except ValidationError as e:
        request_log.status_code = 422
        request_log.error_code = ErrorCodes.VALIDATION_ERROR
        request_log.error_message = str(e)
        for detail in e.details:
            request_log.details.append(("validation_error", detail))
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        raise validation_http_error(e)

    finally:
        # Always log the request
        try:
            log_request(request_log)
        except Exception:
            # Don't fail the request if logging fails
            pass
