"""Pydantic request/response models for API endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from models.events import DailyBreakdown, EmployeeSummary, TimeEvent, User


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    event_count: int
    llm_configured: bool
    timestamp: str  # ISO 8601 UTC


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class UserResponse(BaseModel):
    id: str
    display_name: str
    avatar_ref: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, display_name=user.display_name, avatar_ref=user.avatar_ref, role=user.role)


class TimeEventResponse(BaseModel):
    id: str
    user_id: str
    kind: str
    occurred_at: datetime
    notes: str | None = None

    @classmethod
    def from_event(cls, event: TimeEvent) -> "TimeEventResponse":
        return cls(
            id=event.id,
            user_id=event.user_id,
            kind=event.kind.value,
            occurred_at=event.occurred_at,
            notes=event.notes,
        )


class DailyBreakdownResponse(BaseModel):
    calendar_day: date
    total_hours: float
    overtime_hours: float
    events: list[TimeEventResponse]

    @classmethod
    def from_breakdown(cls, day: DailyBreakdown) -> "DailyBreakdownResponse":
        return cls(
            calendar_day=day.calendar_day,
            total_hours=day.total_hours,
            overtime_hours=day.overtime_hours,
            events=[TimeEventResponse.from_event(e) for e in day.events],
        )


class EmployeeSummaryResponse(BaseModel):
    user_id: str
    display_name: str
    avatar_ref: str
    total_hours: float
    overtime_hours: float
    status: str
    last_action_at: datetime | None = None

    @classmethod
    def from_summary(cls, summary: EmployeeSummary) -> "EmployeeSummaryResponse":
        return cls(
            user_id=summary.user_id,
            display_name=summary.display_name,
            avatar_ref=summary.avatar_ref,
            total_hours=summary.total_hours,
            overtime_hours=summary.overtime_hours,
            status=summary.status,
            last_action_at=summary.last_action_at,
        )


class StatusResponse(BaseModel):
    user_id: str
    is_working: bool
    since: datetime | None = None


class DashboardResponse(BaseModel):
    total_hours: float
    total_overtime_hours: float
    active_employees: int
    top_performer: EmployeeSummaryResponse | None = None
    chart: list[EmployeeSummaryResponse]


class EventRequest(BaseModel):
    """Raw event ingestion. Timestamp and kind are validated by the service."""

    id: str | None = None
    user_id: str
    kind: str
    occurred_at: str
    notes: str | None = None


class ChatRequest(BaseModel):
    user_id: str
    content: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    intent: str
    confidence: float
    message: str
    event: TimeEventResponse | None = None
