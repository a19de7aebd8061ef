"""API Pydantic models."""

from .responses import (
    ChatRequest,
    ChatResponse,
    DailyBreakdownResponse,
    DashboardResponse,
    EmployeeSummaryResponse,
    ErrorCodes,
    ErrorResponse,
    EventRequest,
    HealthResponse,
    StatusResponse,
    TimeEventResponse,
    UserResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "DailyBreakdownResponse",
    "DashboardResponse",
    "EmployeeSummaryResponse",
    "ErrorCodes",
    "ErrorResponse",
    "EventRequest",
    "HealthResponse",
    "StatusResponse",
    "TimeEventResponse",
    "UserResponse",
]
