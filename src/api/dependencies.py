"""FastAPI dependencies for authentication and shared resources."""

import secrets
from datetime import datetime, timezone

from fastapi import Header, HTTPException, Request, status

from core import config
from core.store import EventStore
from services.intent import classify_intent


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not config.CHRONOBOT_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, config.CHRONOBOT_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


def get_store(request: Request) -> EventStore:
    """Event store created at startup."""
    return request.app.state.store


def get_now() -> datetime:
    """Evaluation instant for aggregation. Overridden in tests."""
    return datetime.now(timezone.utc)


def get_classifier():
    """Intent classifier. Overridden in tests."""
    return classify_intent
