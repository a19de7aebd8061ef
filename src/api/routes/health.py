"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from api.dependencies import get_store
from api.models.responses import HealthResponse
from core import config
from core.store import EventStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(store: EventStore = Depends(get_store)):
    """
    Health check endpoint for monitoring.

    Reports the event count and whether LLM intent parsing is available
    (keyword matching is used otherwise).
    """
    return HealthResponse(
        status="healthy",
        version=config.API_VERSION,
        event_count=len(store),
        llm_configured=bool(config.GEMINI_API_KEY),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
