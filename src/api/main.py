"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import chat_router, health_router, timesheets_router
from core.config import API_DEBUG, API_VERSION, SEED_DEMO_DATA
from core.store import EventStore
from core.validation import ValidationError
from services.mock_data import MOCK_USERS, generate_mock_events


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: roster plus optional demo shifts
    seed_events = []
    if SEED_DEMO_DATA:
        seed_events = generate_mock_events(datetime.now(timezone.utc))
    app.state.store = EventStore(roster=MOCK_USERS, events=seed_events)
    print(f"Event store ready: {len(MOCK_USERS)} users, {len(seed_events)} seeded events")

    yield


app = FastAPI(
    title="ChronoBot Time Tracking API",
    description="Clock-in/clock-out chat commands, daily timesheets and overtime summaries",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Structurally invalid input not already handled by a route."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=str(exc),
            code=ErrorCodes.VALIDATION_ERROR,
            details=exc.details,
        ).model_dump(),
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(timesheets_router)
app.include_router(chat_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
