"""Chat command endpoint."""

import asyncio
import time
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.dependencies import get_classifier, get_now, get_store, verify_api_key
from api.logging import RequestLog, log_request
from api.models.responses import ChatRequest, ChatResponse, ErrorCodes, TimeEventResponse
from api.routes.timesheets import get_client_ip, validation_http_error
from core.store import EventStore
from core.validation import ValidationError
from services.commands import handle_message
from services.intent import BotIntent

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    body: ChatRequest,
    store: EventStore = Depends(get_store),
    now: datetime = Depends(get_now),
    classifier=Depends(get_classifier),
):
    """
    Interpret a chat message as a clock command.

    Rejected commands (clock in while working, clock out while offline)
    return 200 with the explanation and no event.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/chat",
        method="POST",
        client_ip=get_client_ip(request),
        user_id=body.user_id,
    )

    try:
        user = store.get_user(body.user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={
                    "error": f"Unknown user '{body.user_id}'",
                    "code": ErrorCodes.NOT_FOUND,
                    "details": [],
                },
            )

        # Classifier may call out to the LLM
        intent_result, result = await asyncio.to_thread(
            handle_message, body.content, user, store, now, classifier
        )

        request_log.status_code = 200
        request_log.intent = result.intent.value
        request_log.confidence = intent_result.confidence
        if result.event is not None:
            request_log.event_id = result.event.id
        elif result.intent in (BotIntent.CLOCK_IN, BotIntent.CLOCK_OUT):
            request_log.details.append(("command_rejected", result.message))
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        return ChatResponse(
            intent=result.intent.value,
            confidence=intent_result.confidence,
            message=result.message,
            event=TimeEventResponse.from_event(result.event) if result.event else None,
        )

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
