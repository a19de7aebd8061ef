"""
Chat intent classification.

Maps free text to CLOCK_IN / CLOCK_OUT / STATUS / UNKNOWN with an optional
backdating offset ("I started 10 mins ago") and a confidence score. Uses the
Gemini generateContent REST API when a key is configured, otherwise a
keyword fallback.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum

import httpx

from core.config import GEMINI_API_KEY, GEMINI_API_URL, GEMINI_MODEL, LLM_TIMEOUT_SECONDS


class BotIntent(str, Enum):
    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    STATUS = "STATUS"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class IntentResult:
    """Classifier output."""

    intent: BotIntent
    confidence: float
    time_offset_minutes: int | None = None
    notes: str | None = None


UNKNOWN_RESULT = IntentResult(intent=BotIntent.UNKNOWN, confidence=0.0)

SYSTEM_INSTRUCTION = """You are a parser for a time-tracking Discord bot. Analyze the user's message to determine if they want to Clock In (start work), Clock Out (end work), or check their Status.

Rules:
- "in", "start", "morning", "login", "here" -> CLOCK_IN
- "out", "end", "bye", "logout", "leaving" -> CLOCK_OUT
- "how long", "hours", "stats", "time" -> STATUS
- Calculate timeOffsetMinutes if the user mentions past time (e.g. "started 10 mins ago" -> 10).
- Return 'confidence' between 0 and 1.
"""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "intent": {"type": "STRING", "enum": [i.value for i in BotIntent]},
        "notes": {"type": "STRING"},
        "confidence": {"type": "NUMBER"},
        "timeOffsetMinutes": {"type": "NUMBER"},
    },
}

# Checked in order; first match wins
KEYWORD_RULES = [
    (BotIntent.CLOCK_IN, re.compile(r"\b(in|start)\b", re.IGNORECASE)),
    (BotIntent.CLOCK_OUT, re.compile(r"\b(out|stop|end)\b", re.IGNORECASE)),
    (BotIntent.STATUS, re.compile(r"\b(status|time)\b", re.IGNORECASE)),
]


def classify_keywords(message: str) -> IntentResult:
    """Offline fallback used when no LLM key is configured."""
    for intent, pattern in KEYWORD_RULES:
        if pattern.search(message):
            return IntentResult(intent=intent, confidence=1.0)
    return IntentResult(intent=BotIntent.UNKNOWN, confidence=1.0)


def parse_intent_payload(payload: dict) -> IntentResult:
    """Normalize the JSON object returned by the model."""
    try:
        intent = BotIntent(str(payload.get("intent", "UNKNOWN")).upper())
    except ValueError:
        intent = BotIntent.UNKNOWN

    try:
        confidence = float(payload.get("confidence", 0))
    except (TypeError, ValueError):
        confidence = 0.0
    confidence = min(1.0, max(0.0, confidence))

    offset = payload.get("timeOffsetMinutes")
    try:
        offset = int(offset) if offset is not None else None
    except (TypeError, ValueError):
        offset = None
    if offset is not None and offset <= 0:
        offset = None

    return IntentResult(
        intent=intent,
        confidence=confidence,
        time_offset_minutes=offset,
        notes=payload.get("notes") or None,
    )


def build_request_body(message: str) -> dict:
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": [{"text": message}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def classify_intent(
    message: str,
    api_key: str | None = None,
    client: httpx.Client | None = None,
    model: str | None = None,
) -> IntentResult:
    """
    Classify a chat message.

    Falls back to keyword matching without an API key. Any failure talking
    to the model yields UNKNOWN with zero confidence.
    """
    api_key = GEMINI_API_KEY if api_key is None else api_key
    if not api_key:
        print("  No LLM API key configured, using keyword matching")
        return classify_keywords(message)

    url = f"{GEMINI_API_URL}/models/{model or GEMINI_MODEL}:generateContent"
    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=LLM_TIMEOUT_SECONDS)

    try:
        response = client.post(
            url,
            json=build_request_body(message),
            headers={"x-goog-api-key": api_key},
        )
        response.raise_for_status()
        data = response.json()
        text = data["candidates"][0]["content"]["parts"][0]["text"]
        if not text:
            return UNKNOWN_RESULT
        return parse_intent_payload(json.loads(text))
    except httpx.HTTPError as e:
        print(f"  Intent classification failed: {e}")
        return UNKNOWN_RESULT
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        print(f"  Unexpected intent response: {e}")
        return UNKNOWN_RESULT
    finally:
        if own_client:
            client.close()
