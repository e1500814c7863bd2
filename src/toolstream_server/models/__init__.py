"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests, responses and stream events.
"""

from toolstream_server.models.chat import (
    ChatRequest,
    DoneEvent,
    ErrorEvent,
    ErrorResponse,
    FinishEvent,
    Message,
    StreamEvent,
    TextDeltaEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from toolstream_server.models.health import HealthResponse

__all__ = [
    "ChatRequest",
    "DoneEvent",
    "ErrorEvent",
    "ErrorResponse",
    "FinishEvent",
    "HealthResponse",
    "Message",
    "StreamEvent",
    "TextDeltaEvent",
    "ToolCallEvent",
    "ToolResultEvent",
]
