"""Pydantic models for chat API requests, responses and stream events.

This module defines the request schema for POST /api/chat, the JSON error
body returned on failure, and the events emitted over SSE while a
generation streams.
"""

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system", "tool"]


class Message(BaseModel):
    """A single conversation turn."""

    role: Role = Field(description="Message role")
    content: str = Field(default="", description="Message content")
    tool_calls: list[dict[str, Any]] | None = Field(
        default=None, description="Tool calls made by the assistant (if any)"
    )
    tool_name: str | None = Field(
        default=None, description="Name of the tool that produced a tool message"
    )

    model_config = ConfigDict(frozen=True)

    def to_ollama(self) -> dict[str, Any]:
        """Convert to Ollama's message format."""
        ollama_msg: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            ollama_msg["tool_calls"] = self.tool_calls
        if self.tool_name:
            ollama_msg["tool_name"] = self.tool_name
        return ollama_msg


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    messages: list[Message] = Field(
        min_length=1,
        description="Conversation history in turn order",
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "messages": [
                        {"role": "user", "content": "Add 'buy milk' to my todos"},
                    ]
                }
            ]
        },
    )


class ErrorResponse(BaseModel):
    """JSON body returned with status 500 when a request fails."""

    error: str = Field(description="Human-readable failure reason")


# --- SSE stream events ---


class StreamEvent(BaseModel):
    """Base class for events emitted on the generation stream."""

    event: ClassVar[str] = "message"


class TextDeltaEvent(StreamEvent):
    """A chunk of generated text."""

    event: ClassVar[str] = "text_delta"

    content: str = Field(description="Text chunk")
    step: int = Field(default=1, description="Generation step this chunk belongs to")


class ToolCallEvent(StreamEvent):
    """The model requested a tool invocation."""

    event: ClassVar[str] = "tool_call"

    call_id: str = Field(description="Identifier pairing this call with its result")
    tool_name: str = Field(description="Name of the tool to invoke")
    arguments: dict[str, Any] = Field(default_factory=dict)
    step: int = Field(default=1)


class ToolResultEvent(StreamEvent):
    """The result of a tool invocation."""

    event: ClassVar[str] = "tool_result"

    call_id: str
    tool_name: str
    content: str
    is_error: bool = False
    step: int = Field(default=1)


class FinishEvent(StreamEvent):
    """Generation finished."""

    event: ClassVar[str] = "finish"

    reason: Literal["stop", "max_steps"] = Field(description="Why generation ended")
    steps: int = Field(description="Number of generation steps performed")
    model: str
    eval_count: int | None = Field(
        default=None, description="Tokens generated in the final step"
    )
    prompt_eval_count: int | None = Field(
        default=None, description="Prompt tokens in the final step"
    )


class ErrorEvent(StreamEvent):
    """Generation failed after streaming had already begun."""

    event: ClassVar[str] = "error"

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class DoneEvent(StreamEvent):
    """Terminal event; the stream is complete."""

    event: ClassVar[str] = "done"

    status: Literal["completed", "failed"] = "completed"
