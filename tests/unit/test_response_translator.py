"""Unit tests for ResponseTranslator."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from toolstream_server.generation import GenerationStream
from toolstream_server.lifecycle import (
    ConnectionFailure,
    DiscoveryFailure,
    GenerationFailure,
    StreamedSuccess,
)
from toolstream_server.models.chat import DoneEvent, TextDeltaEvent
from toolstream_server.responses import ResponseTranslator


def _stream(on_complete=None, block=False):
    async def source():
        yield TextDeltaEvent(content="Hi")
        if block:
            await asyncio.sleep(10)
        yield DoneEvent()

    return GenerationStream(source(), on_complete=on_complete)


@pytest.mark.parametrize(
    "outcome",
    [
        ConnectionFailure("MCP Client Error: Connection refused"),
        DiscoveryFailure("Tools Error: method not found"),
        GenerationFailure("Generation Error: No model configured"),
    ],
)
def test_failures_become_json_500(outcome):
    """Test that every failure variant yields {"error": message} with status 500."""
    response = ResponseTranslator().to_response(outcome)

    assert isinstance(response, JSONResponse)
    assert response.status_code == 500
    assert json.loads(response.body) == {"error": outcome.reason}


def test_success_becomes_event_stream():
    """Test that a streamed success yields an SSE response with status 200."""
    response = ResponseTranslator().to_response(StreamedSuccess(_stream()))

    assert isinstance(response, EventSourceResponse)
    assert response.status_code == 200


def test_unknown_outcome_is_rejected():
    """Test that translating something that is not an outcome fails loudly."""
    with pytest.raises(TypeError):
        ResponseTranslator().to_response("not an outcome")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_relay_formats_sse_messages():
    """Test that each stream event becomes one SSE message."""
    messages = [m async for m in ResponseTranslator._relay(_stream())]

    assert messages[0]["event"] == "text_delta"
    assert json.loads(messages[0]["data"])["content"] == "Hi"
    assert messages[1]["event"] == "done"
    assert json.loads(messages[1]["data"]) == {"status": "completed"}


@pytest.mark.asyncio
async def test_relay_closes_stream_on_disconnect():
    """Test that cancelling the relay (client disconnect) fires completion."""
    on_complete = AsyncMock()
    relay = ResponseTranslator._relay(_stream(on_complete=on_complete, block=True))
    first = asyncio.Event()

    async def consume():
        async for _ in relay:
            first.set()

    task = asyncio.create_task(consume())
    await first.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    on_complete.assert_awaited_once()
