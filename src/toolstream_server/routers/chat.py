"""Chat API endpoint.

POST /api/chat connects to the tool provider, discovers its tools and
streams a tool-augmented generation back to the caller via SSE. Failures
before streaming begins are returned as {"error": ...} with status 500.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from toolstream_server.dependencies import (
    get_lifecycle_controller,
    get_response_translator,
)
from toolstream_server.lifecycle import RequestLifecycleController
from toolstream_server.models.chat import ChatRequest, ErrorResponse
from toolstream_server.responses import ResponseTranslator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post(
    "/chat",
    response_model=None,
    responses={500: {"model": ErrorResponse, "description": "Request failed"}},
)
async def chat(
    request_body: ChatRequest,
    controller: RequestLifecycleController = Depends(get_lifecycle_controller),
    translator: ResponseTranslator = Depends(get_response_translator),
) -> EventSourceResponse | JSONResponse:
    """Stream a tool-augmented chat completion via Server-Sent Events (SSE).

    Args:
        request_body: Chat request containing the conversation history
        controller: Injected request lifecycle controller
        translator: Injected response translator

    Returns:
        EventSourceResponse with SSE events on success, or a JSONResponse
        with status 500 and {"error": message} on failure

    SSE Events:
        - text_delta: Each text chunk from the model
        - tool_call: The model requested a tool
        - tool_result: The tool's output
        - finish: Generation ended (reason, steps, token counts)
        - error: Generation failed after streaming began
        - done: Stream is complete
    """
    outcome = await controller.handle(request_body.messages)
    return translator.to_response(outcome)
