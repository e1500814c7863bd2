"""Translate request outcomes into HTTP responses.

A StreamedSuccess becomes a Server-Sent Events response that relays each
stream event as it arrives. Every failure variant becomes a single JSON body
{"error": <message>} with status 500.
"""

import logging
from typing import AsyncIterator

from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from toolstream_server.generation.stream import GenerationStream
from toolstream_server.lifecycle.outcome import RequestFailure, RequestOutcome, StreamedSuccess
from toolstream_server.models.chat import ErrorResponse

logger = logging.getLogger(__name__)


class ResponseTranslator:
    """Maps RequestOutcome variants to FastAPI responses."""

    def __init__(self, ping_interval: int | None = None) -> None:
        self.ping_interval = ping_interval

    def to_response(self, outcome: RequestOutcome) -> EventSourceResponse | JSONResponse:
        if isinstance(outcome, StreamedSuccess):
            return EventSourceResponse(
                self._relay(outcome.stream),
                ping=self.ping_interval,
            )
        if isinstance(outcome, RequestFailure):
            return self.error_response(outcome.reason)
        raise TypeError(f"Unknown request outcome: {outcome!r}")

    @staticmethod
    def error_response(message: str) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=message).model_dump(),
        )

    @staticmethod
    async def _relay(stream: GenerationStream) -> AsyncIterator[dict[str, str]]:
        """Relay stream events as SSE messages.

        The stream is always closed on exit, so a client disconnect (which
        cancels this generator) still fires the completion callback.
        """
        try:
            async for event in stream:
                yield {"event": event.event, "data": event.model_dump_json()}
        finally:
            await stream.aclose()
            logger.debug("Generation stream relay finished")
