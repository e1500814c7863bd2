"""Per-request lifecycle: connect, discover, generate, clean up.

The RequestLifecycleController runs the strictly sequential
open -> list_tools -> invoke pipeline for a single chat request and turns
every failure into exactly one RequestOutcome. The tool-provider connection
is owned by a ConnectionLease so it is closed exactly once on every path:
directly when a stage fails, or from the stream's completion callback when
generation started.
"""

import logging
import uuid
from typing import Any, Callable, Sequence

from toolstream_server.errors import (
    DiscoveryError,
    GenerationError,
    ToolProviderConnectionError,
)
from toolstream_server.generation.invoker import GenerationInvoker
from toolstream_server.lifecycle.lease import ConnectionLease
from toolstream_server.lifecycle.outcome import (
    ConnectionFailure,
    DiscoveryFailure,
    FailureKind,
    GenerationFailure,
    RequestOutcome,
    StreamedSuccess,
)
from toolstream_server.mcp.connection import ToolProviderConnection
from toolstream_server.models.chat import Message

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], ToolProviderConnection]


class RequestLifecycleController:
    """Orchestrates one chat request against a tool provider and the engine.

    A controller holds no per-request state and may be shared across
    requests; each call to handle() creates and owns its own connection.

    Attributes:
        stream_abandon_timeout: Seconds after which a stream that was never
            started has its connection released anyway (0 disables)
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        invoker: GenerationInvoker,
        stream_abandon_timeout: float = 0,
    ) -> None:
        self._connection_factory = connection_factory
        self._invoker = invoker
        self.stream_abandon_timeout = stream_abandon_timeout

    async def handle(
        self, messages: Sequence[Message | dict[str, Any]]
    ) -> RequestOutcome:
        """Run the lifecycle for one request.

        Args:
            messages: Conversation history in turn order

        Returns:
            RequestOutcome: StreamedSuccess carrying the generation stream, or
                one of the failure variants carrying the caller-visible reason
        """
        request_id = uuid.uuid4().hex[:10]
        logger.info(f"[{request_id}] Chat request received with {len(messages)} messages")
        lease = ConnectionLease(request_id)

        try:
            async with lease:
                return await self._run(request_id, lease, messages)
        except Exception as e:
            # The lease has already released the connection on exit.
            reason = str(e) or type(e).__name__
            logger.exception(
                f"[{request_id}] stage={FailureKind.GENERATION.value} "
                f"Unexpected error handling chat request: {reason}"
            )
            return GenerationFailure(reason)

    async def _run(
        self,
        request_id: str,
        lease: ConnectionLease,
        messages: Sequence[Message | dict[str, Any]],
    ) -> RequestOutcome:
        connection = lease.attach(self._connection_factory())

        try:
            logger.info(f"[{request_id}] Connecting to tool provider at {connection.url}")
            await connection.open()
        except ToolProviderConnectionError as e:
            return self._fail(request_id, ConnectionFailure(f"MCP Client Error: {e}"))

        try:
            tool_set = await connection.list_tools()
            logger.info(f"[{request_id}] Tools retrieved: {len(tool_set)}")
        except DiscoveryError as e:
            return self._fail(request_id, DiscoveryFailure(f"Tools Error: {e}"))

        try:
            stream = self._invoker.invoke(messages, tool_set, on_complete=lease.release)
        except GenerationError as e:
            return self._fail(request_id, GenerationFailure(f"Generation Error: {e}"))

        lease.hand_off(self.stream_abandon_timeout)
        stream.add_start_listener(lease.disarm)
        logger.info(f"[{request_id}] Returning generation stream")
        return StreamedSuccess(stream)

    @staticmethod
    def _fail(
        request_id: str, outcome: ConnectionFailure | DiscoveryFailure | GenerationFailure
    ) -> RequestOutcome:
        logger.error(f"[{request_id}] stage={outcome.kind.value} {outcome.reason}")
        return outcome
