"""Connection to an external MCP tool provider.

This module wraps fastmcp.Client behind a small state machine
(Unopened -> Open -> Closed) that is owned by exactly one request. The
connection is opened once without retries, queried for its tools, used by
the generation loop to call tools, and closed exactly once.
"""

import asyncio
import functools
import logging
from contextlib import AsyncExitStack
from typing import Any

from fastmcp import Client
from fastmcp.client.transports import SSETransport, StreamableHttpTransport

from toolstream_server.errors import (
    ConnectionClosedError,
    DiscoveryError,
    ToolCallError,
    ToolProviderConnectionError,
)
from toolstream_server.mcp.types import (
    ConnectionState,
    ToolDescriptor,
    ToolResult,
    ToolSet,
)

logger = logging.getLogger(__name__)


def _describe(error: BaseException) -> str:
    """Human-readable reason for an error, falling back to its type name."""
    message = str(error)
    if not message and isinstance(error, TimeoutError):
        return "timed out"
    return message or type(error).__name__


def _content_to_text(blocks: list[Any]) -> str:
    """Flatten MCP content blocks into a single text payload."""
    parts = []
    for block in blocks or []:
        text = getattr(block, "text", None)
        if text is not None:
            parts.append(text)
        elif hasattr(block, "model_dump_json"):
            parts.append(block.model_dump_json())
        else:
            parts.append(str(block))
    return "\n".join(parts)


def _field(obj: Any, name: str, legacy_name: str) -> Any:
    """Read an MCP model field, preferring its snake_case name.

    Newer MCP types rename camelCase fields and keep the old names as
    deprecated aliases; older releases only have the camelCase name.
    """
    value = getattr(obj, name, None)
    if value is not None:
        return value
    return getattr(obj, legacy_name, None)


class ToolProviderConnection:
    """A single-use connection to an MCP tool provider.

    Attributes:
        url: The tool-provider endpoint URL
        transport: Transport name ("sse" or "streamable-http")
        state: Current ConnectionState
    """

    def __init__(
        self,
        url: str,
        transport: str = "sse",
        headers: dict[str, str] | None = None,
        connect_timeout: float = 10.0,
        discovery_timeout: float = 10.0,
        tool_call_timeout: float = 60.0,
    ) -> None:
        self.url = url
        self.transport = transport
        self.headers = headers or {}
        self.connect_timeout = connect_timeout
        self.discovery_timeout = discovery_timeout
        self.tool_call_timeout = tool_call_timeout
        self.state = ConnectionState.UNOPENED
        self._client: Client | None = None
        self._exit_stack: AsyncExitStack | None = None
        self._open_attempted = False

    def _build_transport(self) -> SSETransport | StreamableHttpTransport:
        if self.transport == "streamable-http":
            return StreamableHttpTransport(url=self.url, headers=self.headers)
        return SSETransport(url=self.url, headers=self.headers)

    def _ensure_open(self, operation: str) -> Client:
        if self.state is ConnectionState.CLOSED:
            raise ConnectionClosedError(
                f"Cannot {operation}: connection to {self.url} is closed"
            )
        if self.state is not ConnectionState.OPEN or self._client is None:
            raise ConnectionClosedError(
                f"Cannot {operation}: connection to {self.url} is not open"
            )
        return self._client

    async def open(self) -> "ToolProviderConnection":
        """Establish the session with the tool provider.

        A single attempt is made, bounded by connect_timeout. On failure the
        connection never becomes Open.

        Returns:
            ToolProviderConnection: self, for chaining

        Raises:
            ToolProviderConnectionError: If the session cannot be established
            RuntimeError: If open() was already called on this connection
        """
        if self._open_attempted:
            raise RuntimeError("ToolProviderConnection.open() may only be called once")
        self._open_attempted = True

        logger.debug(f"Opening {self.transport} connection to {self.url}")
        exit_stack = AsyncExitStack()
        try:
            client = Client(self._build_transport())
            async with asyncio.timeout(self.connect_timeout):
                await exit_stack.enter_async_context(client)
        except Exception as e:
            logger.error(f"Failed to connect to tool provider at {self.url}: {e}")
            try:
                await exit_stack.aclose()
            except Exception as close_error:
                logger.debug(f"Ignoring error while discarding transport: {close_error}")
            raise ToolProviderConnectionError(_describe(e)) from e

        self._client = client
        self._exit_stack = exit_stack
        self.state = ConnectionState.OPEN
        logger.info(f"Connected to tool provider at {self.url}")
        return self

    async def list_tools(self) -> ToolSet:
        """Query the provider for its currently exposed tools.

        Returns:
            ToolSet: Snapshot of the available tools, possibly empty

        Raises:
            ConnectionClosedError: If the connection is not open
            DiscoveryError: If the provider could not be queried
        """
        client = self._ensure_open("list tools")
        try:
            async with asyncio.timeout(self.discovery_timeout):
                tools = await client.list_tools()
            tool_set = ToolSet(
                [
                    ToolDescriptor(
                        name=tool.name,
                        description=tool.description or "",
                        input_schema=dict(_field(tool, "input_schema", "inputSchema") or {}),
                        invoke=functools.partial(self.call_tool, tool.name),
                    )
                    for tool in tools
                ]
            )
        except Exception as e:
            logger.error(f"Failed to list tools from {self.url}: {e}")
            raise DiscoveryError(_describe(e)) from e

        logger.info(f"Discovered {len(tool_set)} tools from {self.url}")
        return tool_set

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Invoke a tool on the provider.

        Args:
            name: Tool name
            arguments: Tool arguments matching its input schema

        Returns:
            ToolResult: The tool output; is_error is set when the provider
                reports a failed call

        Raises:
            ConnectionClosedError: If the connection is not open
            ToolCallError: If the call failed at the transport level
        """
        client = self._ensure_open(f"call tool {name!r}")
        logger.debug(f"Calling tool {name} with arguments: {arguments}")
        try:
            async with asyncio.timeout(self.tool_call_timeout):
                result = await client.call_tool_mcp(name, arguments)
        except Exception as e:
            logger.error(f"Tool call {name} failed: {e}")
            raise ToolCallError(_describe(e)) from e

        return ToolResult(
            content=_content_to_text(result.content),
            is_error=bool(_field(result, "is_error", "isError")),
        )

    async def close(self) -> None:
        """Close the connection and release the transport.

        Idempotent and never raises: calling it on a connection that was
        never opened, failed to open, or is already closed is a no-op.
        """
        if self.state is ConnectionState.CLOSED:
            return
        previous_state = self.state
        self.state = ConnectionState.CLOSED
        exit_stack, self._exit_stack = self._exit_stack, None
        self._client = None

        if previous_state is not ConnectionState.OPEN or exit_stack is None:
            return

        try:
            await exit_stack.aclose()
            logger.info(f"Closed connection to tool provider at {self.url}")
        except Exception as e:
            logger.warning(f"Error while closing connection to {self.url}: {e}")
