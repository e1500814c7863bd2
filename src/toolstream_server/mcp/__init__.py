"""Tool-provider (MCP) integration layer.

This package manages the per-request connection to an external MCP server
and the tools discovered on it.
"""

from toolstream_server.mcp.connection import ToolProviderConnection
from toolstream_server.mcp.types import (
    ConnectionState,
    ToolDescriptor,
    ToolResult,
    ToolSet,
)

__all__ = [
    "ConnectionState",
    "ToolDescriptor",
    "ToolProviderConnection",
    "ToolResult",
    "ToolSet",
]
