"""Type definitions for tool-provider integration.

This module contains the dataclasses used to represent tools discovered on
a tool provider and the results of invoking them.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable


class ConnectionState(str, Enum):
    """Lifecycle states of a ToolProviderConnection."""

    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class ToolResult:
    """Result of a single tool invocation.

    Attributes:
        content: Text content returned by the tool
        is_error: True if the provider reported the call as failed
    """

    content: str
    is_error: bool = False


@dataclass
class ToolDescriptor:
    """A callable tool exposed by the tool provider.

    Attributes:
        name: Unique tool name
        description: Human-readable description for the model
        input_schema: JSON schema of the tool arguments
        invoke: Invocation handle bound to the connection the tool came from
    """

    name: str
    description: str
    input_schema: dict[str, Any]
    invoke: Callable[[dict[str, Any]], Awaitable[ToolResult]] = field(repr=False)

    def to_ollama_tool(self) -> dict[str, Any]:
        """Render this tool in Ollama's function-tool format."""
        parameters = dict(self.input_schema) if self.input_schema else {}
        parameters.setdefault("type", "object")
        parameters.setdefault("properties", {})
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


class ToolSet(Mapping[str, ToolDescriptor]):
    """Point-in-time snapshot of the tools exposed by a provider.

    Maps tool name to descriptor. A ToolSet must not be used after the
    connection it was discovered on has closed; invoking a tool from a stale
    set raises ConnectionClosedError.
    """

    def __init__(self, tools: list[ToolDescriptor] | None = None) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        for tool in tools or []:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def __getitem__(self, name: str) -> ToolDescriptor:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"ToolSet({list(self._tools)})"

    def to_ollama_tools(self) -> list[dict[str, Any]]:
        """Render every tool in Ollama's function-tool format."""
        return [tool.to_ollama_tool() for tool in self._tools.values()]
