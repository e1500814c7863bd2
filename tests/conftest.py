"""Pytest configuration and shared fixtures for toolstream-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup and fake tool-provider
connections.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolstream_server import create_app
from toolstream_server.config import ToolstreamSettings
from toolstream_server.mcp import ToolDescriptor, ToolProviderConnection, ToolResult, ToolSet


@pytest.fixture
def test_settings():
    """Create test settings with short timeouts.

    Returns:
        ToolstreamSettings: Settings instance configured for testing.
    """
    return ToolstreamSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        model="llama3.2:latest",
        mcp_url="http://localhost:3001/sse",
        mcp_connect_timeout=1.0,
        mcp_discovery_timeout=1.0,
        tool_call_timeout=1.0,
        stream_idle_timeout=1.0,
        stream_abandon_timeout=5.0,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def _make_tool(name: str, result: str = "ok", description: str = "") -> ToolDescriptor:
    return ToolDescriptor(
        name=name,
        description=description or f"The {name} tool",
        input_schema={
            "type": "object",
            "properties": {"title": {"type": "string"}},
            "required": ["title"],
        },
        invoke=AsyncMock(return_value=ToolResult(content=result)),
    )


def _make_connection(tools: list[ToolDescriptor] | None = None) -> MagicMock:
    connection = MagicMock(spec=ToolProviderConnection)
    connection.url = "http://localhost:3001/sse"
    connection.open = AsyncMock(return_value=connection)
    connection.list_tools = AsyncMock(return_value=ToolSet(tools or []))
    connection.close = AsyncMock(return_value=None)
    return connection


@pytest.fixture
def make_tool():
    """Factory for ToolDescriptors whose invocation handle is an AsyncMock."""
    return _make_tool


@pytest.fixture
def make_connection():
    """Factory for mock ToolProviderConnections that open and list tools."""
    return _make_connection


@pytest.fixture
def mock_connection():
    """A mock tool-provider connection exposing a single add_todo tool."""
    return _make_connection([_make_tool("add_todo", result="Added todo")])
