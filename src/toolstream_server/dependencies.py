"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
routers to inject settings, the Ollama client and the per-app lifecycle
collaborators.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from toolstream_server.config import ToolstreamSettings
from toolstream_server.generation import GenerationInvoker
from toolstream_server.lifecycle import RequestLifecycleController
from toolstream_server.mcp import ToolProviderConnection
from toolstream_server.ollama import OllamaClient
from toolstream_server.responses import ResponseTranslator


@lru_cache
def get_settings() -> ToolstreamSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLSTREAM_ prefix.

    Returns:
        ToolstreamSettings: The application configuration settings.
    """
    return ToolstreamSettings()


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "ollama_client"):
        raise HTTPException(
            status_code=503,
            detail="Ollama client not initialized",
        )
    return request.app.state.ollama_client


def build_connection_factory(settings: ToolstreamSettings):
    """Create a factory producing a fresh tool-provider connection per request."""

    def factory() -> ToolProviderConnection:
        return ToolProviderConnection(
            url=settings.mcp_url,
            transport=settings.mcp_transport,
            headers=settings.mcp_headers,
            connect_timeout=settings.mcp_connect_timeout,
            discovery_timeout=settings.mcp_discovery_timeout,
            tool_call_timeout=settings.tool_call_timeout,
        )

    return factory


def get_lifecycle_controller(request: Request) -> RequestLifecycleController:
    """Get a RequestLifecycleController wired to app configuration.

    Uses settings from app.state rather than the cached get_settings() so
    tests can supply their own isolated settings.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    settings: ToolstreamSettings = request.app.state.settings
    ollama_client = get_ollama_client(request)

    invoker = GenerationInvoker(
        ollama_client=ollama_client,
        model=settings.model,
        max_tool_steps=settings.max_tool_steps,
        stream_idle_timeout=settings.stream_idle_timeout,
    )
    return RequestLifecycleController(
        connection_factory=build_connection_factory(settings),
        invoker=invoker,
        stream_abandon_timeout=settings.stream_abandon_timeout,
    )


def get_response_translator() -> ResponseTranslator:
    """Get the response translator."""
    return ResponseTranslator()
