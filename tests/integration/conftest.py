"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that replace the
Ollama client and the tool-provider connection, so API tests exercise the
full request lifecycle without external services.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    """
    with patch("toolstream_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True

        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture(autouse=True)
def mock_connection_class(mock_connection):
    """Make every request's tool-provider connection the mock_connection fixture."""
    with patch("toolstream_server.dependencies.ToolProviderConnection") as connection_class:
        connection_class.return_value = mock_connection
        yield connection_class
