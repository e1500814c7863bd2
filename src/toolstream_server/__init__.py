"""toolstream-server: chat streaming server with MCP tool calling via Ollama.

This package bridges chat requests to streaming Ollama generations while
delegating tool invocation to an external MCP tool provider that is
connected to, queried and closed once per request.
"""

__version__ = "0.1.0"

from toolstream_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
