"""Ollama client wrapper and integration layer.

This package provides the async client used as the generation engine.
All Ollama interactions are async and use streaming.
"""

from toolstream_server.ollama.client import OllamaClient

__all__ = ["OllamaClient"]
