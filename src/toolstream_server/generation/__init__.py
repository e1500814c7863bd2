"""Streaming generation layer.

This package wraps the generation engine behind an invoker that returns a
one-shot event stream and signals completion exactly once.
"""

from toolstream_server.generation.invoker import GenerationInvoker
from toolstream_server.generation.stream import CompletionCallback, GenerationStream

__all__ = ["CompletionCallback", "GenerationInvoker", "GenerationStream"]
