"""Exception hierarchy for toolstream-server.

Each exception corresponds to one stage of the request lifecycle so the
controller can decide the outcome at the point of catch.
"""


class ToolstreamError(Exception):
    """Base class for all toolstream-server errors."""


class ToolProviderConnectionError(ToolstreamError):
    """The tool-provider session could not be established."""


class DiscoveryError(ToolstreamError):
    """The session is open but listing its tools failed."""


class ToolCallError(ToolstreamError):
    """A tool invocation failed at the transport level."""


class ConnectionClosedError(ToolstreamError):
    """An operation other than close() was attempted on a closed connection."""


class GenerationError(ToolstreamError):
    """The generation engine rejected the call before a stream existed."""
