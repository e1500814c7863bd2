"""Request lifecycle orchestration.

This package sequences connect -> discover -> generate for each chat request
and guarantees the tool-provider connection is closed exactly once.
"""

from toolstream_server.lifecycle.controller import RequestLifecycleController
from toolstream_server.lifecycle.lease import ConnectionLease
from toolstream_server.lifecycle.outcome import (
    ConnectionFailure,
    DiscoveryFailure,
    FailureKind,
    GenerationFailure,
    RequestFailure,
    RequestOutcome,
    StreamedSuccess,
)

__all__ = [
    "ConnectionFailure",
    "ConnectionLease",
    "DiscoveryFailure",
    "FailureKind",
    "GenerationFailure",
    "RequestFailure",
    "RequestLifecycleController",
    "RequestOutcome",
    "StreamedSuccess",
]
