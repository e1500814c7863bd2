"""Request outcomes surfaced by the lifecycle controller.

Each outcome is decided at the point where its failure is caught; the
response translator only dispatches on the variant.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from toolstream_server.generation.stream import GenerationStream


class FailureKind(str, Enum):
    """Lifecycle stage a failure belongs to.

    CLEANUP is only ever logged; it is never surfaced to the caller.
    """

    CONNECTION = "connect"
    DISCOVERY = "discover"
    GENERATION = "generate"
    CLEANUP = "cleanup"


@dataclass(frozen=True)
class StreamedSuccess:
    """Generation started; the stream is handed to the caller."""

    stream: GenerationStream


@dataclass(frozen=True)
class RequestFailure:
    """Base for failure outcomes; reason is the caller-visible message."""

    reason: str

    kind: ClassVar[FailureKind]


@dataclass(frozen=True)
class ConnectionFailure(RequestFailure):
    """The tool-provider session could not be established."""

    kind: ClassVar[FailureKind] = FailureKind.CONNECTION


@dataclass(frozen=True)
class DiscoveryFailure(RequestFailure):
    """The session opened but tool listing failed."""

    kind: ClassVar[FailureKind] = FailureKind.DISCOVERY


@dataclass(frozen=True)
class GenerationFailure(RequestFailure):
    """The generation engine rejected the call."""

    kind: ClassVar[FailureKind] = FailureKind.GENERATION


RequestOutcome = StreamedSuccess | ConnectionFailure | DiscoveryFailure | GenerationFailure
