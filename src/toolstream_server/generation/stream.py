"""One-shot generation stream with an exactly-once completion signal."""

import logging
from typing import AsyncGenerator, AsyncIterator, Awaitable, Callable

from toolstream_server.models.chat import StreamEvent

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[], Awaitable[None]]
StartListener = Callable[[], None]


class GenerationStream:
    """A lazy, finite, non-restartable sequence of stream events.

    The completion callback fires exactly once when the stream terminates,
    whether the source is exhausted, raises, is closed by the consumer, is
    cancelled mid-iteration, or is closed without ever being started.
    """

    def __init__(
        self,
        source: AsyncGenerator[StreamEvent, None],
        on_complete: CompletionCallback | None = None,
    ) -> None:
        self._source = source
        self._on_complete = on_complete
        self._iterator: AsyncGenerator[StreamEvent, None] | None = None
        self._consumed = False
        self._completed = False
        self._start_listeners: list[StartListener] = []

    @property
    def completed(self) -> bool:
        """True once the completion callback has fired."""
        return self._completed

    def add_start_listener(self, listener: StartListener) -> None:
        """Register a callable run once, when the first event is requested.

        From that point on the relay's cleanup guarantees completion fires.
        """
        self._start_listeners.append(listener)

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        if self._consumed:
            raise RuntimeError("GenerationStream can only be iterated once")
        self._consumed = True
        self._iterator = self._relay()
        return self._iterator

    async def _relay(self) -> AsyncGenerator[StreamEvent, None]:
        try:
            listeners, self._start_listeners = self._start_listeners, []
            for listener in listeners:
                listener()
            async for event in self._source:
                yield event
        finally:
            try:
                await self._source.aclose()
            finally:
                await self._complete()

    async def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        if self._on_complete is None:
            return
        try:
            await self._on_complete()
        except Exception as e:
            logger.warning(f"Completion callback raised: {e}")

    async def aclose(self) -> None:
        """Terminate the stream and fire completion if it has not fired yet."""
        self._consumed = True
        try:
            if self._iterator is not None:
                await self._iterator.aclose()
            else:
                await self._source.aclose()
        finally:
            await self._complete()
