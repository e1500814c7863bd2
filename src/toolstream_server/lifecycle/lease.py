"""Scoped ownership of a tool-provider connection.

A ConnectionLease is the single teardown path for one request's connection.
Used as an async context manager it releases the connection on every exit
from the block unless ownership was handed off to a running stream, in
which case the stream's completion callback (or the abandonment watchdog)
releases it instead.
"""

import asyncio
import logging
from types import TracebackType

from toolstream_server.lifecycle.outcome import FailureKind
from toolstream_server.mcp.connection import ToolProviderConnection

logger = logging.getLogger(__name__)


class ConnectionLease:
    """Owns one ToolProviderConnection and closes it at most once.

    Attributes:
        request_id: Identifier of the request, used in log messages
        connection: The leased connection, None until attached
    """

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        self.connection: ToolProviderConnection | None = None
        self._handed_off = False
        self._released = False
        self._watchdog: asyncio.Task | None = None
        self._close_task: asyncio.Task | None = None

    @property
    def released(self) -> bool:
        return self._released

    def attach(self, connection: ToolProviderConnection) -> ToolProviderConnection:
        """Take ownership of a connection."""
        if self.connection is not None:
            raise RuntimeError("A connection is already attached to this lease")
        self.connection = connection
        return connection

    def hand_off(self, abandon_timeout: float = 0) -> None:
        """Transfer release responsibility to a running stream.

        After this the context manager no longer releases on exit. If
        abandon_timeout is positive, a watchdog releases the connection once
        that many seconds pass without the stream being started or release()
        being called. Call disarm() when consumption begins.
        """
        self._handed_off = True
        if abandon_timeout > 0 and not self._released:
            self._watchdog = asyncio.create_task(self._expire(abandon_timeout))

    def disarm(self) -> None:
        """Cancel the abandonment watchdog; release is left to the stream."""
        watchdog, self._watchdog = self._watchdog, None
        if watchdog is not None and watchdog is not asyncio.current_task():
            watchdog.cancel()
            logger.debug(f"[{self.request_id}] Abandonment watchdog disarmed")

    async def _expire(self, timeout: float) -> None:
        await asyncio.sleep(timeout)
        logger.warning(
            f"[{self.request_id}] Stream was not started within {timeout:g}s, "
            f"releasing tool-provider connection"
        )
        await self.release()

    async def release(self) -> None:
        """Close the connection if it has not been closed yet.

        Idempotent and never raises Exception: errors from closing are logged
        as cleanup failures and swallowed. The close itself is shielded, so a
        release interrupted by cancellation still finishes in the background.
        """
        if self._released:
            return
        self._released = True

        self.disarm()

        if self.connection is None:
            logger.debug(f"[{self.request_id}] Lease released with no connection")
            return

        self._close_task = asyncio.ensure_future(self._close(self.connection))
        await asyncio.shield(self._close_task)

    async def _close(self, connection: ToolProviderConnection) -> None:
        try:
            await connection.close()
            logger.debug(f"[{self.request_id}] Tool-provider connection released")
        except Exception as e:
            logger.warning(
                f"[{self.request_id}] stage={FailureKind.CLEANUP.value} "
                f"Error closing tool-provider connection: {e}"
            )

    async def __aenter__(self) -> "ConnectionLease":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self._handed_off:
            await self.release()
