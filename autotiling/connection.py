"""Sway/i3 IPC connection manager with resilient reconnection.

Opens the IPC connection, subscribes to window events and re-establishes the
connection with capped exponential backoff after the window manager goes away.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from i3ipc import Event, aio
from i3ipc.events import IpcBaseEvent

from .errors import TransportConnectError, TransportIoError
from .models import AutotilingConfig

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], aio.Connection]


class ResilientSwayConnection:
    """Manages the IPC connection with automatic reconnection."""

    def __init__(
        self,
        config: AutotilingConfig,
        shutdown_event: Optional[asyncio.Event] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        """Initialize connection manager.

        Args:
            config: Daemon configuration (socket path and backoff timing)
            shutdown_event: Set when the daemon is stopping; aborts retry waits
            connection_factory: Builds an unconnected aio.Connection (tests inject mocks)
        """
        self.config = config
        self.shutdown_event = shutdown_event or asyncio.Event()
        self.connection_factory = connection_factory or self._default_factory
        self.conn: Optional[aio.Connection] = None
        self.reconnect_delay = config.reconnect_initial_delay
        self.connect_count = 0

    def _default_factory(self) -> aio.Connection:
        # auto_reconnect stays off: a lost socket must end main() so the
        # supervisor can rebuild the subscription itself
        return aio.Connection(socket_path=self.config.socket_path, auto_reconnect=False)

    @property
    def is_connected(self) -> bool:
        """True if an IPC connection is active."""
        return self.conn is not None and not self.shutdown_event.is_set()

    async def connect_once(self) -> aio.Connection:
        """Make a single connection attempt.

        Returns:
            Connected i3ipc.aio.Connection

        Raises:
            TransportConnectError: Socket could not be opened
        """
        try:
            conn = await self.connection_factory().connect()
        except Exception as e:
            raise TransportConnectError(str(e) or type(e).__name__, self.config.socket_path) from e

        try:
            version = await conn.get_version()
        except Exception as e:
            # connect() already registered the event reader; release it
            conn.main_quit()
            raise TransportConnectError(str(e) or type(e).__name__, self.config.socket_path) from e

        logger.info(f"Connected to window manager version {version.human_readable}")
        self.conn = conn
        self.connect_count += 1
        return conn

    async def connect_with_retry(self, max_attempts: Optional[int] = None) -> aio.Connection:
        """Connect with exponential backoff retry.

        Args:
            max_attempts: Maximum connection attempts (None = retry forever)

        Returns:
            Connected i3ipc.aio.Connection

        Raises:
            TransportConnectError: Attempts exhausted, or shutdown requested while waiting
        """
        attempt = 0
        delay = self.reconnect_delay

        while max_attempts is None or attempt < max_attempts:
            attempt += 1
            limit = f"/{max_attempts}" if max_attempts is not None else ""
            logger.info(f"Attempting to connect to window manager (attempt {attempt}{limit})")

            try:
                conn = await self.connect_once()
            except TransportConnectError as e:
                logger.warning(f"Connection attempt {attempt} failed: {e.message}")
            else:
                # Reset reconnect delay on successful connection
                self.reconnect_delay = self.config.reconnect_initial_delay
                return conn

            if max_attempts is not None and attempt >= max_attempts:
                break

            logger.debug(f"Waiting {delay:.1f}s before retry...")
            if await self._wait_or_shutdown(delay):
                raise TransportConnectError("shutdown requested while reconnecting")

            # Exponential backoff: double delay up to the configured cap
            delay = min(delay * 2, self.config.reconnect_max_delay)

        raise TransportConnectError(f"failed after {attempt} attempts", self.config.socket_path)

    async def _wait_or_shutdown(self, delay: float) -> bool:
        """Sleep for delay seconds; return True early if shutdown was requested."""
        try:
            await asyncio.wait_for(self.shutdown_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def subscribe_window_events(
        self,
        handler: Callable[[aio.Connection, IpcBaseEvent], Awaitable[None]],
    ) -> None:
        """Register a window::focus handler and subscribe to window events.

        Raises:
            TransportIoError: Subscription request failed
        """
        if not self.conn:
            raise TransportIoError("subscribe", "not connected")

        self.conn.on(Event.WINDOW_FOCUS, handler)
        try:
            # on() schedules the subscription in the background; awaiting it
            # here makes a failure visible before we report ready
            await self.conn.subscribe([Event.WINDOW])
        except Exception as e:
            raise TransportIoError("subscribe", str(e) or type(e).__name__) from e

        logger.info("Subscribed to window focus events")

    async def main(self) -> None:
        """Wait on the event stream until the connection closes.

        Returns normally after main_quit() without an error.

        Raises:
            TransportIoError: The socket closed or errored
        """
        if not self.conn:
            raise TransportIoError("main", "not connected")

        try:
            await self.conn.main()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise TransportIoError("event stream", str(e) or type(e).__name__) from e

    def drop(self, error: Optional[Exception] = None) -> None:
        """Force the event stream to end so main() returns.

        Args:
            error: Raised from main() when given, so the caller sees a disconnect
        """
        if self.conn:
            try:
                self.conn.main_quit(_error=error)
            except Exception as e:
                logger.debug(f"main_quit failed: {e}")

    def close(self) -> None:
        """Close the IPC connection."""
        if self.conn:
            self.drop()
            # i3ipc has no explicit close; sockets go with the object
            self.conn = None
            logger.info("Closed IPC connection")
