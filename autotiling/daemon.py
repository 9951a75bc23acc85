"""Main daemon entry point with systemd integration.

This module provides the event loop controller, signal handling and
journald/stderr logging setup.

State machine:
    CONNECTING -> SUBSCRIBED -> (WAITING <-> PROCESSING) -> DISCONNECTED -> CONNECTING
    --once: CONNECTING -> PROCESSING -> STOPPED
"""

import asyncio
import contextlib
import logging
import os
import signal
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

try:
    from systemd import journal, daemon as sd_daemon
    SYSTEMD_AVAILABLE = True
except ImportError:
    SYSTEMD_AVAILABLE = False

from i3ipc import aio
from i3ipc.events import IpcBaseEvent

from .cli import parse_config
from .connection import ConnectionFactory, ResilientSwayConnection
from .constants import Defaults
from .errors import TransportConnectError, TransportIoError
from .handlers import ProcessingResult, process_focus
from .models import AutotilingConfig

logger = logging.getLogger(__name__)

# Queue marker for the pass that runs right after (re)connecting
STARTUP_PASS = object()


class DaemonState(Enum):
    """Event loop controller states."""
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    WAITING = "waiting"
    PROCESSING = "processing"
    DISCONNECTED = "disconnected"
    STOPPED = "stopped"


@dataclass
class EventMetrics:
    """Event processing counters."""

    events_received: int = 0
    events_processed: int = 0
    events_coalesced: int = 0
    events_failed: int = 0
    commands_sent: int = 0
    reconnects: int = 0
    processing_durations_ms: List[float] = field(default_factory=list)

    def record_processed(self, duration_ms: float, result: ProcessingResult) -> None:
        """Record a completed pass with its duration."""
        self.events_processed += 1
        self.processing_durations_ms.append(duration_ms)
        if result.command_sent:
            self.commands_sent += 1

    def get_average_duration_ms(self) -> float:
        """Get average processing duration in milliseconds."""
        if not self.processing_durations_ms:
            return 0.0
        return sum(self.processing_durations_ms) / len(self.processing_durations_ms)

    def to_dict(self) -> dict:
        """Convert metrics to dictionary for reporting."""
        return {
            "events_received": self.events_received,
            "events_processed": self.events_processed,
            "events_coalesced": self.events_coalesced,
            "events_failed": self.events_failed,
            "commands_sent": self.commands_sent,
            "reconnects": self.reconnects,
            "average_duration_ms": round(self.get_average_duration_ms(), 2),
        }


class DaemonHealthMonitor:
    """Sends systemd readiness notifications when running under systemd."""

    def notify_ready(self) -> None:
        """Send READY=1 signal to systemd."""
        if SYSTEMD_AVAILABLE:
            sd_daemon.notify("READY=1")
            logger.info("Sent READY=1 to systemd")
        else:
            logger.debug("Systemd not available, skipping READY notification")

    def notify_stopping(self) -> None:
        """Send STOPPING=1 signal to systemd."""
        if SYSTEMD_AVAILABLE:
            sd_daemon.notify("STOPPING=1")
            logger.info("Sent STOPPING=1 to systemd")


class AutotilingDaemon:
    """Event loop controller."""

    def __init__(
        self,
        config: AutotilingConfig,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        """Initialize daemon.

        Args:
            config: Immutable daemon configuration
            connection_factory: Builds unconnected aio.Connection objects (tests inject mocks)
        """
        self.config = config
        self.shutdown_event = asyncio.Event()
        self.connection = ResilientSwayConnection(
            config, self.shutdown_event, connection_factory
        )
        self.health_monitor = DaemonHealthMonitor()
        self.metrics = EventMetrics()
        self.state = DaemonState.CONNECTING
        self._ready_sent = False

    async def run_once(self) -> ProcessingResult:
        """Connect, run a single processing pass and disconnect.

        Raises:
            TransportConnectError: Could not connect (no retry in this mode)
            TransportIoError: The connection failed during the pass
        """
        self.state = DaemonState.CONNECTING
        conn = await self.connection.connect_once()
        try:
            self.state = DaemonState.PROCESSING
            result = await process_focus(conn, self.config, reason="once")
            if result.command_sent:
                self.metrics.commands_sent += 1
            return result
        finally:
            self.connection.close()
            self.state = DaemonState.STOPPED

    async def run(self) -> None:
        """Run continuously until shutdown_event is set.

        Transport failures never end this loop; the connection is rebuilt
        with backoff and event processing resumes.
        """
        logger.info("Autotiling started, listening for window events...")
        if self.config.restricts_workspaces:
            logger.info(f"Restricted to workspaces: {sorted(self.config.workspaces)}")

        while not self.shutdown_event.is_set():
            self.state = DaemonState.CONNECTING
            try:
                conn = await self.connection.connect_with_retry()
            except TransportConnectError:
                # Only raised without max_attempts when shutdown interrupted the wait
                break

            if self.connection.connect_count > 1:
                self.metrics.reconnects += 1
                logger.info("Reconnected event stream successfully")

            try:
                await self._session(conn)
            except TransportIoError as e:
                if not self.shutdown_event.is_set():
                    logger.warning(f"{e.message}. Attempting to reconnect...")
            else:
                if not self.shutdown_event.is_set():
                    logger.warning("Event stream closed. Attempting to reconnect...")
            finally:
                self.connection.close()

            if not self.shutdown_event.is_set():
                self.state = DaemonState.DISCONNECTED

        self.state = DaemonState.STOPPED

    async def _session(self, conn: aio.Connection) -> None:
        """Serve one connected session until the event stream ends."""
        queue: asyncio.Queue = asyncio.Queue()

        async def on_window_focus(_conn: aio.Connection, event: IpcBaseEvent) -> None:
            self.metrics.events_received += 1
            queue.put_nowait(event)

        await self.connection.subscribe_window_events(on_window_focus)
        self.state = DaemonState.SUBSCRIBED
        if not self._ready_sent:
            self.health_monitor.notify_ready()
            self._ready_sent = True

        queue.put_nowait(STARTUP_PASS)
        consumer = asyncio.create_task(self._consume(conn, queue), name="autotiling-consumer")
        self.state = DaemonState.WAITING
        try:
            await self.connection.main()
        finally:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer

    async def _consume(self, conn: aio.Connection, queue: asyncio.Queue) -> None:
        """Process queued events one at a time, in arrival order.

        Events that piled up while a pass was running are coalesced: each
        pass reads a fresh tree, so one pass covers all of them.
        """
        while True:
            item = await queue.get()
            while not queue.empty():
                item = queue.get_nowait()
                self.metrics.events_coalesced += 1

            reason = "startup" if item is STARTUP_PASS else "focus"
            self.state = DaemonState.PROCESSING
            start_time = time.perf_counter()
            try:
                result = await process_focus(conn, self.config, reason=reason)
            except TransportIoError as e:
                self.metrics.events_failed += 1
                # Ends connection.main(), which sends run() back to CONNECTING
                self.connection.drop(e)
                return
            except Exception as e:
                self.metrics.events_failed += 1
                logger.error(f"Error during auto-tiling: {e}", exc_info=True)
            else:
                duration_ms = (time.perf_counter() - start_time) * 1000
                self.metrics.record_processed(duration_ms, result)
            self.state = DaemonState.WAITING

    def request_shutdown(self) -> None:
        """Ask run() to stop at its next suspension point."""
        self.shutdown_event.set()
        self.connection.drop()

    async def shutdown(self) -> None:
        """Release the connection and report metrics."""
        logger.info("Shutting down autotiling daemon...")
        self.health_monitor.notify_stopping()
        self.connection.close()
        self.state = DaemonState.STOPPED
        logger.info(f"Event metrics: {self.metrics.to_dict()}")

    def setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def shutdown_handler(signum, frame):
            """Handle SIGTERM/SIGINT for graceful shutdown."""
            logger.info(f"Received signal {signum}, initiating shutdown...")
            # Signal handlers run outside the event loop; hop back onto it
            loop.call_soon_threadsafe(self.request_shutdown)

        signal.signal(signal.SIGTERM, shutdown_handler)
        signal.signal(signal.SIGINT, shutdown_handler)


def setup_logging(quiet: bool = False) -> None:
    """Setup logging to systemd journal or stderr.

    Args:
        quiet: Suppress all log output
    """
    log_level = os.environ.get("LOG_LEVEL", Defaults.LOG_LEVEL).upper()

    root_logger = logging.getLogger()
    if quiet:
        root_logger.setLevel(logging.CRITICAL + 1)
        return
    root_logger.setLevel(log_level)

    if SYSTEMD_AVAILABLE and os.environ.get("JOURNAL_STREAM"):
        handler = journal.JournalHandler(SYSLOG_IDENTIFIER=Defaults.SYSLOG_IDENTIFIER)
    else:
        handler = logging.StreamHandler(sys.stderr)

    formatter = logging.Formatter(
        "%(levelname)s [%(name)s] %(message)s"
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logger.debug(f"Logging configured: level={log_level}")


async def main_async(
    config: AutotilingConfig,
    connection_factory: Optional[ConnectionFactory] = None,
) -> int:
    """Async main function.

    Returns:
        Exit code (0 = success, 1 = could not connect or fatal error)
    """
    daemon = AutotilingDaemon(config, connection_factory)

    if config.run_once:
        try:
            await daemon.run_once()
        except (TransportConnectError, TransportIoError) as e:
            logger.error(f"Fatal: {e.message}")
            if e.suggestion:
                logger.error(f"Suggestion: {e.suggestion}")
            return 1
        except Exception as e:
            logger.error(f"Fatal error: {e}", exc_info=True)
            return 1
        return 0

    try:
        daemon.setup_signal_handlers()

        run_task = asyncio.create_task(daemon.run())
        shutdown_task = asyncio.create_task(daemon.shutdown_event.wait())

        # Wait for either run completion or shutdown signal
        done, pending = await asyncio.wait(
            [run_task, shutdown_task], return_when=asyncio.FIRST_COMPLETED
        )

        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if run_task in done and run_task.exception() is not None:
            raise run_task.exception()

        await daemon.shutdown()
        return 0

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    config = parse_config(argv)
    setup_logging(config.quiet)

    logger.debug(f"PID: {os.getpid()}")

    try:
        exit_code = asyncio.run(main_async(config))
        sys.exit(exit_code)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
