"""Focus event processing.

One processing pass: fetch a fresh tree, locate the focused window, apply the
workspace filter and eligibility gate, pick a split and send it. Every
per-event failure degrades to "no command this time"; only transport errors
escape, because they mean the connection itself is gone.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from i3ipc import aio

from .errors import (
    CommandError,
    FocusedWindowNotFound,
    MalformedTreeError,
    TransportIoError,
)
from .models import AutotilingConfig, Decision, WindowSnapshot
from .services import decide, is_redundant, locate_focused

logger = logging.getLogger(__name__)

# Errors from the socket layer; anything else is a per-event problem.
# A closed socket makes i3ipc return an empty payload, so get_tree fails in
# json decoding (ValueError) rather than with an OSError.
TRANSPORT_ERRORS = (OSError, EOFError, ValueError)


@dataclass
class ProcessingResult:
    """Outcome of one processing pass."""
    decision: Decision
    window: Optional[WindowSnapshot] = None
    command_sent: bool = False
    skipped_reason: Optional[str] = None

    @property
    def command(self) -> Optional[str]:
        """Command that was sent, if any."""
        return self.decision.command if self.command_sent else None


async def run_split_command(conn: aio.Connection, command: str) -> None:
    """Send a split command and check the replies.

    Raises:
        TransportIoError: The socket failed
        CommandError: The window manager rejected the command
    """
    try:
        replies = await conn.command(command)
    except TRANSPORT_ERRORS as e:
        raise TransportIoError("command", str(e) or type(e).__name__) from e

    if not replies:
        # i3ipc answers [] once the socket has closed
        raise TransportIoError("command", "empty reply")

    for reply in replies:
        if not getattr(reply, "success", False):
            raise CommandError(command, getattr(reply, "error", None) or "unknown error")


async def process_focus(
    conn: aio.Connection,
    config: AutotilingConfig,
    reason: str = "focus",
) -> ProcessingResult:
    """Run one decision pass against the current tree.

    Args:
        conn: Connected i3ipc.aio.Connection
        config: Daemon configuration
        reason: What triggered the pass (for logging)

    Returns:
        ProcessingResult describing the decision and whether a command went out

    Raises:
        TransportIoError: get_tree or command failed at the socket level
    """
    try:
        tree = await conn.get_tree()
    except TRANSPORT_ERRORS as e:
        raise TransportIoError("get_tree", str(e) or type(e).__name__) from e

    try:
        window = locate_focused(tree)
    except FocusedWindowNotFound as e:
        logger.debug(f"[{reason}] Nothing to do: {e.message}")
        return ProcessingResult(Decision.NO_ACTION, skipped_reason="not_found")
    except MalformedTreeError as e:
        logger.warning(f"[{reason}] Skipping event: {e.message}", extra={"error": e.to_dict()})
        return ProcessingResult(Decision.NO_ACTION, skipped_reason="malformed_tree")

    decision = decide(window, config)
    if decision is Decision.NO_ACTION:
        return ProcessingResult(decision, window, skipped_reason="ineligible")

    if is_redundant(window, decision):
        logger.debug(
            f"[{reason}] Window {window.id} parent already '{window.parent_layout}', no command"
        )
        return ProcessingResult(decision, window, skipped_reason="already_set")

    command = decision.command
    try:
        await run_split_command(conn, command)
    except CommandError as e:
        logger.error(f"[{reason}] {e.message}", extra={"error": e.to_dict()})
        return ProcessingResult(decision, window, skipped_reason="command_failed")

    logger.info(f"Focus changed -> Next split direction set to '{command}'")
    logger.debug(
        f"Window {window.id} ({window.name or 'untitled'}) {window.width}x{window.height} "
        f"on workspace '{window.workspace_name}', ratio {config.ratio_threshold}"
    )
    return ProcessingResult(decision, window, command_sent=True)
