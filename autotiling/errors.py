"""
Error types for async-autotiling.

Transport errors end a connection: they are fatal in --once mode and trigger
a reconnect in continuous mode. Everything else is scoped to a single focus
event and only degrades that event to a no-op.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Error codes for async-autotiling.

    - 1400-1499: window manager IPC errors
    - 1500-1599: per-event tree and command errors
    """

    # IPC transport errors (1400-1499)
    WM_NOT_RUNNING = 1400
    WM_IPC_FAILED = 1401

    # Per-event errors (1500-1599)
    FOCUSED_WINDOW_NOT_FOUND = 1500
    MALFORMED_TREE = 1501
    COMMAND_FAILED = 1502


class AutotilingError(Exception):
    """Base exception for autotiling errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize autotiling error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for structured logging.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class TransportConnectError(AutotilingError):
    """The window manager IPC socket could not be opened."""

    def __init__(self, reason: str, socket_path: Optional[str] = None):
        """
        Initialize connect error.

        Args:
            reason: Reason for connection failure
            socket_path: Socket path that was tried, if known
        """
        context = {"reason": reason}
        if socket_path:
            context["socket_path"] = socket_path

        super().__init__(
            code=ErrorCode.WM_NOT_RUNNING,
            message=f"Cannot connect to window manager IPC: {reason}",
            suggestion="Check that sway/i3 is running and SWAYSOCK or I3SOCK is set",
            context=context
        )


class TransportIoError(AutotilingError):
    """An established IPC session failed while reading or writing."""

    def __init__(self, operation: str, reason: str):
        """
        Initialize IPC I/O error.

        Args:
            operation: IPC request that failed (e.g., "get_tree", "command")
            reason: Reason for failure
        """
        super().__init__(
            code=ErrorCode.WM_IPC_FAILED,
            message=f"IPC {operation} failed: {reason}",
            context={"operation": operation, "reason": reason}
        )


class FocusedWindowNotFound(AutotilingError):
    """No window is focused in the current tree."""

    def __init__(self, reason: str = "no focused window in tree"):
        super().__init__(
            code=ErrorCode.FOCUSED_WINDOW_NOT_FOUND,
            message=reason,
        )


class MalformedTreeError(AutotilingError):
    """The tree snapshot is missing data needed for a decision."""

    def __init__(self, node_id: Any, reason: str):
        super().__init__(
            code=ErrorCode.MALFORMED_TREE,
            message=f"Malformed tree node {node_id}: {reason}",
            context={"node_id": node_id, "reason": reason}
        )


class CommandError(AutotilingError):
    """The window manager rejected a layout command."""

    def __init__(self, command: str, reason: str):
        """
        Initialize command error.

        Args:
            command: Command string that was sent
            reason: Error reported by the window manager
        """
        super().__init__(
            code=ErrorCode.COMMAND_FAILED,
            message=f"Command '{command}' failed: {reason}",
            suggestion="The next focus event will re-evaluate the layout",
            context={"command": command, "reason": reason}
        )
