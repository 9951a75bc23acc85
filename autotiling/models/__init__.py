"""
Pydantic models for the autotiling daemon.

- WindowSnapshot: focused window geometry and layout state, one per event
- Decision: split outcome for one window
- AutotilingConfig: immutable process-lifetime settings
"""

from .window import Decision, LayoutKind, WindowSnapshot
from .config import AutotilingConfig

__all__ = [
    "AutotilingConfig",
    "Decision",
    "LayoutKind",
    "WindowSnapshot",
]
