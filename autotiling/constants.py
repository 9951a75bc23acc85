"""Shared constants for async-autotiling.

Single source of truth for command strings, defaults and i3/sway tree
vocabulary used across the daemon.
"""

from typing import Final, FrozenSet


class Defaults:
    """Default values for command-line options and reconnect timing."""

    RATIO: Final[float] = 1.0
    RECONNECT_INITIAL_DELAY: Final[float] = 0.5
    RECONNECT_MAX_DELAY: Final[float] = 5.0
    LOG_LEVEL: Final[str] = "INFO"
    SYSLOG_IDENTIFIER: Final[str] = "async-autotiling"


class TreeValues:
    """String values reported by i3/sway GET_TREE."""

    WORKSPACE_TYPE: Final[str] = "workspace"
    FLOATING_CON_TYPE: Final[str] = "floating_con"
    FLOATING_ON: Final[FrozenSet[str]] = frozenset({"auto_on", "user_on"})

    LAYOUT_SPLITH: Final[str] = "splith"
    LAYOUT_SPLITV: Final[str] = "splitv"
    LAYOUT_TABBED: Final[str] = "tabbed"
    LAYOUT_STACKED: Final[str] = "stacked"

    # Window leaves carry one of these types; everything above is structure
    WINDOW_TYPES: Final[FrozenSet[str]] = frozenset({"con", "floating_con"})
