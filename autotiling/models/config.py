"""Daemon configuration model.

Built once at startup from command-line arguments and passed explicitly to
the daemon. Never mutated afterwards.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import Defaults
from .window import LayoutKind


class AutotilingConfig(BaseModel):
    """Process-lifetime settings for the autotiling daemon."""

    ratio_threshold: float = Field(
        default=Defaults.RATIO,
        gt=0.0,
        description="Split vertically when height > width / ratio_threshold",
    )
    workspaces: frozenset[str] = Field(
        default_factory=frozenset,
        description="Workspace names to act on (empty = all workspaces)",
    )
    run_once: bool = Field(default=False, description="Evaluate once and exit")
    quiet: bool = Field(default=False, description="Suppress all log output")
    excluded_layouts: frozenset[LayoutKind] = Field(
        default=frozenset({LayoutKind.TABBED, LayoutKind.STACKED}),
        description="Container layouts that are never acted on",
    )
    reconnect_initial_delay: float = Field(default=Defaults.RECONNECT_INITIAL_DELAY, gt=0.0)
    reconnect_max_delay: float = Field(default=Defaults.RECONNECT_MAX_DELAY, gt=0.0)
    socket_path: Optional[str] = Field(
        default=None,
        description="Explicit IPC socket (default: SWAYSOCK/I3SOCK discovery)",
    )

    class Config:
        frozen = True

    @field_validator("workspaces")
    @classmethod
    def drop_empty_names(cls, v: frozenset[str]) -> frozenset[str]:
        """Empty workspace names can never match and are dropped."""
        return frozenset(name for name in v if name != "")

    @model_validator(mode="after")
    def check_delays(self) -> "AutotilingConfig":
        """Reconnect backoff must not start above its cap."""
        if self.reconnect_initial_delay > self.reconnect_max_delay:
            raise ValueError(
                "reconnect_initial_delay must not exceed reconnect_max_delay"
            )
        return self

    @property
    def restricts_workspaces(self) -> bool:
        """True when a workspace allow-list is in effect."""
        return bool(self.workspaces)
