"""Focused window snapshot and split decision models.

A WindowSnapshot is rebuilt from a fresh GET_TREE reply on every focus event
and is never cached across events.
"""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from ..constants import TreeValues


class LayoutKind(Enum):
    """Container layout relevant to split decisions."""
    SPLIT = "split"
    TABBED = "tabbed"
    STACKED = "stacked"

    @classmethod
    def from_layout(cls, layout: Optional[str]) -> "LayoutKind":
        """Map an i3/sway layout string to a LayoutKind.

        splith, splitv, output, dockarea and none all count as SPLIT.
        """
        if layout == TreeValues.LAYOUT_TABBED:
            return cls.TABBED
        if layout == TreeValues.LAYOUT_STACKED:
            return cls.STACKED
        return cls.SPLIT


class Decision(Enum):
    """Outcome of evaluating one focused window."""
    SPLIT_VERTICAL = "splitv"
    SPLIT_HORIZONTAL = "splith"
    NO_ACTION = "none"

    @property
    def command(self) -> Optional[str]:
        """IPC command string for this decision (None for NO_ACTION)."""
        if self is Decision.NO_ACTION:
            return None
        return self.value


class WindowSnapshot(BaseModel):
    """Geometry and layout state of the focused window.

    Immutable after creation (frozen).
    """

    id: int = Field(..., description="Container ID (con_id)")
    width: int = Field(..., gt=0, description="Window width in pixels")
    height: int = Field(..., gt=0, description="Window height in pixels")
    is_floating: bool = Field(False, description="Window is floating")
    layout_kind: LayoutKind = Field(LayoutKind.SPLIT, description="Enclosing container layout")
    is_fullscreen: bool = Field(False, description="Window is fullscreen")
    workspace_name: str = Field(..., description="Name of the owning workspace")
    is_focused: bool = Field(True, description="Window has input focus")
    parent_layout: Optional[str] = Field(
        None, description="Raw layout string of the direct parent container"
    )
    name: Optional[str] = Field(None, description="Window title (logging only)")

    class Config:
        frozen = True

    def is_eligible(self, excluded_layouts: Iterable[LayoutKind]) -> bool:
        """True if this window may receive a split command.

        Args:
            excluded_layouts: Layout kinds that are never acted on

        Returns:
            False for floating or fullscreen windows, or windows inside an
            excluded layout
        """
        if self.is_floating or self.is_fullscreen:
            return False
        return self.layout_kind not in set(excluded_layouts)
