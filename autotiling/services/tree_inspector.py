"""
Tree inspection for the focused window.

Walks a GET_TREE snapshot with an explicit stack. The owning workspace name,
the parent's layout and whether we are inside a floating subtree are carried
down the walk, so no parent back-pointers are needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional

from ..constants import TreeValues
from ..errors import FocusedWindowNotFound, MalformedTreeError
from ..models import LayoutKind, WindowSnapshot

if TYPE_CHECKING:
    from i3ipc.aio import Con

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """One pending node in the depth-first walk."""
    node: Any
    depth: int
    workspace_name: Optional[str]
    parent_layout: Optional[str]
    in_floating: bool


def is_fullscreen(node: Any) -> bool:
    """True if the container is fullscreen.

    i3 and sway both report fullscreen_mode (0 = none, 1 = output, 2 = global).
    Some sway versions leave fullscreen_mode at 0 on a fullscreen child but
    report a percent above 1.0, so that is checked as well.
    """
    if getattr(node, "fullscreen_mode", 0):
        return True
    percent = getattr(node, "percent", None)
    return percent is not None and percent > 1.0


def is_floating(node: Any, in_floating: bool) -> bool:
    """True if the container floats.

    Args:
        node: i3ipc Con
        in_floating: Node was reached through a floating_nodes list
    """
    if in_floating:
        return True
    if getattr(node, "type", None) == TreeValues.FLOATING_CON_TYPE:
        return True
    return getattr(node, "floating", None) in TreeValues.FLOATING_ON


def _children(frame: _Frame) -> List[_Frame]:
    node = frame.node
    workspace_name = frame.workspace_name
    if getattr(node, "type", None) == TreeValues.WORKSPACE_TYPE:
        workspace_name = getattr(node, "name", None)

    layout = getattr(node, "layout", None)
    children = [
        _Frame(child, frame.depth + 1, workspace_name, layout, frame.in_floating)
        for child in (getattr(node, "nodes", None) or [])
    ]
    children.extend(
        _Frame(child, frame.depth + 1, workspace_name, layout, True)
        for child in (getattr(node, "floating_nodes", None) or [])
    )
    return children


def find_focused_frame(tree: Con) -> Optional[_Frame]:
    """Find the deepest focused window container in the tree.

    Args:
        tree: Root container from GET_TREE

    Returns:
        Frame for the focused container, or None if nothing is focused
    """
    best: Optional[_Frame] = None
    stack = [_Frame(tree, 0, None, None, False)]

    while stack:
        frame = stack.pop()
        node = frame.node
        if (
            getattr(node, "focused", False)
            and getattr(node, "type", None) in TreeValues.WINDOW_TYPES
            and (best is None or frame.depth > best.depth)
        ):
            best = frame
        stack.extend(_children(frame))

    return best


def _layout_kind(frame: _Frame) -> LayoutKind:
    # i3 reports tabbed/stacked on the container, not on its children
    parent_kind = LayoutKind.from_layout(frame.parent_layout)
    if parent_kind is not LayoutKind.SPLIT:
        return parent_kind
    return LayoutKind.from_layout(getattr(frame.node, "layout", None))


def locate_focused(tree: Con) -> WindowSnapshot:
    """Build a WindowSnapshot for the focused window.

    Args:
        tree: Root container from GET_TREE

    Returns:
        Snapshot of the focused window

    Raises:
        FocusedWindowNotFound: Nothing is focused, or focus is on an empty workspace
        MalformedTreeError: Focused node lacks geometry or a workspace
    """
    if tree is None:
        raise FocusedWindowNotFound("empty tree")

    frame = find_focused_frame(tree)
    if frame is None:
        raise FocusedWindowNotFound()

    node = frame.node
    node_id = getattr(node, "id", None)
    rect = getattr(node, "rect", None)
    if rect is None:
        raise MalformedTreeError(node_id, "missing rect")

    width = getattr(rect, "width", None)
    height = getattr(rect, "height", None)
    if not isinstance(width, int) or not isinstance(height, int):
        raise MalformedTreeError(node_id, f"non-integer geometry {width}x{height}")
    if width <= 0 or height <= 0:
        raise MalformedTreeError(node_id, f"non-positive geometry {width}x{height}")

    if frame.workspace_name is None:
        raise MalformedTreeError(node_id, "no workspace ancestor")

    snapshot = WindowSnapshot(
        id=node_id if isinstance(node_id, int) else 0,
        width=width,
        height=height,
        is_floating=is_floating(node, frame.in_floating),
        layout_kind=_layout_kind(frame),
        is_fullscreen=is_fullscreen(node),
        workspace_name=str(frame.workspace_name),
        is_focused=True,
        parent_layout=frame.parent_layout,
        name=getattr(node, "name", None),
    )
    logger.debug(
        f"Focused window {snapshot.id} on workspace '{snapshot.workspace_name}': "
        f"{width}x{height}, layout={snapshot.layout_kind.value}, "
        f"floating={snapshot.is_floating}, fullscreen={snapshot.is_fullscreen}"
    )
    return snapshot
