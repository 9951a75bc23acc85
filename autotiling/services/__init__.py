"""Decision services: tree inspection, workspace filtering and split policy."""

from .tree_inspector import locate_focused
from .workspace_filter import is_eligible
from .split_policy import decide, evaluate, is_redundant

__all__ = [
    "decide",
    "evaluate",
    "is_eligible",
    "is_redundant",
    "locate_focused",
]
