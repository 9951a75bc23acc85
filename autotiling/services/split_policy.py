"""
Split orientation policy.

A window whose height exceeds width / ratio is too tall to share horizontally,
so the next window should stack below it (splitv). Everything else splits
side by side (splith). Ratios above 1.0 bias toward splith, below 1.0 toward
splitv; 1.618 (golden ratio) is a common choice.
"""

import logging

from ..constants import TreeValues
from ..models import AutotilingConfig, Decision, WindowSnapshot
from .workspace_filter import is_eligible

logger = logging.getLogger(__name__)


def evaluate(window: WindowSnapshot, ratio_threshold: float) -> Decision:
    """Pick the split orientation for an eligible window.

    Eligibility is the caller's job (see decide()). Comparison is strict, so
    a square window at ratio 1.0 splits horizontally.

    Args:
        window: Focused window snapshot
        ratio_threshold: Positive divisor applied to the width

    Returns:
        SPLIT_VERTICAL or SPLIT_HORIZONTAL, never NO_ACTION

    Raises:
        ValueError: ratio_threshold is not positive
    """
    if ratio_threshold <= 0:
        raise ValueError(f"ratio_threshold must be positive, got {ratio_threshold}")

    if window.height > window.width / ratio_threshold:
        return Decision.SPLIT_VERTICAL
    return Decision.SPLIT_HORIZONTAL


def decide(window: WindowSnapshot, config: AutotilingConfig) -> Decision:
    """Apply the workspace filter and eligibility gate, then evaluate.

    Args:
        window: Focused window snapshot
        config: Daemon configuration

    Returns:
        NO_ACTION for filtered or ineligible windows, else the split decision
    """
    if not is_eligible(window.workspace_name, config.workspaces):
        logger.debug(
            f"Workspace '{window.workspace_name}' not in allow-list, skipping window {window.id}"
        )
        return Decision.NO_ACTION

    if not window.is_eligible(config.excluded_layouts):
        logger.debug(
            f"Window {window.id} ineligible (floating={window.is_floating}, "
            f"fullscreen={window.is_fullscreen}, layout={window.layout_kind.value})"
        )
        return Decision.NO_ACTION

    return evaluate(window, config.ratio_threshold)


def is_redundant(window: WindowSnapshot, decision: Decision) -> bool:
    """True if the parent container already splits the way we would set it.

    Re-sending splitv to a container that is already splitv changes nothing,
    so the command is skipped.
    """
    if decision is Decision.SPLIT_VERTICAL:
        return window.parent_layout == TreeValues.LAYOUT_SPLITV
    if decision is Decision.SPLIT_HORIZONTAL:
        return window.parent_layout == TreeValues.LAYOUT_SPLITH
    return False
