"""Workspace allow-list filtering.

Names are compared exactly as the window manager reports them: no case
folding, no whitespace trimming, no integer parsing. Workspace "01" does not
match "1".
"""

from typing import Iterable, Optional


def is_eligible(workspace_name: str, allowlist: Optional[Iterable[str]]) -> bool:
    """Check whether a workspace passes the allow-list.

    Args:
        workspace_name: Workspace name from the tree (e.g. "1", "dev", "Web Browsing")
        allowlist: Allowed workspace names; None or empty allows every workspace

    Returns:
        True if the policy may act on this workspace
    """
    if not allowlist:
        return True
    return workspace_name in set(allowlist)
