"""Unit tests for locating the focused window in a GET_TREE snapshot."""

import pytest

from autotiling.errors import FocusedWindowNotFound, MalformedTreeError
from autotiling.models import LayoutKind
from autotiling.services.tree_inspector import locate_focused

from tests.fixtures.mock_sway import (
    MockContainer,
    MockRect,
    create_split,
    create_tree,
    create_window,
    create_workspace,
    tree_with_focused,
)


class TestLocateFocused:
    """Test focused window extraction."""

    def test_geometry_and_workspace(self):
        tree = tree_with_focused(800, 1200, workspace="dev")
        window = locate_focused(tree)

        assert window.width == 800
        assert window.height == 1200
        assert window.workspace_name == "dev"
        assert window.is_focused
        assert not window.is_floating
        assert not window.is_fullscreen
        assert window.layout_kind is LayoutKind.SPLIT
        assert window.parent_layout == "splith"

    def test_workspace_found_through_nested_containers(self):
        focused = create_window(600, 900, focused=True)
        nested = create_split("splitv", create_window(), create_split("splith", focused))
        tree = create_tree(
            create_workspace("1", create_window()),
            create_workspace("Web Browsing", nested),
        )

        window = locate_focused(tree)

        assert window.id == focused.id
        assert window.workspace_name == "Web Browsing"
        assert window.parent_layout == "splith"

    def test_deepest_focused_node_wins(self):
        """Focus reported on a container and its child resolves to the child."""
        leaf = create_window(300, 700, focused=True)
        container = create_split("splitv", leaf, focused=True)
        tree = create_tree(create_workspace("1", container))

        assert locate_focused(tree).id == leaf.id

    def test_tabbed_parent(self):
        focused = create_window(800, 1200, focused=True)
        tree = create_tree(create_workspace("1", create_split("tabbed", focused, create_window())))

        assert locate_focused(tree).layout_kind is LayoutKind.TABBED

    def test_stacked_parent(self):
        focused = create_window(800, 1200, focused=True)
        tree = create_tree(create_workspace("1", create_split("stacked", focused)))

        assert locate_focused(tree).layout_kind is LayoutKind.STACKED

    def test_window_in_floating_nodes_is_floating(self):
        """Sway puts floating windows directly in workspace.floating_nodes."""
        floater = create_window(400, 300, focused=True)
        tree = create_tree(create_workspace("1", create_window(), floating=[floater]))

        window = locate_focused(tree)

        assert window.is_floating
        assert window.workspace_name == "1"

    def test_i3_floating_con_wrapper(self):
        """i3 wraps floating windows in a floating_con with floating=user_on."""
        inner = create_window(400, 300, focused=True, floating="user_on")
        wrapper = MockContainer(type="floating_con", nodes=[inner])
        tree = create_tree(create_workspace("1", floating=[wrapper]))

        assert locate_focused(tree).is_floating

    def test_floating_flag_alone(self):
        tree = tree_with_focused(800, 600, floating="auto_on")
        assert locate_focused(tree).is_floating

    def test_fullscreen_mode(self):
        tree = tree_with_focused(1920, 1080, fullscreen_mode=1)
        assert locate_focused(tree).is_fullscreen

    def test_fullscreen_percent(self):
        tree = tree_with_focused(1920, 1080, percent=1.5)
        assert locate_focused(tree).is_fullscreen

    def test_numeric_workspace_name_stays_a_string(self):
        tree = tree_with_focused(800, 600, workspace="3")
        assert locate_focused(tree).workspace_name == "3"


class TestNotFound:
    """Test recoverable not-found conditions."""

    def test_nothing_focused(self):
        tree = create_tree(create_workspace("1", create_window(), create_window()))
        with pytest.raises(FocusedWindowNotFound):
            locate_focused(tree)

    def test_empty_tree(self):
        with pytest.raises(FocusedWindowNotFound):
            locate_focused(None)

    def test_focused_empty_workspace(self):
        tree = create_tree(create_workspace("2", focused=True))
        with pytest.raises(FocusedWindowNotFound):
            locate_focused(tree)


class TestMalformedTree:
    """Test malformed snapshots surface as per-event errors."""

    def test_missing_rect(self):
        focused = create_window(focused=True)
        focused.rect = None
        tree = create_tree(create_workspace("1", focused))
        with pytest.raises(MalformedTreeError):
            locate_focused(tree)

    def test_zero_size(self):
        tree = tree_with_focused(0, 600)
        with pytest.raises(MalformedTreeError):
            locate_focused(tree)

    def test_no_workspace_ancestor(self):
        orphan = MockContainer(name="orphan", focused=True, rect=MockRect(width=100, height=100))
        tree = create_tree()
        tree.nodes.append(orphan)
        with pytest.raises(MalformedTreeError):
            locate_focused(tree)
