"""Unit tests for a single focus processing pass."""

import json

import pytest

from autotiling.errors import TransportIoError
from autotiling.handlers import process_focus
from autotiling.models import AutotilingConfig, Decision

from tests.fixtures.mock_sway import (
    MockCommandReply,
    MockSwayConnection,
    create_split,
    create_tree,
    create_window,
    create_workspace,
    tree_with_focused,
)


class TestProcessFocus:
    """Test fetch tree -> decide -> command."""

    @pytest.mark.asyncio
    async def test_tall_window_sends_splitv(self, tall_window_connection, default_config):
        result = await process_focus(tall_window_connection, default_config)

        assert result.decision is Decision.SPLIT_VERTICAL
        assert result.command_sent
        assert result.command == "splitv"
        assert tall_window_connection.commands == ["splitv"]

    @pytest.mark.asyncio
    async def test_wide_window_sends_splith(self, wide_window_connection, default_config):
        result = await process_focus(wide_window_connection, default_config)

        assert result.decision is Decision.SPLIT_HORIZONTAL
        assert wide_window_connection.commands == ["splith"]

    @pytest.mark.asyncio
    async def test_fresh_tree_every_pass(self, tall_window_connection, default_config):
        await process_focus(tall_window_connection, default_config)
        await process_focus(tall_window_connection, default_config)

        assert tall_window_connection.get_tree_calls == 2

    @pytest.mark.asyncio
    async def test_parent_already_has_layout(self, default_config):
        """splith is not re-sent to a window whose parent is already splith."""
        conn = MockSwayConnection(tree=tree_with_focused(1200, 800, parent_layout="splith"))

        result = await process_focus(conn, default_config)

        assert result.decision is Decision.SPLIT_HORIZONTAL
        assert not result.command_sent
        assert result.skipped_reason == "already_set"
        assert conn.commands == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tree",
        [
            tree_with_focused(800, 1200, floating="user_on"),
            tree_with_focused(800, 1200, fullscreen_mode=1),
            create_tree(create_workspace("1", create_split("tabbed", create_window(800, 1200, focused=True)))),
            create_tree(create_workspace("1", create_split("stacked", create_window(800, 1200, focused=True)))),
        ],
        ids=["floating", "fullscreen", "tabbed", "stacked"],
    )
    async def test_ineligible_window_gets_no_command(self, tree, default_config):
        conn = MockSwayConnection(tree=tree)

        result = await process_focus(conn, default_config)

        assert result.decision is Decision.NO_ACTION
        assert result.skipped_reason == "ineligible"
        assert conn.commands == []

    @pytest.mark.asyncio
    async def test_workspace_filter(self):
        config = AutotilingConfig(workspaces=frozenset({"1", "dev"}))
        excluded = MockSwayConnection(tree=tree_with_focused(800, 1200, workspace="3"))
        included = MockSwayConnection(tree=tree_with_focused(800, 1200, workspace="dev"))

        assert (await process_focus(excluded, config)).decision is Decision.NO_ACTION
        assert (await process_focus(included, config)).decision is Decision.SPLIT_VERTICAL
        assert excluded.commands == []
        assert included.commands == ["splitv"]

    @pytest.mark.asyncio
    async def test_nothing_focused(self, default_config):
        conn = MockSwayConnection(tree=create_tree(create_workspace("1", create_window())))

        result = await process_focus(conn, default_config)

        assert result.decision is Decision.NO_ACTION
        assert result.skipped_reason == "not_found"
        assert conn.commands == []

    @pytest.mark.asyncio
    async def test_malformed_tree_is_recoverable(self, default_config):
        conn = MockSwayConnection(tree=tree_with_focused(800, 0))

        result = await process_focus(conn, default_config)

        assert result.decision is Decision.NO_ACTION
        assert result.skipped_reason == "malformed_tree"

    @pytest.mark.asyncio
    async def test_rejected_command_is_logged_not_raised(self, tall_window_connection, default_config, caplog):
        tall_window_connection.command_replies = [MockCommandReply(success=False, error="No container")]

        result = await process_focus(tall_window_connection, default_config)

        assert result.decision is Decision.SPLIT_VERTICAL
        assert not result.command_sent
        assert result.skipped_reason == "command_failed"
        assert "No container" in caplog.text

    @pytest.mark.asyncio
    async def test_get_tree_socket_error_raises_transport_error(self, tall_window_connection, default_config):
        tall_window_connection.get_tree_error = ConnectionResetError("socket closed")

        with pytest.raises(TransportIoError):
            await process_focus(tall_window_connection, default_config)

    @pytest.mark.asyncio
    async def test_command_socket_error_raises_transport_error(self, tall_window_connection, default_config):
        tall_window_connection.command_error = BrokenPipeError("broken pipe")

        with pytest.raises(TransportIoError):
            await process_focus(tall_window_connection, default_config)

    @pytest.mark.asyncio
    async def test_empty_tree_payload_raises_transport_error(self, tall_window_connection, default_config):
        """A closed socket gives get_tree an empty payload to decode."""
        tall_window_connection.get_tree_error = json.JSONDecodeError("Expecting value", "", 0)

        with pytest.raises(TransportIoError) as exc_info:
            await process_focus(tall_window_connection, default_config)

        assert exc_info.value.context["operation"] == "get_tree"

    @pytest.mark.asyncio
    async def test_empty_command_reply_raises_transport_error(self, tall_window_connection, default_config):
        """No replies at all means the socket closed before the command ran."""
        tall_window_connection.command_replies = []

        with pytest.raises(TransportIoError) as exc_info:
            await process_focus(tall_window_connection, default_config)

        assert exc_info.value.context == {"operation": "command", "reason": "empty reply"}
