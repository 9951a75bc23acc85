"""Pytest configuration for async-autotiling tests."""

import pytest

from autotiling.models import AutotilingConfig
from tests.fixtures.mock_sway import MockSwayConnection, tree_with_focused


@pytest.fixture
def default_config() -> AutotilingConfig:
    """Config with every option at its default."""
    return AutotilingConfig()


@pytest.fixture
def fast_retry_config() -> AutotilingConfig:
    """Config with millisecond reconnect backoff for loop tests."""
    return AutotilingConfig(reconnect_initial_delay=0.001, reconnect_max_delay=0.004)


@pytest.fixture
def tall_window_connection() -> MockSwayConnection:
    """Connection whose focused window is taller than wide (800x1200)."""
    return MockSwayConnection(tree=tree_with_focused(800, 1200))


@pytest.fixture
def wide_window_connection() -> MockSwayConnection:
    """Connection whose focused window is wider than tall (1200x800) in a splitv parent."""
    return MockSwayConnection(tree=tree_with_focused(1200, 800, parent_layout="splitv"))
