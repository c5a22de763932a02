# tests/conftest.py
"""Pytest configuration with shared fixtures for the actionhistory tests."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from actionhistory.core.Action import Action
from actionhistory.core.ActionHistoryManager import ActionHistoryManager
from tests.stubs import AsyncStubDocument, StubDocument


@pytest.fixture
def mock_config() -> dict[str, dict[str, Any]]:
    """Provide a baseline configuration with a small history.

    Returns:
        dict[str, dict[str, Any]]: Configuration dictionary.
    """
    return {
        "history": {"max_history_size": 5},
        "logging": {"log_to_console": False},
    }


@pytest.fixture
def manager() -> ActionHistoryManager:
    """A manager with default settings."""
    return ActionHistoryManager()


@pytest.fixture
def document() -> StubDocument:
    return StubDocument()


@pytest.fixture
def async_document() -> AsyncStubDocument:
    return AsyncStubDocument()


@pytest.fixture
def make_action() -> Callable[[str], Action]:
    """Factory for actions whose closures are MagicMocks.

    Returns:
        Callable[[str], Action]: Builds an action with the given id; the mocks
        are reachable as ``action.do`` and ``action.revert``.
    """

    def _make(action_id: str, **kwargs: Any) -> Action:
        return Action(
            id=action_id,
            description=f"Action {action_id}",
            do=MagicMock(name=f"execute_{action_id}"),
            revert=MagicMock(name=f"undo_{action_id}"),
            **kwargs,
        )

    return _make
