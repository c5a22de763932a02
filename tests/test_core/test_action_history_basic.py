# tests/test_core/test_action_history_basic.py
"""ActionHistoryManager Basic Tests
==================================

Unit tests for the ActionHistoryManager class (basic functionality).

This test module verifies that the manager:

1. Starts empty with the cursor before the first entry.
2. Records executed actions in order and stamps them.
3. Exposes consistent read-only accessors and snapshots.
4. Rejects malformed actions and invalid sizes.
"""

import time

import pytest

from actionhistory.core.Action import Action
from actionhistory.core.ActionHistoryManager import ActionHistoryManager, HistoryState


def test_initial_state(manager: ActionHistoryManager) -> None:
    """A fresh manager has no history and nothing to undo or redo."""
    assert manager.history == ()
    assert manager.history_size == 0
    assert manager.history_position == 0
    assert manager.current_index == -1
    assert manager.can_undo is False
    assert manager.can_redo is False
    assert manager.is_busy is False
    assert manager.get_undo_action() is None
    assert manager.get_redo_action() is None
    assert manager.max_history_size == 50


@pytest.mark.asyncio
async def test_execute_records_action(manager: ActionHistoryManager, make_action) -> None:
    """Test: one execute runs the closure once and records the action."""
    action = make_action("1")

    applied = await manager.execute(action)

    assert applied is True
    action.do.assert_called_once_with()
    action.revert.assert_not_called()
    assert manager.history_size == 1
    assert manager.can_undo is True
    assert manager.can_redo is False


@pytest.mark.asyncio
async def test_two_executes(manager: ActionHistoryManager, make_action) -> None:
    """Test: execute(A), execute(B) gives [A, B] with the cursor at the end."""
    a, b = make_action("A"), make_action("B")

    await manager.execute(a)
    await manager.execute(b)

    assert manager.history == (a, b)
    assert manager.history_position == 2
    assert manager.can_undo is True
    assert manager.can_redo is False
    assert manager.get_undo_action() is b


@pytest.mark.asyncio
async def test_n_executes_within_limit(make_action) -> None:
    """For N <= max size, size and position both equal N."""
    manager = ActionHistoryManager(max_history_size=10)
    for i in range(10):
        await manager.execute(make_action(str(i)))

    assert manager.history_size == 10
    assert manager.history_position == 10
    assert manager.can_undo is True
    assert manager.can_redo is False


@pytest.mark.asyncio
async def test_timestamp_and_data(manager: ActionHistoryManager, make_action) -> None:
    """Test: the manager stamps the action and leaves its payload alone."""
    action = make_action("1", data={"value": 42})
    assert action.timestamp is None

    before = time.time()
    await manager.execute(action)

    recorded = manager.history[0]
    assert recorded.data == {"value": 42}
    assert recorded.timestamp is not None
    assert before <= recorded.timestamp <= time.time()


@pytest.mark.asyncio
async def test_history_is_a_snapshot(manager: ActionHistoryManager, make_action) -> None:
    """Mutating the returned history cannot touch the manager."""
    await manager.execute(make_action("1"))
    snapshot = list(manager.history)
    snapshot.clear()
    assert manager.history_size == 1


@pytest.mark.asyncio
async def test_snapshot_state(manager: ActionHistoryManager, make_action) -> None:
    """Test: snapshot() mirrors the accessors and action descriptions."""
    a, b = make_action("A"), make_action("B")
    await manager.execute(a)
    await manager.execute(b)
    await manager.undo()

    state = manager.snapshot()

    assert isinstance(state, HistoryState)
    assert state.history == (a, b)
    assert state.history_size == 2
    assert state.history_position == 1
    assert state.can_undo is True
    assert state.can_redo is True
    assert state.undo_description == "Action A"
    assert state.redo_description == "Action B"
    assert state.is_busy is False


def test_action_defaults() -> None:
    """An Action gets a unique id when none is given."""
    first = Action(description="x", do=lambda: None, revert=lambda: None)
    second = Action(description="x", do=lambda: None, revert=lambda: None)
    assert first.id and second.id
    assert first.id != second.id
    assert first != second


@pytest.mark.asyncio
async def test_execute_rejects_malformed_action(manager: ActionHistoryManager) -> None:
    """Test: objects without callable execute/undo are refused up front."""

    class OnlyExecute:
        id = "x"
        description = "broken"

        def execute(self) -> None:
            pass

    with pytest.raises(TypeError):
        await manager.execute(OnlyExecute())  # type: ignore[arg-type]

    assert manager.history_size == 0
    assert manager.is_busy is False


@pytest.mark.parametrize("size", [0, -1, 2.5, "10", True])
def test_invalid_max_history_size(size) -> None:
    with pytest.raises(ValueError):
        ActionHistoryManager(max_history_size=size)
