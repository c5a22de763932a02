# actionhistory/core/ActionHistoryManager.py
"""ActionHistoryManager Module
==========================
This module provides the `ActionHistoryManager` class, the undo/redo engine of
the package. It keeps an ordered, bounded log of executed actions and a cursor
separating the undoable part of the log from the redoable part.

Key Features:
-------------
- Asynchronous ``execute``/``undo``/``redo``; action closures may be sync or async.
- A single execution guard: a call arriving while another one is in flight
  is a no-op (it is neither queued nor interleaved).
- Transactional semantics: a failing ``execute`` never enters the history, a
  failing ``undo``/``redo`` leaves the cursor where it was.
- Forking: executing after one or more undos discards every redoable entry.
- Front eviction once the log grows past ``max_history_size``.
- Optional ``on_execute``/``on_undo``/``on_redo`` observers called after commit.

Intended Usage:
---------------
One long-lived manager per consumer scope. Views read `snapshot()` or the
``can_undo``/``can_redo`` properties and never mutate the log directly.

Classes:
--------
- HistoryState: Immutable snapshot of the manager handed to view layers.
- ActionHistoryManager: The history store, execution guard and notifier.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from actionhistory.core.Action import UndoableAction, run_closure, validate_action


logger = logging.getLogger("actionhistory.history")

DEFAULT_MAX_HISTORY_SIZE = 50

ActionObserver = Callable[[UndoableAction], None]


@dataclass(frozen=True)
class HistoryState:
    """Read-only view of an `ActionHistoryManager` at one point in time."""

    history: tuple[UndoableAction, ...]
    history_size: int
    history_position: int
    can_undo: bool
    can_redo: bool
    undo_description: Optional[str]
    redo_description: Optional[str]
    is_busy: bool


## ==================== ActionHistoryManager Class ====================
class ActionHistoryManager:
    """Class ActionHistoryManager
    ===================
    Maintains the action log and moves its cursor in response to
    ``execute``, ``undo`` and ``redo``.

    Entries at index ``<= current_index`` are undoable (closest first),
    entries above it are redoable. ``current_index == -1`` means nothing
    can be undone.

    Attributes:
        max_history_size (int): Upper bound on the number of stored actions.
        on_execute (Optional[ActionObserver]): Called after ``execute`` commits.
        on_undo (Optional[ActionObserver]): Called after ``undo`` commits.
        on_redo (Optional[ActionObserver]): Called after ``redo`` commits.
        _history (list[UndoableAction]): The log, oldest first.
        _current_index (int): The cursor, in ``[-1, len(_history) - 1]``.
        _is_executing (bool): Execution guard shared by the three async operations.
        _generation (int): Bumped by ``clear()`` so in-flight undo/redo can
            detect that the log they were working on is gone.

    Methods:
        execute(action) -> bool:
            Runs ``action.execute()`` and records it. False when busy.
        undo() -> bool:
            Runs ``undo()`` of the action under the cursor. False at the boundary or when busy.
        redo() -> bool:
            Re-runs ``execute()`` of the next undone action. False at the boundary or when busy.
        clear():
            Drops the whole log.
        get_undo_action() / get_redo_action():
            The action the next undo/redo would act on, or None.
        snapshot() -> HistoryState:
            Immutable copy of everything a view needs.
    """

    def __init__(
        self,
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
        on_execute: Optional[ActionObserver] = None,
        on_undo: Optional[ActionObserver] = None,
        on_redo: Optional[ActionObserver] = None,
    ) -> None:
        """Initializes an empty history.

        Args:
            max_history_size (int): Maximum number of actions kept. Must be > 0.
            on_execute (Optional[ActionObserver]): Observer for committed executes.
            on_undo (Optional[ActionObserver]): Observer for committed undos.
            on_redo (Optional[ActionObserver]): Observer for committed redos.

        Raises:
            ValueError: If ``max_history_size`` is not a positive integer.
        """
        if (
            isinstance(max_history_size, bool)
            or not isinstance(max_history_size, int)
            or max_history_size <= 0
        ):
            raise ValueError(
                f"max_history_size must be a positive integer, got {max_history_size!r}"
            )
        self.max_history_size: int = max_history_size
        self.on_execute = on_execute
        self.on_undo = on_undo
        self.on_redo = on_redo

        self._history: list[UndoableAction] = []
        self._current_index: int = -1
        self._is_executing: bool = False
        self._generation: int = 0

    # ---- read-only accessors ----
    @property
    def history(self) -> tuple[UndoableAction, ...]:
        return tuple(self._history)

    @property
    def history_size(self) -> int:
        return len(self._history)

    @property
    def history_position(self) -> int:
        """1-based position of the cursor, 0 when nothing can be undone."""
        return self._current_index + 1

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def can_undo(self) -> bool:
        return self._current_index >= 0

    @property
    def can_redo(self) -> bool:
        return self._current_index < len(self._history) - 1

    @property
    def is_busy(self) -> bool:
        """True while an execute, undo or redo is awaiting its closure."""
        return self._is_executing

    def get_undo_action(self) -> Optional[UndoableAction]:
        if self._current_index < 0:
            return None
        return self._history[self._current_index]

    def get_redo_action(self) -> Optional[UndoableAction]:
        if self._current_index >= len(self._history) - 1:
            return None
        return self._history[self._current_index + 1]

    def snapshot(self) -> HistoryState:
        undo_action = self.get_undo_action()
        redo_action = self.get_redo_action()
        return HistoryState(
            history=self.history,
            history_size=self.history_size,
            history_position=self.history_position,
            can_undo=self.can_undo,
            can_redo=self.can_redo,
            undo_description=undo_action.description if undo_action else None,
            redo_description=redo_action.description if redo_action else None,
            is_busy=self._is_executing,
        )

    # ---- guarded operations ----
    async def execute(self, action: UndoableAction) -> bool:
        """Executes a new action and records it on success.

        Everything after the cursor is discarded when the action commits, and
        the oldest entries are evicted if the log outgrows ``max_history_size``.

        Args:
            action (UndoableAction): The action to run and record.

        Returns:
            bool: True if the action ran and was recorded, False if another
            operation was in flight and the call was ignored.

        Raises:
            TypeError: If ``action`` lacks callable ``execute``/``undo``.
            Exception: Whatever ``action.execute()`` raises. The history is
                left exactly as it was.
        """
        validate_action(action)
        if self._is_executing:
            logger.debug("Ignoring execute(%r): another operation is in flight.", action)
            return False

        self._is_executing = True
        try:
            await run_closure(action.execute)

            action.timestamp = time.time()
            # Fork: everything past the cursor becomes unreachable.
            del self._history[self._current_index + 1 :]
            self._history.append(action)
            self._current_index = len(self._history) - 1

            overflow = len(self._history) - self.max_history_size
            if overflow > 0:
                del self._history[:overflow]
                self._current_index = max(self._current_index - overflow, -1)
                logger.debug("Evicted %d oldest action(s) from history.", overflow)

            logger.debug(
                "Executed %r; position %d/%d.",
                action,
                self.history_position,
                len(self._history),
            )
            if self.on_execute:
                self.on_execute(action)
            return True
        finally:
            self._is_executing = False

    async def undo(self) -> bool:
        """Undoes the action under the cursor.

        Returns:
            bool: True if an action was undone, False if there was nothing to
            undo, another operation was in flight, or the history was cleared
            while the closure was running.

        Raises:
            Exception: Whatever the action's ``undo()`` raises. The cursor does
                not move, so the same action stays the undo target.
        """
        if self._current_index < 0:
            logger.debug("Nothing to undo.")
            return False
        if self._is_executing:
            logger.debug("Ignoring undo(): another operation is in flight.")
            return False

        self._is_executing = True
        try:
            generation = self._generation
            action = self._history[self._current_index]
            await run_closure(action.undo)

            if generation != self._generation:
                logger.debug("History cleared while undoing %r; cursor untouched.", action)
                return False
            self._current_index -= 1
            logger.debug("Undid %r; position %d.", action, self.history_position)
            if self.on_undo:
                self.on_undo(action)
            return True
        finally:
            self._is_executing = False

    async def redo(self) -> bool:
        """Re-executes the first undone action.

        Returns:
            bool: True if an action was redone, False if there was nothing to
            redo, another operation was in flight, or the history was cleared
            while the closure was running.

        Raises:
            Exception: Whatever the action's ``execute()`` raises. The cursor
                does not move.
        """
        if self._current_index >= len(self._history) - 1:
            logger.debug("Nothing to redo.")
            return False
        if self._is_executing:
            logger.debug("Ignoring redo(): another operation is in flight.")
            return False

        self._is_executing = True
        try:
            generation = self._generation
            action = self._history[self._current_index + 1]
            await run_closure(action.execute)

            if generation != self._generation:
                logger.debug("History cleared while redoing %r; cursor untouched.", action)
                return False
            self._current_index += 1
            logger.debug("Redid %r; position %d.", action, self.history_position)
            if self.on_redo:
                self.on_redo(action)
            return True
        finally:
            self._is_executing = False

    def clear(self) -> None:
        """Drops every action and resets the cursor. Does not take the guard."""
        if self._is_executing:
            logger.warning("Clearing history while an operation is in flight.")
        self._history.clear()
        self._current_index = -1
        self._generation += 1
        logger.debug("History cleared.")

    def __repr__(self) -> str:
        return (
            f"ActionHistoryManager(size={len(self._history)}, "
            f"position={self.history_position}, max={self.max_history_size})"
        )
