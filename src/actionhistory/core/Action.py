# actionhistory/core/Action.py
"""Action Module
=============
Defines what the history manager accepts as a reversible unit of work.

Any object exposing a zero-argument ``execute`` and ``undo`` qualifies
(see `UndoableAction`). Either callable may be a plain function or a
coroutine function; `run_closure` hides the difference from the manager.

Classes:
--------
- UndoableAction: Structural protocol for reversible actions.
- Action: Ready-made mutable dataclass implementing the protocol.
"""

from __future__ import annotations

import inspect
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable


ActionCallable = Callable[[], Union[None, Awaitable[None]]]


@runtime_checkable
class UndoableAction(Protocol):
    """Structural type of everything the history can hold.

    The manager only ever calls ``execute``/``undo`` and writes
    ``timestamp``; ``id``, ``description`` and ``data`` belong to the caller.
    """

    id: str
    description: str
    data: Any
    timestamp: Optional[float]

    def execute(self) -> Union[None, Awaitable[None]]: ...

    def undo(self) -> Union[None, Awaitable[None]]: ...


# ==================== Action Class ====================
@dataclass(eq=False)
class Action:
    """Class Action
    ===================
    A reversible operation built from two closures.

    Attributes:
        description (str): Human readable label shown next to undo/redo controls.
        do (ActionCallable): Forward effect. Called by ``execute``.
        revert (ActionCallable): Inverse effect. Called by ``undo``.
        id (str): Unique identifier; a random hex id when not supplied.
        data (Any): Optional caller payload, never inspected by the manager.
        timestamp (Optional[float]): Set by the manager when ``execute`` commits.

    Instances compare by identity so two actions with the same label are
    still distinct history entries.
    """

    description: str
    do: ActionCallable
    revert: ActionCallable
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    data: Any = None
    timestamp: Optional[float] = None

    def execute(self) -> Union[None, Awaitable[None]]:
        return self.do()

    def undo(self) -> Union[None, Awaitable[None]]:
        return self.revert()

    def __repr__(self) -> str:
        return f"Action(id={self.id!r}, description={self.description!r})"


def validate_action(action: Any) -> None:
    """Raises TypeError unless `action` exposes callable execute/undo."""
    for name in ("execute", "undo"):
        if not callable(getattr(action, name, None)):
            raise TypeError(
                f"Action {action!r} has no callable '{name}'; "
                "history entries need both 'execute' and 'undo'."
            )


async def run_closure(closure: Callable[[], Any]) -> None:
    """Calls `closure` and awaits its result when it is awaitable.

    This is the only place where the manager yields to the event loop.
    """
    result = closure()
    if inspect.isawaitable(result):
        await result
