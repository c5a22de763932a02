"""Public facade for actionhistory.core: re-export main classes from CamelCase modules.

Keeps Java-like file names (ActionHistoryManager.py, HistoryEngine.py, ...),
but provides flat imports for convenience and stability.
"""

from .Action import Action, UndoableAction  # noqa: F401
from .ActionHistoryManager import ActionHistoryManager, HistoryState  # noqa: F401
from .HistoryEngine import HistoryEngine  # noqa: F401


__all__ = [
    "Action",
    "UndoableAction",
    "ActionHistoryManager",
    "HistoryState",
    "HistoryEngine",
]
