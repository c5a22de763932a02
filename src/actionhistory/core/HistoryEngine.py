# actionhistory/core/HistoryEngine.py
"""HistoryEngine Module
==================
This module provides the `HistoryEngine` class, which owns one
`ActionHistoryManager` and drives it from a dedicated background thread
running an ``asyncio`` event loop. A synchronous view layer (a console loop,
a GUI thread) submits undo/redo requests through a thread-safe queue and
receives history snapshots back through another one, so long-running or
I/O-bound action closures never block it.

Key Features:
-------------
- Runs the manager on an asyncio event loop in a separate thread.
- Thread-safe task submission and result delivery via `queue.Queue`.
- Each request becomes its own asyncio task, so overlapping requests meet the
  manager's execution guard and resolve as no-ops instead of being queued.
- Pushes a `HistoryState` after every settled request, including failed ones.
- Graceful shutdown of outstanding tasks and of the event loop.

Message formats:
----------------
Requests (``submit_task``):
    {"type": "execute", "action": UndoableAction}
    {"type": "undo"} / {"type": "redo"} / {"type": "clear"} / {"type": "snapshot"}

Replies (``to_ui_queue``):
    {"type": "history_state", "task_type": str, "applied": bool, "state": HistoryState}
    {"type": "task_error", "task_type": str, "error": str}

A request that is not a dict is answered with a task_error whose task_type
is None, followed by the current state.

Classes:
--------
- HistoryEngine: Lifecycle of the loop thread plus request dispatching.
"""

import asyncio
import logging
import queue
import threading
from typing import Any, Optional

from actionhistory.core.ActionHistoryManager import ActionHistoryManager
from actionhistory.utils.logging_config import LIFECYCLE_LOGGER
from actionhistory.utils.utils import get_history_options


# The queue can receive tasks (dictionaries) or None to stop.
QueueItem = Optional[dict[str, Any]]

TASK_TYPES = ("execute", "undo", "redo", "clear", "snapshot")


# ==================== HistoryEngine Class ====================
class HistoryEngine:
    """Class HistoryEngine
    ===================
    Background-thread adapter around a single `ActionHistoryManager`.

    Attributes:
        loop (Optional[asyncio.AbstractEventLoop]): The event loop running in the background thread.
        thread (Optional[threading.Thread]): The background thread running the event loop.
        from_ui_queue (queue.Queue): Requests coming from the view thread.
        to_ui_queue (queue.Queue): Snapshots and errors going back to the view thread.
        manager (ActionHistoryManager): The history this engine owns.
        _tasks (set): Set of currently running asyncio tasks.
        config (dict): Application configuration; only ``[history]`` is read here.

    Methods:
        start():
            Starts the asyncio event loop in a background thread.
        submit_task(task_data: dict[str, Any]):
            Thread-safe entry point for the view thread.
        stop():
            Stops the event loop and background thread, cancelling pending tasks.
        main_loop():
            Listens for requests and spawns one task per request.
        dispatch_task(task_data: dict[str, Any]):
            Runs one request against the manager and reports the outcome.
    """

    def __init__(
        self, to_ui_queue: queue.Queue[dict[str, Any]], config: dict[str, Any]
    ) -> None:
        """Initializes the HistoryEngine instance.

        Args:
            to_ui_queue (queue.Queue): Queue used to send results back to the view thread.
            config (dict): Application configuration.

        Raises:
            ValueError: If the ``[history]`` section holds an invalid size.
        """
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.thread: Optional[threading.Thread] = None
        self.from_ui_queue: queue.Queue[QueueItem] = queue.Queue()
        self.to_ui_queue: queue.Queue[dict[str, Any]] = to_ui_queue
        self._tasks: set[asyncio.Task[Any]] = set()
        self.config: dict[str, Any] = config

        options = get_history_options(config)
        self.manager = ActionHistoryManager(
            max_history_size=options["max_history_size"],
            on_execute=lambda a: LIFECYCLE_LOGGER.debug("execute %s %r", a.id, a.description),
            on_undo=lambda a: LIFECYCLE_LOGGER.debug("undo %s %r", a.id, a.description),
            on_redo=lambda a: LIFECYCLE_LOGGER.debug("redo %s %r", a.id, a.description),
        )

    def _start_loop_in_thread(self) -> None:
        """Runs the history loop until `main_loop` returns, then closes it."""
        try:
            self.loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self.loop)
            self.loop.run_until_complete(self.main_loop())
        finally:
            if self.loop:
                if self.loop.is_running():
                    self.loop.stop()
                self.loop.close()
            logging.info(
                "History loop closed with %d action(s) recorded.", self.manager.history_size
            )

    def start(self) -> None:
        """Starts the asyncio event loop in a background thread."""
        if self.thread is not None:
            logging.warning("History engine already started; ignoring start().")
            return
        logging.info(
            "Starting history thread (max_history_size=%d).", self.manager.max_history_size
        )
        self.thread = threading.Thread(
            target=self._start_loop_in_thread, daemon=True, name="HistoryEngineThread"
        )
        self.thread.start()

    async def main_loop(self) -> None:
        """Turns each request from the view thread into a task until None arrives."""
        if not self.loop:
            logging.error("History loop missing; cannot accept undo/redo requests.")
            return

        logging.info("History engine accepting execute/undo/redo requests.")

        while True:
            try:
                task_data = await self.loop.run_in_executor(
                    None, self.from_ui_queue.get
                )

                if task_data is None:
                    logging.info("History engine stop requested; no further requests accepted.")
                    break

                task = self.loop.create_task(self.dispatch_task(task_data))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

            except Exception as e:
                if self.loop and self.loop.is_running():
                    logging.error(f"Failed to read the next history request: {e}", exc_info=True)
                    await asyncio.sleep(1)
                else:
                    logging.info("History request queue closed during shutdown.")
                    break

        await self._shutdown_tasks()

    async def dispatch_task(self, task_data: dict[str, Any]) -> None:
        """Runs one request against the manager and reports the outcome."""
        if not isinstance(task_data, dict):
            error = f"History request must be a dict, got {type(task_data).__name__}."
            logging.error(error)
            self.to_ui_queue.put({"type": "task_error", "task_type": None, "error": error})
            self._reply_state(None, False)
            return

        task_type = task_data.get("type")
        logging.debug(f"Dispatching history request: {task_type}")

        if task_type not in TASK_TYPES:
            logging.warning(f"Ignoring history request with unknown task type: {task_type}")
            return

        try:
            if task_type == "execute":
                action = task_data.get("action")
                if action is None:
                    raise ValueError("Missing 'action' for execute task.")
                applied = await self.manager.execute(action)
            elif task_type == "undo":
                applied = await self.manager.undo()
            elif task_type == "redo":
                applied = await self.manager.redo()
            elif task_type == "clear":
                # Clear only between operations, never under an in-flight one.
                if self.manager.is_busy:
                    logging.info("Refusing to clear history: an operation is in flight.")
                    applied = False
                else:
                    self.manager.clear()
                    applied = True
            else:
                applied = False

        except Exception as e:
            logging.error(f"History request '{task_type}' failed: {e}", exc_info=True)
            self.to_ui_queue.put(
                {"type": "task_error", "task_type": task_type, "error": str(e)}
            )
            applied = False

        self._reply_state(task_type, applied)

    def _reply_state(self, task_type: Optional[str], applied: bool) -> None:
        self.to_ui_queue.put(
            {
                "type": "history_state",
                "task_type": task_type,
                "applied": applied,
                "state": self.manager.snapshot(),
            }
        )

    def submit_task(self, task_data: dict[str, Any]) -> None:
        """Thread-safe method for the view thread to submit a request."""
        self.from_ui_queue.put(task_data)

    async def _shutdown_tasks(self) -> None:
        """Cancels history requests still awaiting their action closures."""
        if not self._tasks:
            return
        logging.info(f"Cancelling {len(self._tasks)} unfinished history request(s).")
        tasks_to_cancel = list(self._tasks)
        for task in tasks_to_cancel:
            task.cancel()

        await asyncio.gather(*tasks_to_cancel, return_exceptions=True)
        logging.info("Unfinished history requests cancelled.")

    def stop(self) -> None:
        """Stops the history thread, cancelling requests still in flight."""
        if not self.thread or not self.loop or not self.thread.is_alive():
            logging.debug("History engine is not running; nothing to stop.")
            return

        logging.info("Stopping history engine...")

        try:
            self.from_ui_queue.put(None)
            self.thread.join(timeout=2.0)

            if self.thread.is_alive():
                logging.error(
                    "History thread still busy after 2s; forcing its loop to stop."
                )
                self.loop.call_soon_threadsafe(self.loop.stop)
            else:
                logging.info("History thread stopped.")

        except Exception as e:
            logging.error(f"Failed to stop the history thread: {e}", exc_info=True)
