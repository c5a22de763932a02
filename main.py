#!/usr/bin/env python3
# /actionhistory/main.py
"""
actionhistory Console Entry Point
=================================

Interactive console driving a `HistoryEngine` over a demo counter document:
1) Environment Loading: reads ~/.config/actionhistory/.env early.
2) Path Setup: ensures the actionhistory package is importable from a checkout.
3) Configuration & Logging: loads config and initializes logging ASAP.
4) Core Import: imports the engine after logging is ready.
5) Console Loop: reads commands, submits history requests, prints replies.

Commands: add N, sub N, undo, redo, clear, history, quit.
"""

from __future__ import annotations

import logging
import os
import queue
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# --- Step 1: Load Environment Variables from the User's Config Directory ---
try:
    load_dotenv(dotenv_path=Path.home() / ".config" / "actionhistory" / ".env")
except Exception:
    # No HOME or unreadable file: tracing simply stays off.
    pass

# --- Step 2: Set up the Python Path ---
src_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if src_root not in sys.path:
    sys.path.insert(0, src_root)

# --- Step 3: Immediate Logging and Configuration Setup ---
try:
    from actionhistory.utils.logging_config import setup_logging
    from actionhistory.utils.utils import load_config

    config: dict[str, Any] = load_config()
    setup_logging(config)
    logger = logging.getLogger("actionhistory")
except Exception as e:
    print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc()
    sys.exit(1)

# --- Step 4: Import the Core Application ---
try:
    from actionhistory.core import Action, HistoryEngine, HistoryState
except ImportError as e:
    logger.critical("Failed to import a critical application component: %s", e, exc_info=True)
    sys.exit(1)


REPLY_TIMEOUT = 30.0


class Counter:
    """The document edited by the console: a single integer."""

    def __init__(self) -> None:
        self.value = 0

    def make_add(self, amount: int) -> Action:
        def do() -> None:
            self.value += amount

        def revert() -> None:
            self.value -= amount

        verb = "Add" if amount >= 0 else "Subtract"
        return Action(description=f"{verb} {abs(amount)}", do=do, revert=revert, data={"amount": amount})


def _format_state(state: HistoryState, counter: Counter) -> str:
    undo_label = state.undo_description or "-"
    redo_label = state.redo_description or "-"
    return (
        f"value={counter.value}  position {state.history_position}/{state.history_size}"
        f"  undo: {undo_label}  redo: {redo_label}"
    )


def _print_history(state: HistoryState) -> None:
    if not state.history:
        print("  (empty)")
        return
    for index, action in enumerate(state.history, 1):
        marker = ">" if index == state.history_position else " "
        print(f"{marker} {index:3d}. {action.description}")


def _wait_for_state(replies: queue.Queue[dict[str, Any]]) -> HistoryState | None:
    """Blocks until the engine reports a state, printing any errors on the way."""
    while True:
        try:
            message = replies.get(timeout=REPLY_TIMEOUT)
        except queue.Empty:
            print("No reply from the history engine.", file=sys.stderr)
            return None
        if message["type"] == "task_error":
            print(f"error: {message['error']}", file=sys.stderr)
        elif message["type"] == "history_state":
            if not message["applied"] and message["task_type"] != "snapshot":
                print(f"({message['task_type']}: nothing to do)")
            return message["state"]


def _parse_command(line: str, counter: Counter) -> dict[str, Any] | None:
    parts = line.split()
    if not parts:
        return None
    command = parts[0].lower()
    if command in ("add", "sub"):
        if len(parts) != 2:
            raise ValueError(f"usage: {command} N")
        amount = int(parts[1])
        return {"type": "execute", "action": counter.make_add(amount if command == "add" else -amount)}
    if command in ("undo", "redo", "clear"):
        return {"type": command}
    if command == "history":
        return {"type": "snapshot"}
    raise ValueError(f"unknown command: {command}")


def start() -> None:
    """Runs the console loop until EOF or `quit`."""
    logger.info("actionhistory console starting up...")
    replies: queue.Queue[dict[str, Any]] = queue.Queue()
    counter = Counter()
    engine = HistoryEngine(to_ui_queue=replies, config=config)
    engine.start()
    print("Commands: add N, sub N, undo, redo, clear, history, quit")

    try:
        for line in sys.stdin:
            line = line.strip()
            if line.lower() in ("quit", "exit"):
                break
            try:
                task = _parse_command(line, counter)
            except ValueError as e:
                print(e, file=sys.stderr)
                continue
            if task is None:
                continue

            engine.submit_task(task)
            state = _wait_for_state(replies)
            if state is None:
                continue
            if task["type"] == "snapshot":
                _print_history(state)
            print(_format_state(state, counter))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)
    finally:
        engine.stop()
        logger.info("actionhistory console shut down.")


if __name__ == "__main__":
    start()
