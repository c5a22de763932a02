# actionhistory/utils/logging_config.py
"""actionhistory.utils.logging_config
===================================

Logging configuration for the actionhistory package. It defines the global
logger objects and a single setup function, `setup_logging`, which configures
application-wide handlers and levels from a configuration dictionary.

Features:
    - Rotating file logging for general events (actionhistory.log by default).
    - Optional console logging to stderr with configurable log level.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional lifecycle tracing (lifecycle.log) of every committed execute,
      undo and redo, enabled via the ACTIONHISTORY_TRACE environment variable.
    - Fallback to the system temp directory when the log directory cannot be created.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs.
    - Never raises; errors are reported to stderr and logging continues best-effort.

Usage:
    >>> from actionhistory.utils import logging_config
    >>> logging_config.setup_logging({"logging": {"console_level": "INFO"}})

Globals:
    logger: Main package logger ("actionhistory").
    LIFECYCLE_LOGGER: Trace logger for history transitions ("actionhistory.lifecycle").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import-time, unconfigured until ``setup_logging()`` runs.
logger = logging.getLogger("actionhistory")
LIFECYCLE_LOGGER = logging.getLogger("actionhistory.lifecycle")

TRACE_ENV_VAR = "ACTIONHISTORY_TRACE"


def _rotating_handler(
    filename: str, max_bytes: int, backup_count: int
) -> logging.handlers.RotatingFileHandler:
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)
    return logging.handlers.RotatingFileHandler(
        filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are installed:

    1. File handler – rotating log file capturing everything from
       the configured `file_level` (default DEBUG) upward.
    2. Console handler – optional `stderr` output whose threshold is
       `console_level` (default WARNING).
    3. Error-file handler – optional rotating error.log that stores
       only ERROR and CRITICAL events.
    4. Lifecycle handler – optional rotating lifecycle.log enabled when
       ``ACTIONHISTORY_TRACE`` is ``1/true/yes``; attached to the
       ``actionhistory.lifecycle`` logger, which never propagates.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is consulted; recognised keys are
            ``file_level``, ``console_level``, ``log_to_console``,
            ``separate_error_log`` and ``log_file``.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_filename = str(logging_config.get("log_file", "actionhistory.log"))
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    log_dir = os.path.dirname(log_filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(
                f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr
            )
            log_filename = os.path.join(tempfile.gettempdir(), "actionhistory.log")
            print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-22s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )
        file_handler = None

    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-18s - %(message)s")
        )
        console_handler.setLevel(console_log_level)

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = "error.log"
        try:
            error_file_handler = _rotating_handler(error_log_filename, 1 * 1024 * 1024, 3)
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except Exception as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )
            error_file_handler = None

    root_logger = logging.getLogger()
    root_logger.handlers = []  # avoid duplicates on repeated calls

    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    if error_file_handler:
        root_logger.addHandler(error_file_handler)

    root_logger.setLevel(log_file_level)

    # Lifecycle trace logger
    LIFECYCLE_LOGGER.propagate = False
    LIFECYCLE_LOGGER.setLevel(logging.DEBUG)
    LIFECYCLE_LOGGER.handlers = []
    LIFECYCLE_LOGGER.disabled = False

    if os.environ.get(TRACE_ENV_VAR, "").lower() in {"1", "true", "yes"}:
        try:
            trace_handler = _rotating_handler("lifecycle.log", 1 * 1024 * 1024, 3)
            trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            LIFECYCLE_LOGGER.addHandler(trace_handler)
            logging.info("Lifecycle tracing enabled, logging to 'lifecycle.log'.")
        except Exception as e_trace:
            logging.error(
                f"Failed to set up lifecycle trace logging: {e_trace}", exc_info=True
            )
            LIFECYCLE_LOGGER.disabled = True
    else:
        LIFECYCLE_LOGGER.addHandler(logging.NullHandler())
        LIFECYCLE_LOGGER.disabled = True
        logging.debug("Lifecycle tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
