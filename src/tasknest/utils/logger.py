"""Application log for the CLI and the API server.

Records go to ``tasknest.log`` in the platform log directory, never to the
terminal. ``TASKNEST_LOG_LEVEL`` (DEBUG, INFO, WARNING...) sets the level.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

LOGGER_NAME = "tasknest"
LEVEL_ENV = "TASKNEST_LOG_LEVEL"
DEFAULT_LEVEL = logging.INFO

_ROTATE_BYTES = 2 * 1024 * 1024
_ROTATE_KEEP = 5
_FORMAT = "%(asctime)s %(levelname)-8s %(process)d %(message)s"

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Location of the current log file."""
    return Path(user_log_dir(LOGGER_NAME)) / f"{LOGGER_NAME}.log"


def _level_from_env() -> int:
    name = os.environ.get(LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else DEFAULT_LEVEL
    return level if isinstance(level, int) else DEFAULT_LEVEL


def get_logger() -> logging.Logger:
    """The shared ``tasknest`` logger, set up on first use."""
    global _logger
    if _logger is None:
        path = log_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_KEEP, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

        logger = logging.getLogger(LOGGER_NAME)
        logger.handlers = [handler]
        logger.setLevel(_level_from_env())
        logger.propagate = False
        _logger = logger
    return _logger
