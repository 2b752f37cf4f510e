"""Terminal and log-file handlers for the CLI and the API server.

The terminal (stderr) shows WARNING and up, or everything with ``-v``.  When
an output directory is configured, a rotating file at
``<output_dir>/.depmatrix/depmatrix.log`` also records the run; its threshold
comes from ``DEPMATRIX_LOG_LEVEL`` (INFO when unset) and ignores ``-v``.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_LEVEL_ENV = "DEPMATRIX_LOG_LEVEL"

_LOG_DIRNAME = ".depmatrix"
_LOG_FILENAME = "depmatrix.log"
_ROTATE_AT_BYTES = 5 * 1024 * 1024
_KEEP_ROTATED = 2

_TERMINAL_FORMAT = "%(levelname)s | %(name)s | %(message)s"
_FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

# Request-level chatter from the server stack
_QUIET_LOGGERS = ("httpx", "uvicorn.access", "multipart")


def _parse_log_level(name: str) -> int:
    """Map ``"debug"``, ``"WARNING"``... to a logging level; INFO if unknown."""
    level = getattr(logging, name.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def log_path_for(output_dir: Path) -> Path:
    return output_dir / _LOG_DIRNAME / _LOG_FILENAME


def _terminal_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler.setFormatter(logging.Formatter(_TERMINAL_FORMAT))
    return handler


def _file_handler(output_dir: Path) -> logging.Handler:
    path = log_path_for(output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=_ROTATE_AT_BYTES,
        backupCount=_KEEP_ROTATED,
        encoding="utf-8",
    )
    handler.setLevel(_parse_log_level(os.environ.get(LOG_LEVEL_ENV, "INFO")))
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(*, output_dir: Path | None = None, verbose: bool = False) -> None:
    """Replace the root logger's handlers with the terminal (+ file) pair.

    Safe to call repeatedly: the CLI calls it per command and ``create_app``
    calls it again under ``serve --reload``.
    """
    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    # Handlers do the filtering
    root.setLevel(logging.DEBUG)
    root.addHandler(_terminal_handler(verbose))
    if output_dir is not None:
        root.addHandler(_file_handler(output_dir))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
