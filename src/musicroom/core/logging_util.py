"""Logging setup for the `mr` command.

Library code only ever calls `logging.getLogger(__name__)`; handlers are
installed here, once, by the CLI.
"""

import json as _json
import logging
from typing import Any, Dict

from rich.console import Console
from rich.logging import RichHandler

# Warnings from the core (skipped config lines, failed statements) go to stderr
_stderr = Console(stderr=True)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return _json.dumps(payload, ensure_ascii=False)


def log_level(verbose: bool | None = None, quiet: bool | None = None) -> int:
    """INFO by default, DEBUG when verbose, WARNING when quiet (quiet wins)."""
    level = logging.DEBUG if verbose else logging.INFO
    if quiet:
        level = max(level, logging.WARNING)
    return level


def setup_logging(
    *, json_logs: bool = False, verbose: bool | None = None, quiet: bool | None = None
) -> None:
    """Replace the root handlers with a single stderr handler.

    Plain runs get Rich-formatted records; `json_logs` emits one JSON object
    per line for scripts that collect MusicRoom output.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level(verbose, quiet))

    if json_logs:
        handler: logging.Handler = logging.StreamHandler(stream=_stderr.file)
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(console=_stderr, show_path=False, markup=False)
    root.addHandler(handler)
