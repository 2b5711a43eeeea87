"""QueryKit logging utilities.

One package logger, ``QueryKit``, carries every handler. Library modules log
through child loggers from `get_logger` (``QueryKit.builders`` and so on),
which propagate to it, so a caller that never configures logging sees nothing
from the builders.

Line format: ``mm-dd HH:MM:SS [LVL] message`` with LVL one of
DEBG/INFO/WARN/ERRO.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final

LOGGER_NAME: Final[str] = "QueryKit"

_LEVEL_ABBREV: Final[dict[int, str]] = {
    logging.DEBUG: "DEBG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}


class _AbbrevLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - record is stdlib name
        record.levelabbr = _LEVEL_ABBREV.get(record.levelno, record.levelname[:4])
        return super().format(record)


log = logging.getLogger(LOGGER_NAME)
log.addHandler(logging.NullHandler())


def get_logger(component: str) -> logging.Logger:
    """Return the child logger for one QueryKit component.

    Args:
        component: Dotted suffix such as ``builders`` or ``config.queries``.
    """
    return log.getChild(component)


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
) -> None:
    """Install console (and optionally file) handlers on the QueryKit logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        level: Console threshold (e.g., INFO, DEBUG).
        action: CLI action name; log files go to ``<log_dir>/<action>/``.
        log_to_file: Whether to mirror every record, DEBUG included, to a file.
        log_dir: Base directory for log files.
    """
    console_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    formatter = _AbbrevLevelFormatter(
        fmt="%(asctime)s [%(levelabbr)s] %(message)s",
        datefmt="%m-%d %H:%M:%S",
    )

    handlers = [_console_handler(console_level, formatter)]
    if log_to_file and action:
        handlers.append(_file_handler(Path(log_dir or "log"), action, formatter))

    for handler in log.handlers:
        handler.close()
    log.handlers.clear()
    for handler in handlers:
        log.addHandler(handler)
    log.setLevel(logging.DEBUG if log_to_file and action else console_level)
    log.propagate = False


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _file_handler(log_root: Path, action: str, formatter: logging.Formatter) -> logging.Handler:
    action_dir = log_root / action
    action_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%m%d%H%M%S")
    handler = logging.FileHandler(action_dir / f"{action}_{timestamp}.log", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler
