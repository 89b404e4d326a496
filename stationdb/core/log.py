"""Logging setup for stationdb.

Diagnostics go through the standard ``logging`` module under the
``stationdb`` namespace. User-facing output is the CLI's job; loggers here
only report what the engine decided (which file was resolved, when the
combined cache was rebuilt, which source was skipped in a count).

Usage:
    from stationdb.core.log import configure_logging, get_logger

    configure_logging(level="DEBUG")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Optional

_root_logger_name = "stationdb"


class ConsoleFormatter(logging.Formatter):
    """Compact stderr format with optional color."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[37m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_color:
            level_str = f"{self.LEVEL_COLORS.get(level, '')}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"
        name = record.name.replace(f"{_root_logger_name}.", "")
        base = f"[{ts}] {level_str} [{name}] {record.getMessage()}"
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(
    *,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    use_color: bool = True,
) -> None:
    """Configure the stationdb logger tree.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to STATIONDB_LOG_LEVEL,
               or WARNING when that is unset.
        log_file: Optional path that also receives every record.
        use_color: Colorize console output (ignored when stderr is not a TTY).

    Calling it again replaces the previous handlers.
    """
    if level is None:
        level = os.environ.get("STATIONDB_LOG_LEVEL", "WARNING")
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(_root_logger_name)
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ConsoleFormatter(use_color=use_color))
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot open log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)-5s [%(name)s] %(message)s")
            )
            logger.addHandler(file_handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the stationdb namespace.

    Loggers are created lazily; handlers are only installed by
    configure_logging(), so library use without a CLI stays silent apart
    from Python's last-resort handler.
    """
    if not name.startswith(_root_logger_name):
        if name == "__main__":
            name = f"{_root_logger_name}.main"
        else:
            name = f"{_root_logger_name}.{name}"
    return logging.getLogger(name)
