"""This module defines log formats and the logging setup of the CLI."""

from __future__ import annotations

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Sequence

from .config import LinkwatchConfig
from .utils.appdirs import get_log_path


__all__ = [
    "LOG_FMT_LONG",
    "LOG_FMT_SHORT",
    "setup_logging",
]

LOG_FMT_LONG = logging.Formatter(
    fmt="%(asctime)s %(module)s %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
LOG_FMT_SHORT = logging.Formatter(fmt="%(message)s")


def _journal_handler() -> logging.Handler | None:
    # only when launched as a systemd service
    if not os.getenv("INVOCATION_ID"):
        return None

    try:
        from systemd.journal import JournalHandler
    except ImportError:
        return None

    return JournalHandler(SYSLOG_IDENTIFIER="linkwatch")


def setup_logging(
    config_name: str,
    file: bool = True,
    stderr: bool = True,
    journal: bool = True,
) -> Sequence[logging.Handler]:
    """
    Attaches handlers to the "linkwatch" logger. The level of all handlers is taken
    from the config. Logging to the journal is skipped silently if the current process
    was not started by systemd or systemd-python is not installed.

    :param config_name: Config name to determine the log level and log file name.
    :param file: Whether to log to a rotating log file.
    :param stderr: Whether to log to stderr.
    :param journal: Whether to log to the systemd journal.
    :returns: The attached handlers.
    """
    level = LinkwatchConfig(config_name).get("app", "log_level")
    logger = logging.getLogger("linkwatch")
    logger.setLevel(min(level, logging.INFO))

    handlers: list[tuple[logging.Handler, logging.Formatter]] = []

    if file:
        logfile = get_log_path("linkwatch", f"{config_name}.log")
        handler = RotatingFileHandler(logfile, maxBytes=10**6, backupCount=1)
        handlers.append((handler, LOG_FMT_LONG))

    if journal:
        journal_handler = _journal_handler()
        if journal_handler:
            handlers.append((journal_handler, LOG_FMT_SHORT))

    if stderr:
        handlers.append((logging.StreamHandler(), LOG_FMT_LONG))

    for handler, fmt in handlers:
        handler.setFormatter(fmt)
        handler.setLevel(level)
        logger.addHandler(handler)

    return [handler for handler, _ in handlers]
