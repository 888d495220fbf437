"""Centralized logging configuration for the ``donation_ledger`` package.

Entry points (the CLI, a scheduler wrapper) call ``configure_logging(...)``
once at process start; it attaches a single ``StreamHandler`` to the
``"donation_ledger"`` package logger. Library modules only ever call
``get_logger("donation_ledger.<module>")`` and never attach handlers.

Batch runs are long and unattended, so the default format carries a
timestamp, and ``DONATION_LEDGER_LOG_LEVEL`` overrides the level without a
code change. ``DONATION_LEDGER_SQL_LOG=1`` additionally routes SQLAlchemy
statement logging through the same handler.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "donation_ledger"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv("DONATION_LEDGER_LOG_LEVEL")
        if not level:
            return logging.INFO
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package logger exactly once.

    Parameters
    ----------
    level:
        ``int`` or level name. ``None`` falls back to
        ``DONATION_LEDGER_LOG_LEVEL`` and then ``INFO``.
    fmt:
        Optional format string (default includes timestamp and logger name).
    stream:
        Destination of the single ``StreamHandler``.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)
    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    if os.getenv("DONATION_LEDGER_SQL_LOG", "").strip() in {"1", "true", "yes"}:
        sql_logger = logging.getLogger("sqlalchemy.engine")
        sql_logger.setLevel(logging.INFO)
        sql_logger.addHandler(handler)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, giving the package a ``NullHandler`` until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
