"""Logging for the ``cashflow_forecast`` package.

Library modules call ``get_logger("cashflow_forecast.<module>")`` and never
attach handlers; until the CLI calls :func:`configure_logging` their records
go to a ``NullHandler``. Records are ``key=value`` style messages such as
``ingest:parsed records=12 skipped=1``.

The level comes from the ``level`` argument, else ``CASHFLOW_FORECAST_LOG_LEVEL``
(a level name or number), else ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys

_ROOT = "cashflow_forecast"
_LEVEL_ENV = "CASHFLOW_FORECAST_LOG_LEVEL"
_HANDLER_NAME = "cashflow_forecast.stderr"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Bound once so handlers keep writing to the process stderr even when a test
# runner swaps ``sys.stderr`` while a command runs.
_STDERR = sys.stderr


def _as_level(value: int | str | None) -> int | None:
    if isinstance(value, int):
        return value
    if not value or not value.strip():
        return None
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelNamesMapping().get(name)


def _resolve_level(level: int | str | None) -> int:
    for candidate in (level, os.getenv(_LEVEL_ENV)):
        resolved = _as_level(candidate)
        if resolved is not None:
            return resolved
    return logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Send package records to stderr; later calls are no-ops."""

    root = logging.getLogger(_ROOT)
    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(_STDERR)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.setLevel(resolved)

    root.handlers = [h for h in root.handlers if not isinstance(h, logging.NullHandler)]
    root.addHandler(handler)
    root.setLevel(resolved)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
