"""JSON state file for the CLI host.

Holds what the user declares across sessions: bills, pending commissions,
per-transaction overrides and a default starting balance. The forecasting
modules never import this; they take plain values.

Layout: ``<state_root>/state.json`` where the root defaults to ``./.cashflow``
and is overridden by ``CASHFLOW_STATE_DIR``.

Atomicity: writes target ``state.json.tmp`` first and then ``os.replace`` into
place.
"""

from __future__ import annotations

import contextlib
import json
import os
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .logging_setup import get_logger
from .models import Bill, PendingCommission, TransactionOverride

# Bump only when the on-disk JSON shape changes.
SCHEMA_VERSION: int = 1

_STATE_DIR_ENV = "CASHFLOW_STATE_DIR"
_STATE_FILE = "state.json"

_logger = get_logger("cashflow_forecast.store")


class AppState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schema_version: int = SCHEMA_VERSION
    starting_balance: Decimal = Decimal(0)
    bills: list[Bill] = Field(default_factory=list)
    commissions: list[PendingCommission] = Field(default_factory=list)
    overrides: dict[str, TransactionOverride] = Field(default_factory=dict)
    ignored_vendor_keys: list[str] = Field(default_factory=list)


def _get_state_root() -> Path:
    """Return the state directory.

    Default: ``./.cashflow`` under the current working directory.
    Override: ``CASHFLOW_STATE_DIR`` (absolute or relative).
    """

    root = os.getenv(_STATE_DIR_ENV)
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".cashflow").resolve()


def state_path() -> Path:
    return _get_state_root() / _STATE_FILE


def load_state() -> AppState:
    """Read the state file; a missing file yields an empty state.

    Malformed content raises ``pydantic.ValidationError`` rather than being
    silently discarded, so user data is never overwritten by accident.
    """

    path = state_path()
    if not path.exists():
        _logger.debug("store:missing path=%s", path)
        return AppState()
    state = AppState.model_validate_json(path.read_text(encoding="utf-8"))
    if state.schema_version != SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported state schema version {state.schema_version} in {path} "
            f"(expected {SCHEMA_VERSION})"
        )
    return state


def save_state(state: AppState) -> Path:
    path = state_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")

    # Write atomically, cleaning up the temp file on failure
    try:
        tmp.write_text(
            json.dumps(state.model_dump(mode="json"), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        os.replace(tmp, path)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise
    _logger.debug(
        "store:saved path=%s bills=%d commissions=%d overrides=%d",
        path,
        len(state.bills),
        len(state.commissions),
        len(state.overrides),
    )
    return path


__all__ = ["AppState", "SCHEMA_VERSION", "load_state", "save_state", "state_path"]
