"""Pytest configuration for test isolation.

The CLI persists bills, commissions and overrides to ``state.json`` under a
project-relative directory (``./.cashflow``). When tests run in the same
working tree, a state file written by one test would leak bills or overrides
into the next.

To keep tests hermetic, we redirect the state root to a unique temporary
directory for each test via an autouse fixture.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_state_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Force a per-test state root so tests don't share on-disk state.

    The application reads ``CASHFLOW_STATE_DIR`` (when set) to override the
    default ``./.cashflow`` location. We point it at the test's own temporary
    directory.
    """

    state_root = tmp_path / "state"
    state_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("CASHFLOW_STATE_DIR", os.fspath(state_root))
    return state_root
