# ruff: noqa: E402, I001
"""Pytest configuration for test isolation.

Every test gets its own SQLite ledger and its own intake/processed/output
folders under ``tmp_path``. ``DONATIONS_*`` overrides and ``DATABASE_URL``
from the developer's shell are removed so a local ``.env`` can never leak
into a run.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make sure the workspace `packages/` and `libs/db/src` dirs are importable
# without an editable install.
_ROOT = Path(__file__).resolve().parents[1]
for _p in (_ROOT / "libs" / "db" / "src", _ROOT / "packages", _ROOT):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

from db.client import dispose_engines
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("DONATIONS_") or name == "DATABASE_URL":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def database_url(tmp_path: Path) -> Iterator[str]:
    url = bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
    yield url
    dispose_engines()


@pytest.fixture
def folders(tmp_path: Path) -> dict[str, Path]:
    """Intake, processed and acknowledgement output folders (all created)."""

    paths = {
        "pending": tmp_path / "pending",
        "imported": tmp_path / "imported",
        "output": tmp_path / "acknowledgements",
    }
    for p in paths.values():
        p.mkdir()
    return paths
