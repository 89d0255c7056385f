"""Pytest configuration for test isolation.

Each test gets its own file-backed SQLite database under ``tmp_path``. The
engine cache in ``db.client`` is keyed by URL, so databases never leak
between tests; engines are disposed afterwards to release file handles.
``DATABASE_URL`` is removed from the environment so nothing falls back to a
developer's real database.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engines

from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("IMPORT_REVIEW_TENANT", raising=False)


@pytest.fixture
def db_url(tmp_path: Path) -> Iterator[str]:
    """URL of a freshly created schema in a per-test SQLite file."""

    url = bootstrap_sqlite_db(tmp_path / "import-review.db")
    yield url
    dispose_engines()


@pytest.fixture
def tenant() -> str:
    return "tenant-a"
