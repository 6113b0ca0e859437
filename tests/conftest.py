"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from clawlog.db.connection import Database
from clawlog.db.schema import ensure_schema


@pytest.fixture
def tmp_db(tmp_path):
    """File-based event store in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / "observability.db")
    conn = db.connect()
    ensure_schema(conn)
    yield conn
    conn.close()
