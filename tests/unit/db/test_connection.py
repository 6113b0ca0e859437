"""Tests for the SQLite connection layer."""

from __future__ import annotations

import sqlite3

from clawlog.db.connection import Database


def test_connect_creates_file(tmp_path):
    db_file = tmp_path / "observability.db"
    conn = Database(db_file).connect()
    try:
        assert db_file.exists()
    finally:
        conn.close()


def test_connect_creates_parent_directory(tmp_path):
    db_file = tmp_path / "nested" / "state" / "observability.db"
    conn = Database(db_file).connect()
    try:
        assert db_file.parent.is_dir()
    finally:
        conn.close()


def test_wal_mode(tmp_path):
    conn = Database(tmp_path / "x.db").connect()
    try:
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "wal"
    finally:
        conn.close()


def test_row_factory(tmp_path):
    conn = Database(tmp_path / "x.db").connect()
    try:
        assert conn.row_factory is sqlite3.Row
    finally:
        conn.close()


def test_context_manager_closes(tmp_path):
    db = Database(tmp_path / "x.db")
    with db as conn:
        conn.execute("SELECT 1")
    assert db._conn is None
