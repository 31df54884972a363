"""Pytest fixtures for querypad tests."""

from __future__ import annotations

import os
import sqlite3
import tempfile
from pathlib import Path

import pytest

_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="querypad-test-config-"))
os.environ.setdefault("QUERYPAD_CONFIG_DIR", str(_TEST_CONFIG_DIR))
os.environ.pop("QUERYPAD_SETTINGS_PATH", None)


@pytest.fixture
def sqlite_db_path(tmp_path: Path) -> Path:
    """SQLite database with customers and orders tables."""
    db_path = tmp_path / "shop.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT
        );
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER REFERENCES customers(id),
            total REAL,
            created_at TEXT
        );
        CREATE VIEW big_orders AS SELECT * FROM orders WHERE total > 100;
        INSERT INTO customers (id, name, email) VALUES
            (1, 'Alice', 'alice@example.com'),
            (2, 'Bob', NULL),
            (3, 'Carol', 'carol@example.com');
        INSERT INTO orders (id, customer_id, total, created_at) VALUES
            (1, 1, 250.0, '2024-01-05'),
            (2, 1, 40.5, '2024-01-09'),
            (3, 2, 99.99, '2024-02-01');
        """
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    """Path for an isolated query history file."""
    return tmp_path / "query_history.json"
