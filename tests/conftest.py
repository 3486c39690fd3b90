"""
tests/conftest.py
Shared fixtures for the dataset_generator test suite.

Real file I/O happens inside pytest's tmp_path; databases are sqlite3
files or in-memory connections. The clipboard and HTTP are replaced with
monkeypatch where a test needs them.
"""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Iterable, Sequence, Tuple

import pytest

from dataset_generator.core.config import DEFAULT_OPTIONS, GeneratorOptions
from dataset_generator.core.layout import RenderContext
from dataset_generator.core.schema import ColumnDescriptor, Snapshot
from dataset_generator.registry import get_registry


# ---------------------------------------------------------------------------
# Snapshot helpers
# ---------------------------------------------------------------------------


def make_snapshot(
    columns: Iterable[Tuple[Any, ...]], rows: Iterable[Sequence[Any]] = ()
) -> Snapshot:
    """Build a snapshot from ``(name, type_info[, size])`` tuples."""
    return Snapshot(
        columns=tuple(ColumnDescriptor.from_type(*column) for column in columns),
        rows=tuple(tuple(row) for row in rows),
    )


def make_context(options: GeneratorOptions = None, **overrides) -> RenderContext:
    """Render context for the given options (defaults plus overrides)."""
    options = (options or DEFAULT_OPTIONS).with_overrides(**overrides)
    return RenderContext(options=options, target=get_registry().get_target(options.target))


# ---------------------------------------------------------------------------
# Snapshot fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def id_name_snapshot() -> Snapshot:
    """Two columns, no rows: Id integer and Name text of length 30."""
    return make_snapshot([("Id", "INTEGER"), ("Name", "VARCHAR(30)")])


@pytest.fixture()
def project_snapshot() -> Snapshot:
    """One project row with text, date, null and numeric values."""
    return make_snapshot(
        [
            ("Id", "INTEGER"),
            ("Title", "VARCHAR(50)"),
            ("Started", "DATE"),
            ("Finished", "DATE"),
            ("Budget", "DOUBLE"),
        ],
        [(1, "Team integration", date(2019, 9, 16), None, 1200.0)],
    )


@pytest.fixture()
def two_by_two_snapshot() -> Snapshot:
    return make_snapshot(
        [("Id", "INTEGER"), ("Code", "VARCHAR(10)")],
        [(1, "a"), (2, "b")],
    )


@pytest.fixture()
def numbered_snapshot() -> Snapshot:
    """Five rows numbered 1..5 in source order."""
    return make_snapshot(
        [("Id", "INTEGER"), ("Label", "VARCHAR(20)")],
        [(index, f"row {index}") for index in range(1, 6)],
    )


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

ORDERS_DDL = """
CREATE TABLE orders (
    Id INTEGER PRIMARY KEY,
    Title VARCHAR(50),
    Started DATE,
    Price DECIMAL(10,2),
    Active BOOLEAN,
    Notes TEXT
)
"""

ORDERS_ROWS = [
    (1, "Team integration", "2019-09-16", 1200.0, 1, None),
    (2, "O'Brien review", "2020-01-31", 12.5, 0, "line one\nline two"),
    (3, "Release", None, None, None, "done"),
]


def fill_orders(connection: sqlite3.Connection) -> None:
    connection.execute(ORDERS_DDL)
    connection.executemany("INSERT INTO orders VALUES (?, ?, ?, ?, ?, ?)", ORDERS_ROWS)
    connection.commit()


@pytest.fixture()
def orders_connection():
    """In-memory sqlite database with an ``orders`` table."""
    connection = sqlite3.connect(":memory:")
    fill_orders(connection)
    yield connection
    connection.close()


@pytest.fixture()
def orders_db_path(tmp_path):
    """sqlite database file with an ``orders`` table."""
    path = tmp_path / "shop.db"
    connection = sqlite3.connect(str(path))
    try:
        fill_orders(connection)
    finally:
        connection.close()
    return path
