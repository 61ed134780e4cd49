"""
Shared pytest fixtures for sqlspine tests.

This module provides:
- Default database / metadata cache cleanup for test isolation
- An in-memory SQLite executor with a small blog schema
- A recording executor for asserting on generated SQL
"""

from __future__ import annotations

from typing import Any

import pytest

from sqlspine.connection import SqliteConnection, connect
from sqlspine.context import Database, reset_default
from sqlspine.models import default_metadata_cache
from sqlspine.result import QueryResult

SCHEMA = """
create table authors (
    id integer primary key autoincrement,
    name text not null
);
create table blog_posts (
    id integer primary key autoincrement,
    author_id integer references authors (id),
    title text not null,
    status text not null default 'draft'
);
"""


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests that touch SQLite as integration, everything else as unit."""
    for item in items:
        if "sqlite_conn" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def clean_state():
    """Reset process-wide state before and after each test."""
    reset_default()
    default_metadata_cache().clear()
    yield
    reset_default()
    default_metadata_cache().clear()


@pytest.fixture
def sqlite_conn():
    conn = SqliteConnection(":memory:")
    conn.executescript(SCHEMA)
    yield conn
    conn.close()


@pytest.fixture
def db(sqlite_conn: SqliteConnection) -> Database:
    return Database(reader=connect(sqlite_conn))


class RecordingExecutor:
    """Executor double that records queries and replays canned results."""

    def __init__(self, results: list[QueryResult] | None = None) -> None:
        self.calls: list[tuple[str, list[Any]]] = []
        self._results = list(results or [])

    def __call__(self, sql: str, params: Any = ()) -> QueryResult:
        self.calls.append((sql, list(params)))
        if self._results:
            return self._results.pop(0)
        return QueryResult(success=True)

    @property
    def last(self) -> tuple[str, list[Any]]:
        return self.calls[-1]


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def recorder_factory() -> type[RecordingExecutor]:
    return RecordingExecutor
