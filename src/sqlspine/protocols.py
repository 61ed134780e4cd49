"""
Canonical protocols for sqlspine's external collaborators.

The core never opens, pools, or closes database connections. It talks to
them through the small contracts declared here, and every module imports
them from this one place.

Architecture:
    ::

        Connection Protocol (driver side):
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)   → cursor-like result            │
        │ commit()               → Commit transaction            │
        │ rollback()             → Rollback transaction          │
        └────────────────────────────────────────────────────────┘

        Executor (caller side, produced by connect()):
        ┌────────────────────────────────────────────────────────┐
        │ executor(sql, params)  → QueryResult                   │
        └────────────────────────────────────────────────────────┘

        Middleware:
        ┌────────────────────────────────────────────────────────┐
        │ middleware(conn, sql, params, next) → QueryResult      │
        │ next(conn, sql, params)             → QueryResult      │
        └────────────────────────────────────────────────────────┘

Tags:
    protocol, connection, executor, middleware, sqlspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    Minimal SYNCHRONOUS connection interface.

    ``sqlite3.Connection`` satisfies it natively; ``SqliteConnection`` adds a
    row factory and keeps a single cursor.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute SQL statement with optional parameters. SYNC."""
        ...

    def commit(self) -> None:
        """Commit current transaction. SYNC."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction. SYNC."""
        ...


@runtime_checkable
class QueryResultProtocol(Protocol):
    """What every executor returns."""

    @property
    def success(self) -> bool: ...

    @property
    def rows(self) -> list[Any]: ...

    @property
    def last_insert_id(self) -> Any: ...


class Executor(Protocol):
    """A read or write "connection" as seen by the active-record layer."""

    def __call__(self, sql: str, params: Sequence[Any] = ()) -> QueryResultProtocol: ...


class Stage(Protocol):
    """One downstream step of a middleware pipeline."""

    def __call__(self, connection: Any, sql: str, params: Sequence[Any]) -> Any: ...


class Middleware(Protocol):
    """Interceptor wrapping the next stage of query execution.

    Must either call ``next`` (possibly with modified arguments) or return
    a result itself.
    """

    def __call__(
        self,
        connection: Any,
        sql: str,
        params: Sequence[Any],
        next: Stage,
    ) -> Any: ...


__all__ = [
    "Connection",
    "Executor",
    "Middleware",
    "QueryResultProtocol",
    "Stage",
]
