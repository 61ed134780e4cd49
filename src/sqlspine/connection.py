"""Connections and executors.

``connect()`` decorates a driver connection with a middleware pipeline and
returns an *executor*: the ``executor(sql, params) -> QueryResult`` callable
that the active-record layer takes as its read or write connection.

Supported URL schemes for ``create_connection()``
--------------------------------------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                SQLite file
``(file path)``     ``./data/my.db``                             SQLite file
==================  ==========================================  ============

Usage
-----
::

    from sqlspine.connection import connect, create_connection
    from sqlspine.middleware import query_logging_middleware

    conn, info = create_connection()
    execute = connect(conn, [query_logging_middleware()])
    result = execute("select * from users where id = ?", [1])
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlspine.errors import ConfigError, QueryError
from sqlspine.logging import get_logger
from sqlspine.middleware import compose_middleware
from sqlspine.protocols import Connection, Executor, Middleware, Stage
from sqlspine.result import QueryResult

logger = get_logger(__name__)


# ── ConnectionInfo ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier, currently always ``"sqlite"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""


# ── SQLite adapter ───────────────────────────────────────────────────────


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Rows come back as ``sqlite3.Row`` so callers can index them by column
    name.
    """

    def __init__(self, path: str = ":memory:", *, row_factory: Any = sqlite3.Row) -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = row_factory

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, tuple(params))

    def executescript(self, script: str) -> sqlite3.Cursor:
        return self._conn.executescript(script)

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection`` (e.g. for pragmas)."""
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteConnection({self._conn!r})"


def create_connection(url: str | None = None) -> tuple[SqliteConnection, ConnectionInfo]:
    """Create a connection from a URL string. See the module docstring."""
    if url is None or url in ("memory", ":memory:"):
        return SqliteConnection(":memory:"), ConnectionInfo(
            backend="sqlite", persistent=False, url=":memory:"
        )

    if url.startswith("sqlite:///"):
        path_str = url[len("sqlite:///"):]
    elif "://" in url:
        scheme = url.split("://", 1)[0]
        raise ConfigError(
            f"unsupported database URL scheme {scheme!r}",
            context={"url": url},
        )
    else:
        path_str = url

    path = Path(path_str)
    path.parent.mkdir(parents=True, exist_ok=True)
    resolved = str(path.resolve())

    logger.debug("connection_created", backend="sqlite", path=resolved)
    return SqliteConnection(resolved), ConnectionInfo(
        backend="sqlite", persistent=True, url=url, resolved_path=resolved
    )


# ── Executors ────────────────────────────────────────────────────────────


def execute_query(*, autocommit: bool = True) -> Middleware:
    """Final middleware: run the query on the driver connection.

    Never calls ``next``. Driver errors are re-raised as ``QueryError``.
    """

    def middleware(connection: Connection, sql: str, params: Sequence[Any], next: Stage) -> QueryResult:
        try:
            cursor = connection.execute(sql, params)
            rows = cursor.fetchall() if cursor.description else []
            if autocommit:
                connection.commit()
        except sqlite3.Error as exc:
            raise QueryError(str(exc), context={"sql": sql}, cause=exc) from exc

        return QueryResult(
            success=True,
            rows=list(rows),
            last_insert_id=cursor.lastrowid,
            row_count=cursor.rowcount,
        )

    return middleware


def connect(
    connection: Connection,
    middlewares: Sequence[Middleware] = (),
    *,
    autocommit: bool = True,
) -> Executor:
    """Decorate ``connection`` with ``middlewares`` and return an executor.

    Query execution is always the last stage of the chain.
    """
    pipeline = compose_middleware([*middlewares, execute_query(autocommit=autocommit)])

    def executor(sql: str, params: Sequence[Any] = ()) -> QueryResult:
        return pipeline(connection, sql, list(params))

    return executor


__all__ = [
    "ConnectionInfo",
    "SqliteConnection",
    "connect",
    "create_connection",
    "execute_query",
]
