"""Read/write executor context.

Active-record operations accept an explicit executor. When none is passed
they fall back to a process-wide default ``Database``, installed with
``init_default()`` and removed with ``reset_default()``.

The default is meant to be configured once at startup. Reconfiguring it
while other threads are running queries is not thread-safe.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlspine.errors import ConnectionNotConfiguredError
from sqlspine.protocols import Executor


@dataclass(frozen=True)
class Database:
    """A pair of executors; writes go to ``writer``, reads to ``reader``."""

    reader: Executor
    writer: Executor | None = None

    def __post_init__(self) -> None:
        if self.writer is None:
            object.__setattr__(self, "writer", self.reader)


_default: Database | None = None


def init_default(reader: Executor, writer: Executor | None = None) -> Database:
    """Install the process-wide default database and return it."""
    global _default
    _default = Database(reader=reader, writer=writer)
    return _default


def reset_default() -> None:
    """Remove the process-wide default database."""
    global _default
    _default = None


def default_database() -> Database | None:
    return _default


def global_read() -> Executor:
    if _default is None:
        raise ConnectionNotConfiguredError("read")
    return _default.reader


def global_write() -> Executor:
    if _default is None:
        raise ConnectionNotConfiguredError("write")
    return _default.writer  # type: ignore[return-value]


def reader(connection: Executor | Database | None = None) -> Executor:
    """Executor for reading: explicit one first, then the default."""
    if isinstance(connection, Database):
        return connection.reader
    return connection if connection is not None else global_read()


def writer(connection: Executor | Database | None = None) -> Executor:
    """Executor for writing: explicit one first, then the default."""
    if isinstance(connection, Database):
        return connection.writer  # type: ignore[return-value]
    return connection if connection is not None else global_write()


__all__ = [
    "Database",
    "default_database",
    "global_read",
    "global_write",
    "init_default",
    "reader",
    "reset_default",
    "writer",
]
