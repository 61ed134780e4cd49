"""
Middleware pipeline for query execution.

Middlewares wrap query execution the way ASGI middlewares wrap a request:
each one sees the connection, the SQL and its params on the way in, hands
them (possibly modified) to ``next``, and sees the result on the way out.

Manifesto:
    Logging query timings, rewriting SQL, or short-circuiting a query for a
    test should each be a few lines in isolation rather than flags on a
    monolithic executor.

Architecture:
    ::

        compose_middleware([M1, M2], terminal)

        pipeline(conn, sql, params)
            │
            ▼
        M1 pre ──► M2 pre ──► terminal ──► M2 post ──► M1 post ──► result

    The chain is reduced right-to-left once, at setup time. When no terminal
    is given the innermost stage is a sentinel that raises
    ``MiddlewareChainExhaustedError``: reaching it means no stage executed
    the query.

Examples:
    >>> def upper(conn, sql, params, next):
    ...     return next(conn, sql.upper(), params)
    >>> pipeline = compose_middleware([upper], lambda conn, sql, params: sql)
    >>> pipeline(None, "select 1", [])
    'SELECT 1'

Tags:
    middleware, pipeline, interceptor, onion, sqlspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import time
from collections.abc import Callable, Sequence
from typing import Any

from sqlspine.errors import MiddlewareChainExhaustedError
from sqlspine.logging import get_logger
from sqlspine.protocols import Middleware, Stage
from sqlspine.result import QueryResult

logger = get_logger(__name__)


def unreachable_stage(connection: Any, sql: str, params: Sequence[Any]) -> Any:
    """Terminal sentinel: the chain ran out without executing the query."""
    raise MiddlewareChainExhaustedError()


def _link(current: Middleware, downstream: Stage) -> Stage:
    def stage(connection: Any, sql: str, params: Sequence[Any]) -> Any:
        return current(connection, sql, params, downstream)

    return stage


def compose_middleware(
    middlewares: Sequence[Middleware],
    terminal: Stage | None = None,
) -> Stage:
    """Compose ``middlewares`` into a single ``pipeline(connection, sql, params)``.

    Middlewares run in the order given; ``terminal`` (or the sentinel) runs
    last.
    """
    pipeline: Stage = terminal if terminal is not None else unreachable_stage
    for middleware in reversed(list(middlewares)):
        pipeline = _link(middleware, pipeline)

    logger.debug("middleware_composed", middlewares=len(middlewares))
    return pipeline


def query_logging_middleware(
    log: Any = None,
    *,
    include_sql: bool = True,
) -> Middleware:
    """Log every query with its elapsed time.

    Params are never logged, only their count.
    """
    log = log or logger

    def middleware(connection: Any, sql: str, params: Sequence[Any], next: Stage) -> Any:
        start = time.perf_counter()
        try:
            result = next(connection, sql, params)
        except Exception:
            log.warning(
                "query_failed",
                sql=sql if include_sql else None,
                param_count=len(params),
                elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        log.info(
            "query_executed",
            sql=sql if include_sql else None,
            param_count=len(params),
            elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return result

    return middleware


def timing_middleware(clock: Callable[[], float] = time.perf_counter) -> Middleware:
    """Record elapsed milliseconds on ``QueryResult.elapsed_ms``."""

    def middleware(connection: Any, sql: str, params: Sequence[Any], next: Stage) -> Any:
        start = clock()
        result = next(connection, sql, params)
        elapsed_ms = round((clock() - start) * 1000, 2)
        if isinstance(result, QueryResult):
            return dataclasses.replace(result, elapsed_ms=elapsed_ms)
        return result

    return middleware


__all__ = [
    "compose_middleware",
    "query_logging_middleware",
    "timing_middleware",
    "unreachable_stage",
]
