"""Environment-driven settings and one-call bootstrap.

Fields
──────
database_url : ``memory`` / ``:memory:`` / ``sqlite:///path`` / file path
log_level    : structlog log level
json_logs    : JSON (True), console (False), or auto-detect by TTY (unset)
log_queries  : Install ``query_logging_middleware`` on the default executor
autocommit   : Commit after every executed statement

Every field can be set through ``SQLSPINE_<FIELD>`` environment variables
or a ``.env`` file::

    SQLSPINE_DATABASE_URL=sqlite:///./data/app.db
    SQLSPINE_LOG_QUERIES=true
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlspine.connection import connect, create_connection
from sqlspine.context import Database, init_default
from sqlspine.logging import configure_logging, get_logger
from sqlspine.middleware import query_logging_middleware
from sqlspine.protocols import Middleware

logger = get_logger(__name__)


class SqlSpineSettings(BaseSettings):
    """Settings for the default database and logging."""

    model_config = SettingsConfigDict(
        env_prefix="SQLSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(
        default="memory",
        description="Connection URL understood by create_connection()",
    )
    autocommit: bool = True

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None
    log_queries: bool = False


def bootstrap(
    settings: SqlSpineSettings | None = None,
    middlewares: list[Middleware] | None = None,
) -> Database:
    """Configure logging, open the connection and install the default database.

    Extra ``middlewares`` run after the query logger (when enabled).
    """
    settings = settings or SqlSpineSettings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    conn, info = create_connection(settings.database_url)

    chain: list[Middleware] = []
    if settings.log_queries:
        chain.append(query_logging_middleware())
    chain.extend(middlewares or [])

    executor = connect(conn, chain, autocommit=settings.autocommit)
    database = init_default(executor)
    logger.info(
        "database_bootstrapped",
        backend=info.backend,
        persistent=info.persistent,
        middlewares=len(chain),
    )
    return database


__all__ = ["SqlSpineSettings", "bootstrap"]
