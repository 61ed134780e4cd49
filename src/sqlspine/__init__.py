"""sqlspine -- plain SQL templates, model metadata and middleware execution.

Architecture::

    Layer 1 -- Errors & Logging
        errors.py          Structured error hierarchy (SqlSpineError)
        logging.py         structlog configuration

    Layer 2 -- Core
        binding/           q(): template binder + binding processors
        naming.py          snake-case / plural naming conventions
        models.py          Model metadata resolver + write-once cache
        middleware.py      Middleware pipeline composition

    Layer 3 -- Execution
        protocols.py       Connection / Executor / Middleware contracts
        result.py          QueryResult envelope
        connection.py      connect(), SqliteConnection, create_connection()
        context.py         Database (reader/writer) + process default
        settings.py        pydantic-settings + bootstrap()

    Layer 4 -- Active record
        orm.py             create / find / update / delete / relations

Example::

    from sqlspine import q

    sql, params = q("select * from {*table} where {=id}", {"table": "users", "id": [1, 2]})
    # ("select * from users where id in (?, ?)", [1, 2])
"""

from sqlspine.binding import CompiledQuery, bind, q
from sqlspine.connection import SqliteConnection, connect, create_connection
from sqlspine.context import Database, global_read, global_write, init_default, reset_default
from sqlspine.errors import (
    BindingError,
    ConfigError,
    ConnectionNotConfiguredError,
    InvalidValueTypeError,
    MiddlewareChainExhaustedError,
    MissingIdentifierError,
    ModelResolutionError,
    QueryError,
    SqlSpineError,
    TemplateSyntaxError,
    UnknownBindingFlagError,
)
from sqlspine.middleware import compose_middleware, query_logging_middleware, timing_middleware
from sqlspine.models import ModelMetadata, create_model, model_info, model_info_cached
from sqlspine.orm import belongs_to, create, delete, find_all, find_one, has_many, save, update
from sqlspine.result import QueryResult

__version__ = "0.1.0"

__all__ = [
    # binding
    "CompiledQuery",
    "bind",
    "q",
    # models
    "ModelMetadata",
    "create_model",
    "model_info",
    "model_info_cached",
    # execution
    "Database",
    "QueryResult",
    "SqliteConnection",
    "compose_middleware",
    "connect",
    "create_connection",
    "global_read",
    "global_write",
    "init_default",
    "query_logging_middleware",
    "reset_default",
    "timing_middleware",
    # orm
    "belongs_to",
    "create",
    "delete",
    "find_all",
    "find_one",
    "has_many",
    "save",
    "update",
    # errors
    "BindingError",
    "ConfigError",
    "ConnectionNotConfiguredError",
    "InvalidValueTypeError",
    "MiddlewareChainExhaustedError",
    "MissingIdentifierError",
    "ModelResolutionError",
    "QueryError",
    "SqlSpineError",
    "TemplateSyntaxError",
    "UnknownBindingFlagError",
]
