"""
Active-record operations.

Each operation builds a query template from the model's metadata, binds it
with ``q()``, and runs it through a read or write executor. Rows come back
exactly as the executor produced them.

Manifesto:
    The ORM is a thin consumer of the binder: every statement it issues is
    a template a user could have written by hand. There is no identity map,
    no unit of work, and no lazy loading.

Examples:
    >>> execute = connect(SqliteConnection())
    >>> db = Database(reader=execute)
    >>> post = BlogPost(title="hello")
    >>> create(post, db)
    True
    >>> find_one(BlogPost, post.id, db)["title"]
    'hello'

Tags:
    orm, active-record, crud, relations, sqlspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Mapping
from typing import Any

from sqlspine.binding import q
from sqlspine.binding.template import IDENTIFIER_PATTERN
from sqlspine.context import Database, reader, writer
from sqlspine.errors import ModelResolutionError
from sqlspine.logging import get_logger
from sqlspine.models import (
    is_persisted,
    model_data_for_delete,
    model_data_for_insert,
    model_data_for_update,
    model_info_cached,
    model_type_of,
)
from sqlspine.naming import class_basename
from sqlspine.protocols import Executor
from sqlspine.result import was_execution_successful

logger = get_logger(__name__)

Conn = Executor | Database | None

_COLUMN_RE = re.compile(rf"^{IDENTIFIER_PATTERN}$")


def _columns(names: Iterable[str], model: Any) -> list[str]:
    columns = list(names)
    for name in columns:
        if not _COLUMN_RE.match(name):
            raise ModelResolutionError(
                f"{name!r} is not a valid column name",
                context={"model": class_basename(model), "column": name},
            )
    return columns


def _can_assign(model: Any) -> bool:
    if dataclasses.is_dataclass(model):
        return not type(model).__dataclass_params__.frozen  # type: ignore[attr-defined]
    return True


# ── Writes ───────────────────────────────────────────────────────────────


def create(model: Any, connection: Conn = None) -> bool:
    """Insert ``model``; on success the generated primary key is set on it."""
    execute = writer(connection)
    info = model_info_cached(model)
    data = model_data_for_insert(model)
    _columns(data["fields"], model)

    if data["fields"]:
        query = q("insert into {*table} ({*fields}) values ({values})", data)
    else:
        query = q("insert into {*table} default values", data)

    result = execute(*query)
    success = was_execution_successful(result)

    if success and getattr(model, info.primary_key, None) is None and _can_assign(model):
        last_id = getattr(result, "last_insert_id", None)
        if last_id is not None:
            setattr(model, info.primary_key, last_id)

    logger.debug("model_created", model=class_basename(model), success=success)
    return success


def update(model: Any, connection: Conn = None) -> bool:
    """Update every persisted field of ``model`` by primary key."""
    execute = writer(connection)
    data = model_data_for_update(model)
    fields: Mapping[str, Any] = data["fields"]
    columns = _columns(fields.keys(), model)

    if not columns:
        return True

    bindings = {f"set_{i}": fields[column] for i, column in enumerate(columns)}
    assignments = ", ".join(f"{column} = {{set_{i}}}" for i, column in enumerate(columns))
    template = "update {*table} set " + assignments + " where {*key} = {id}"

    result = execute(*q(template, {**bindings, "table": data["table"], "key": data["key"], "id": data["id"]}))
    success = was_execution_successful(result)
    logger.debug("model_updated", model=class_basename(model), success=success)
    return success


def delete(model: Any, connection: Conn = None) -> bool:
    """Delete ``model`` by primary key."""
    execute = writer(connection)
    data = model_data_for_delete(model)

    result = execute(*q("delete from {*table} where {*key} = {id}", data))
    success = was_execution_successful(result)
    logger.debug("model_deleted", model=class_basename(model), success=success)
    return success


def save(model: Any, connection: Conn = None) -> bool:
    """``update`` when the model already has a primary key, else ``create``."""
    if is_persisted(model):
        return update(model, connection)
    return create(model, connection)


# ── Reads ────────────────────────────────────────────────────────────────


def find_one(model: Any, id: Any, connection: Conn = None) -> Any | None:
    """Return the row of ``model`` with primary key ``id``, or ``None``."""
    execute = reader(connection)
    info = model_info_cached(model)

    query = q(
        "select * from {*table} where {*key} = {id}",
        {"id": id, "key": info.primary_key, "table": info.table_name},
    )
    rows = execute(*query).rows
    return rows[0] if rows else None


def find_all(
    model: Any,
    conditions: Mapping[str, Any] | None = None,
    *,
    order_by: str | None = None,
    limit: int | None = None,
    connection: Conn = None,
) -> list[Any]:
    """Return rows of ``model`` matching every condition.

    List values become ``in (...)`` conditions::

        find_all(Post, {"status": ["draft", "published"]}, order_by="id desc")
    """
    execute = reader(connection)
    info = model_info_cached(model)
    conditions = dict(conditions or {})
    columns = _columns(conditions.keys(), model)

    # Conditions get their own binding namespace.
    sql, params = q("select * from {*table}", {"table": info.table_name})
    if columns:
        where = q(" and ".join(f"{{={column}}}" for column in columns), conditions)
        sql += " where " + where.sql
        params += where.params

    tail = ""
    if order_by is not None:
        tail += " order by {*order}"
    if limit is not None:
        tail += " limit {limit}"
    if tail:
        suffix = q(tail, {"order": order_by, "limit": limit})
        sql += suffix.sql
        params += suffix.params

    return list(execute(sql, params).rows)


# ── Relations ────────────────────────────────────────────────────────────


def has_many(model: Any, related: Any, connection: Conn = None) -> list[Any]:
    """Rows of ``related`` that reference ``model`` through its relation key.

    ``Author`` → ``books.author_id = author.id``.
    """
    execute = reader(connection)
    owner = model_info_cached(model)
    target = model_info_cached(model_type_of(related))

    query = q(
        "select * from {*table} where {*foreign} = {id}",
        {
            "table": target.table_name,
            "foreign": owner.relation_key,
            "id": getattr(model, owner.primary_key),
        },
    )
    return list(execute(*query).rows)


def belongs_to(model: Any, related: Any, connection: Conn = None) -> Any | None:
    """The row of ``related`` referenced by ``model``, or ``None``.

    ``Book`` → ``authors.id = book.author_id``.
    """
    target = model_info_cached(model_type_of(related))
    foreign_id = getattr(model, target.relation_key, None)
    if foreign_id is None:
        return None
    return find_one(related, foreign_id, connection)


__all__ = [
    "belongs_to",
    "create",
    "delete",
    "find_all",
    "find_one",
    "has_many",
    "save",
    "update",
]
