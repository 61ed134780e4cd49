"""
Model metadata resolution.

Derives ``{primary_key, table_name, relation_key}`` for a model class from
naming conventions, class-level descriptors, or explicit override methods.

Manifesto:
    Models are plain Python classes. They should not have to inherit from
    anything, register anywhere, or declare a schema to be persisted. A
    class called ``BlogPost`` lives in ``blog_posts``, is keyed by ``id``,
    and is referenced from other tables as ``blog_post_id``. When that is
    wrong, the model says so and the override wins unconditionally.

    - **Convention first:** No configuration for the common case
    - **Explicit capabilities:** Overrides are small runtime-checkable protocols
    - **Write-once cache:** Metadata per type is computed once per process

Architecture:
    ::

        model_info(model)
            │
            ├── str  ──► load_model_type("pkg.mod:Class")
            ├── type ──► resolve on the class (instance made only if needed)
            └── obj  ──► resolve on the instance
                          │
              override method  >  class descriptor  >  convention
              with_table_name()   __tablename__        snake(Name) + "s"
              with_primary_key()  __primary_key__      "id"
              with_relation_key() __relation_key__     snake(Name) + "_id"

Examples:
    >>> class BlogPost:
    ...     pass
    >>> model_info(BlogPost)
    ModelMetadata(primary_key='id', table_name='blog_posts', relation_key='blog_post_id')

    >>> class Person:
    ...     __tablename__ = "people"
    >>> model_info(Person).table_name
    'people'

Guardrails:
    ❌ DON'T: Return non-string values from override methods
    ✅ DO: Use classmethods for overrides so no instance is needed

Tags:
    model, metadata, conventions, active-record, sqlspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import importlib
import inspect
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from sqlspine.errors import ModelResolutionError
from sqlspine.logging import get_logger
from sqlspine.naming import class_basename, default_relation_key, default_table_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class ModelMetadata:
    """Table and key names for one model type."""

    primary_key: str
    table_name: str
    relation_key: str


# ── Override capabilities ────────────────────────────────────────────────


@runtime_checkable
class HasPrimaryKey(Protocol):
    def with_primary_key(self) -> str: ...


@runtime_checkable
class HasTableName(Protocol):
    def with_table_name(self) -> str: ...


@runtime_checkable
class HasRelationKey(Protocol):
    def with_relation_key(self) -> str: ...


@runtime_checkable
class HasPersistenceData(Protocol):
    def with_data_for_persistence(self) -> Mapping[str, Any]: ...


# (capability, override method, class descriptor, field)
_OVERRIDES = (
    (HasPrimaryKey, "with_primary_key", "__primary_key__", "primary_key"),
    (HasTableName, "with_table_name", "__tablename__", "table_name"),
    (HasRelationKey, "with_relation_key", "__relation_key__", "relation_key"),
)


# ── Model types and instances ────────────────────────────────────────────


def load_model_type(path: str) -> type:
    """Import a model class from ``"pkg.module:Class"`` or ``"pkg.module.Class"``."""
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ModelResolutionError(f"invalid model path {path!r}", context={"model": path})

    try:
        module = importlib.import_module(module_name)
        model_type = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ModelResolutionError(
            f"model {path!r} does not exist", context={"model": path}, cause=exc
        ) from exc

    if not isinstance(model_type, type):
        raise ModelResolutionError(f"{path!r} is not a class", context={"model": path})
    return model_type


def _required_parameters(model_type: type) -> list[str]:
    try:
        signature = inspect.signature(model_type)
    except (TypeError, ValueError):
        return []
    return [
        name
        for name, param in signature.parameters.items()
        if param.default is inspect.Parameter.empty
        and param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def create_model(model: type | str, with_constructor: bool = True) -> Any:
    """Create an instance of ``model``.

    With ``with_constructor=False`` the instance is allocated without running
    ``__init__``, so models with required constructor arguments can still be
    inspected.

    Raises:
        ModelResolutionError: the model does not exist, or its constructor
            needs arguments and the constructor was not bypassed.
    """
    model_type = load_model_type(model) if isinstance(model, str) else model
    if not isinstance(model_type, type):
        raise ModelResolutionError(
            "create_model() can only create instances from a class reference",
            context={"model": repr(model)},
        )

    name = model_type.__qualname__
    if not with_constructor:
        try:
            return model_type.__new__(model_type)
        except TypeError as exc:
            raise ModelResolutionError(
                f"unable to allocate {name} without its constructor", cause=exc
            ) from exc

    required = _required_parameters(model_type)
    if required:
        raise ModelResolutionError(
            f"create_model() cannot create instances of {name}: "
            f"required constructor arguments {required}",
            context={"model": name, "required": required},
        )
    try:
        return model_type()
    except TypeError as exc:
        raise ModelResolutionError(f"unable to construct {name}", cause=exc) from exc


def _is_model_type(value: Any) -> bool:
    return isinstance(value, type) and value.__module__ != "builtins"


def model_type_of(model: Any) -> type:
    """Return the model class for a class, instance, or dotted path."""
    if isinstance(model, str):
        return load_model_type(model)
    if _is_model_type(model):
        return model
    if not isinstance(model, type) and _is_model_type(type(model)):
        return type(model)
    raise ModelResolutionError(
        "model_info() can only return data from a class reference or instance",
        context={"model": repr(model)},
    )


# ── Resolution ───────────────────────────────────────────────────────────


def _checked(value: Any, model_type: type, source: str) -> str:
    if not isinstance(value, str) or not value:
        raise ModelResolutionError(
            f"{model_type.__qualname__}.{source} must be a non-empty string, got {value!r}",
            context={"model": model_type.__qualname__},
        )
    return value


def _resolve(model_type: type, instance: Any | None) -> ModelMetadata:
    defaults = {
        "primary_key": "id",
        "table_name": default_table_name(model_type),
        "relation_key": default_relation_key(model_type),
    }

    resolved: dict[str, str] = {}
    for capability, method, descriptor, field in _OVERRIDES:
        if issubclass(model_type, capability):
            static = inspect.getattr_static(model_type, method)
            if isinstance(static, (classmethod, staticmethod)):
                target = model_type
            else:
                if instance is None:
                    instance = create_model(model_type, with_constructor=False)
                target = instance
            override = getattr(target, method)
            if not callable(override):
                raise ModelResolutionError(
                    f"{model_type.__qualname__}.{method} must be a method, got {override!r}",
                    context={"model": model_type.__qualname__},
                )
            resolved[field] = _checked(override(), model_type, f"{method}()")
        elif getattr(model_type, descriptor, None) is not None:
            resolved[field] = _checked(getattr(model_type, descriptor), model_type, descriptor)
        else:
            resolved[field] = defaults[field]

    return ModelMetadata(**resolved)


def model_info(model: Any) -> ModelMetadata:
    """Return the metadata for a model class, instance, or dotted path.

    Override precedence: ``with_*()`` methods, then ``__tablename__`` /
    ``__primary_key__`` / ``__relation_key__`` class attributes, then
    naming conventions.
    """
    model_type = model_type_of(model)
    instance = None if isinstance(model, (type, str)) else model
    return _resolve(model_type, instance)


class MetadataCache:
    """Process-wide, thread-safe, write-once cache of ``ModelMetadata``.

    Entries are keyed by type identity. When two threads resolve the same
    type concurrently the first stored entry wins and both callers receive
    it. There is no eviction.
    """

    def __init__(self) -> None:
        self._entries: dict[type, ModelMetadata] = {}
        self._lock = threading.Lock()

    def get_or_resolve(self, model: Any) -> ModelMetadata:
        model_type = model_type_of(model)
        with self._lock:
            cached = self._entries.get(model_type)
        if cached is not None:
            return cached

        info = model_info(model)
        with self._lock:
            stored = self._entries.setdefault(model_type, info)
        if stored is info:
            logger.debug("model_metadata_cached", model=class_basename(model_type))
        return stored

    def __contains__(self, model: Any) -> bool:
        with self._lock:
            return model_type_of(model) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every entry. Intended for tests."""
        with self._lock:
            self._entries.clear()


_default_cache = MetadataCache()


def default_metadata_cache() -> MetadataCache:
    return _default_cache


def model_info_cached(model: Any) -> ModelMetadata:
    """``model_info`` memoized in the process-wide cache."""
    return _default_cache.get_or_resolve(model)


# ── Persistence data ─────────────────────────────────────────────────────


def model_data(model: Any) -> dict[str, Any]:
    """Return the data to persist for ``model``.

    Public attributes by default; a model can take control by implementing
    ``with_data_for_persistence()``.
    """
    if isinstance(model, HasPersistenceData):
        data = model.with_data_for_persistence()
    elif dataclasses.is_dataclass(model) and not isinstance(model, type):
        data = {f.name: getattr(model, f.name) for f in dataclasses.fields(model)}
    else:
        data = getattr(model, "__dict__", None)

    if not isinstance(data, Mapping):
        raise ModelResolutionError(
            "model_data() was unable to determine the data for the given model",
            context={"model": class_basename(model)},
        )
    return {key: value for key, value in data.items() if not key.startswith("_")}


def is_persisted(model: Any) -> bool:
    """Whether the model's primary key attribute holds a value."""
    info = model_info_cached(model)
    return getattr(model, info.primary_key, None) is not None


def model_data_for_insert(model: Any) -> dict[str, Any]:
    """``q()`` data for an insert; an unset primary key is left to the database."""
    info = model_info_cached(model)
    data = model_data(model)

    if data.get(info.primary_key) is None:
        data.pop(info.primary_key, None)

    return {
        "table": info.table_name,
        "fields": list(data.keys()),
        "values": list(data.values()),
    }


def model_data_for_update(model: Any) -> dict[str, Any]:
    """``q()`` data for an update keyed by the primary key."""
    info = model_info_cached(model)
    data = model_data(model)

    primary_key = info.primary_key
    if primary_key not in data:
        raise ModelResolutionError(
            f"model data has no primary key {primary_key!r}",
            context={"model": class_basename(model)},
        )
    id_ = data.pop(primary_key)

    return {
        "fields": data,
        "id": id_,
        "key": primary_key,
        "table": info.table_name,
    }


def model_data_for_delete(model: Any) -> dict[str, Any]:
    """``q()`` data for a delete keyed by the primary key."""
    info = model_info_cached(model)
    data = model_data(model)

    if info.primary_key not in data:
        raise ModelResolutionError(
            f"model data has no primary key {info.primary_key!r}",
            context={"model": class_basename(model)},
        )

    return {
        "id": data[info.primary_key],
        "key": info.primary_key,
        "table": info.table_name,
    }


__all__ = [
    "HasPersistenceData",
    "HasPrimaryKey",
    "HasRelationKey",
    "HasTableName",
    "MetadataCache",
    "ModelMetadata",
    "create_model",
    "default_metadata_cache",
    "is_persisted",
    "load_model_type",
    "model_data",
    "model_data_for_delete",
    "model_data_for_insert",
    "model_data_for_update",
    "model_info",
    "model_info_cached",
    "model_type_of",
]
