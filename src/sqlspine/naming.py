"""Naming helpers used to derive table and key names from model classes."""

from __future__ import annotations

import re
from typing import Any

_UPPER_BOUNDARY_RE = re.compile(r"(.)(?=[A-Z])")


def class_basename(model: Any) -> str:
    """Return the simple class name of a type or instance."""
    model_type = model if isinstance(model, type) else type(model)
    return model_type.__name__


def snake(value: str, delimiter: str = "_") -> str:
    """Convert ``value`` to snake case.

    >>> snake("BlogPost")
    'blog_post'
    >>> snake("blog post")
    'blog_post'
    """
    if value.isalpha() and value.islower():
        return value

    words = value.split()
    if len(words) > 1:
        value = "".join(word[:1].upper() + word[1:] for word in words)
    else:
        value = "".join(words)

    return _UPPER_BOUNDARY_RE.sub(lambda m: m.group(1) + delimiter, value).lower()


def pluralize(value: str) -> str:
    """Naive pluralisation: always append ``s``."""
    return value + "s"


def default_table_name(model: Any) -> str:
    return pluralize(snake(class_basename(model)))


def default_relation_key(model: Any) -> str:
    return snake(class_basename(model)) + "_id"


__all__ = [
    "class_basename",
    "default_relation_key",
    "default_table_name",
    "pluralize",
    "snake",
]
