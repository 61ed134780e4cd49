"""Binding processors: one pure function per binding flag.

A processor turns ``(identifier, value)`` into a SQL fragment and the bind
values that fragment consumes::

    >>> equals_processor(False)("a", [1, 2])
    ('a in (?, ?)', [1, 2])
    >>> like_processor(True, False)("name", "smith")
    ('name like ?', ['%smith'])

The table returned by :func:`processors` maps a *flag pattern* (the binding
expression with its identifier replaced by ``id``) to its processor.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

Fragment = tuple[str, list[Any]]
Processor = Callable[[str, Any], Fragment]


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _markers(count: int) -> str:
    return ", ".join("?" for _ in range(count))


def _text(value: Any) -> str:
    """Render a scalar as SQL text: ``None`` is empty, booleans are ``1``/``0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def compound_condition(field: str, values: Any, op: str) -> Fragment:
    """Return ``field op ?`` joined by ``or``, parenthesized for >1 operand."""
    values = _as_list(values)
    condition = " or ".join(f"{field} {op} ?" for _ in values)
    if len(values) > 1:
        condition = f"({condition})"
    return condition, values


def equals_condition(field: str, value: Any, negate: bool) -> Fragment:
    return f"{field} {'!=' if negate else '='} ?", [value]


def in_condition(field: str, values: list[Any], negate: bool) -> Fragment:
    op = "not in" if negate else "in"
    return f"{field} {op} ({_markers(len(values))})", list(values)


def direct_processor() -> Processor:
    def process(identifier: str, value: Any) -> Fragment:
        if isinstance(value, (list, tuple)):
            return _markers(len(value)), list(value)
        return "?", [value]

    return process


def raw_processor() -> Processor:
    """Substitute the value into the SQL text; contributes no bind values."""

    def process(identifier: str, value: Any) -> Fragment:
        if isinstance(value, (list, tuple)):
            return ", ".join(_text(v) for v in value), []
        return _text(value), []

    return process


def equals_processor(negate: bool) -> Processor:
    def process(identifier: str, value: Any) -> Fragment:
        if isinstance(value, (list, tuple)) and len(value) > 1:
            return in_condition(identifier, list(value), negate)
        if isinstance(value, (list, tuple)):
            # An empty sequence still yields a single placeholder bound to None.
            return equals_condition(identifier, value[0] if value else None, negate)
        return equals_condition(identifier, value, negate)

    return process


def greater_processor(equal_to: bool) -> Processor:
    def process(identifier: str, value: Any) -> Fragment:
        return compound_condition(identifier, value, ">=" if equal_to else ">")

    return process


def lesser_processor(equal_to: bool) -> Processor:
    def process(identifier: str, value: Any) -> Fragment:
        return compound_condition(identifier, value, "<=" if equal_to else "<")

    return process


def like_processor(before: bool, after: bool) -> Processor:
    def process(identifier: str, value: Any) -> Fragment:
        params = []
        for v in _as_list(value):
            v = _text(v)
            if before:
                v = "%" + v
            if after:
                v = v + "%"
            params.append(v)
        return compound_condition(identifier, params, "like")

    return process


_PROCESSORS: Mapping[str, Processor] = MappingProxyType(
    {
        "id": direct_processor(),
        "*id": raw_processor(),
        "=id": equals_processor(False),
        "!id": equals_processor(True),
        ">id": greater_processor(False),
        ">=id": greater_processor(True),
        "<id": lesser_processor(False),
        "<=id": lesser_processor(True),
        "%id": like_processor(True, False),
        "%id%": like_processor(True, True),
        "id%": like_processor(False, True),
    }
)

RAW_FLAG = "*id"


def processors() -> Mapping[str, Processor]:
    """Return the read-only flag-pattern → processor table."""
    return _PROCESSORS


__all__ = [
    "Fragment",
    "Processor",
    "RAW_FLAG",
    "compound_condition",
    "direct_processor",
    "equals_condition",
    "equals_processor",
    "greater_processor",
    "in_condition",
    "lesser_processor",
    "like_processor",
    "processors",
    "raw_processor",
]
