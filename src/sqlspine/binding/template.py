"""Query template binder.

Templates are plain SQL with ``{…}`` binding expressions. Each expression is
an identifier from the data mapping, optionally wrapped in a flag that picks
how it is rendered::

    >>> q("select * from {*table} where {=status} and {>=age}",
    ...   {"table": "users", "status": ["new", "active"], "age": 18})
    CompiledQuery(sql='select * from users where status in (?, ?) and age >= ?',
                  params=['new', 'active', 18])

Binding is a single left-to-right pass with no backtracking and no nested
expressions. Literal text outside the braces is never inspected.
"""

from __future__ import annotations

import numbers
import re
from collections.abc import Callable, Mapping
from typing import Any, NamedTuple

from sqlspine.binding.processors import RAW_FLAG, Processor, processors
from sqlspine.errors import (
    InvalidValueTypeError,
    MissingIdentifierError,
    TemplateSyntaxError,
    UnknownBindingFlagError,
)
from sqlspine.logging import get_logger

logger = get_logger(__name__)

IDENTIFIER_PATTERN = "[_a-zA-Z0-9]+"

_EXPRESSION_RE = re.compile(
    rf"^(?P<prefix>[^_a-zA-Z0-9]*)(?P<identifier>{IDENTIFIER_PATTERN})(?P<suffix>[^_a-zA-Z0-9]*)$"
)


class CompiledQuery(NamedTuple):
    """Final SQL plus its bind values, in placeholder order."""

    sql: str
    params: list[Any]


def is_value_sane(value: Any) -> bool:
    """Return whether ``value`` can be bound as a single parameter."""
    if value is None or isinstance(value, (str, bool)):
        return True
    return isinstance(value, numbers.Real)


def are_values_scalar(value: Any) -> bool:
    """Return whether ``value`` is a scalar or a list/tuple of scalars."""
    if isinstance(value, (list, tuple)):
        return all(is_value_sane(v) for v in value)
    return is_value_sane(value)


def parse_expression(expression: str, *, template: str | None = None) -> tuple[str, str]:
    """Split a binding expression into ``(identifier, flag_pattern)``.

    The flag pattern is the expression with its identifier replaced by
    ``id``, e.g. ``"%name%"`` → ``("name", "%id%")``.
    """
    match = _EXPRESSION_RE.match(expression)
    if match is None:
        raise UnknownBindingFlagError(expression, template=template)
    return match["identifier"], f"{match['prefix']}id{match['suffix']}"


def next_binding_position(template: str, start: int = 0) -> tuple[int, int] | None:
    """Return the indexes of the next ``{`` and its closing ``}``, or None."""
    opens = template.find("{", start)
    if opens == -1:
        return None

    closes = template.find("}", opens + 1)
    if closes == -1:
        raise TemplateSyntaxError(opens, template=template)

    return opens, closes


def parse_bindings(template: str, handler: Callable[[str], tuple[str, list[Any]]]) -> CompiledQuery:
    """Replace every binding expression in ``template`` using ``handler``.

    ``handler`` receives the raw text between the braces and returns the
    fragment to splice in plus the values it binds.
    """
    parts: list[str] = []
    params: list[Any] = []
    cursor = 0

    position = next_binding_position(template)
    while position is not None:
        opens, closes = position
        parts.append(template[cursor:opens])

        fragment, values = handler(template[opens + 1 : closes])
        parts.append(fragment)
        params.extend(values)

        cursor = closes + 1
        position = next_binding_position(template, cursor)

    parts.append(template[cursor:])
    return CompiledQuery("".join(parts), params)


def invoke_processor(
    table: Mapping[str, Processor],
    data: Mapping[str, Any],
    template: str,
) -> Callable[[str], tuple[str, list[Any]]]:
    """Build the handler that resolves one expression against ``data``."""

    def handle(expression: str) -> tuple[str, list[Any]]:
        identifier, flag = parse_expression(expression, template=template)

        processor = table.get(flag)
        if processor is None:
            raise UnknownBindingFlagError(expression, template=template)

        if identifier not in data:
            raise MissingIdentifierError(identifier, template=template)

        value = data[identifier]
        if flag != RAW_FLAG and not are_values_scalar(value):
            raise InvalidValueTypeError(identifier, value, template=template)

        return processor(identifier, value)

    return handle


def q(template: str, data: Mapping[str, Any] | None = None) -> CompiledQuery:
    """Bind ``data`` into ``template`` and return ``(sql, params)``.

    Raises:
        TemplateSyntaxError: a ``{`` has no closing ``}``.
        UnknownBindingFlagError: an expression's flag selects no processor.
        MissingIdentifierError: an identifier is absent from ``data``.
        InvalidValueTypeError: a non-raw value is not scalar / list of scalars.
    """
    data = data or {}
    compiled = parse_bindings(template, invoke_processor(processors(), data, template))
    logger.debug("template_bound", params=len(compiled.params))
    return compiled


bind = q


__all__ = [
    "CompiledQuery",
    "IDENTIFIER_PATTERN",
    "are_values_scalar",
    "bind",
    "invoke_processor",
    "is_value_sane",
    "next_binding_position",
    "parse_bindings",
    "parse_expression",
    "q",
]
