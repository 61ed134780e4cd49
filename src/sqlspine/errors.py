"""
Structured error types for sqlspine.

Every failure raised by the binder, the model metadata resolver, the
middleware pipeline and the connection layer is a ``SqlSpineError``. The
errors are programmer-facing contract violations: none of them is
retryable, and all of them propagate to the caller immediately.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per contract that can be broken
    - **Rich Context:** Errors carry the template, identifier or model involved
    - **Error Chaining:** Driver exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       SqlSpineError                              │
        │              (category, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  BindingError              ModelResolutionError                  │
        │  (BINDING)                 (MODEL)                               │
        │     │                                                            │
        │  TemplateSyntaxError       MiddlewareChainExhaustedError         │
        │  UnknownBindingFlagError   (INTERNAL)                            │
        │  MissingIdentifierError                                          │
        │  InvalidValueTypeError     ConfigError        QueryError         │
        │                            (CONFIG)           (DATABASE)         │
        │                               │                                  │
        │                 ConnectionNotConfiguredError                     │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> from sqlspine.errors import MissingIdentifierError
    >>> err = MissingIdentifierError("a", template="where {a}")
    >>> err.to_dict()["category"]
    'BINDING'

Tags:
    error-handling, exception-hierarchy, error-context, sqlspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    BINDING = "BINDING"           # Template syntax, flags, data mapping
    MODEL = "MODEL"               # Model reflection / instantiation
    CONFIG = "CONFIG"             # Settings, missing default connections
    DATABASE = "DATABASE"         # Driver failures surfaced by the terminal stage
    INTERNAL = "INTERNAL"         # Misconfigured middleware, unexpected state


class SqlSpineError(Exception):
    """
    Base exception for all sqlspine errors.

    Subclasses set ``default_category``. Context is a plain dict so that
    callers can attach anything useful for logging via ``with_context``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        return False

    def with_context(self, **kwargs: Any) -> SqlSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("insert failed").with_context(table="users")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# BINDING ERRORS
# =============================================================================


class BindingError(SqlSpineError):
    """A query template could not be bound against its data mapping."""

    default_category = ErrorCategory.BINDING

    def __init__(self, message: str, *, template: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.template = template
        if template is not None:
            self.context.setdefault("template", template)


class TemplateSyntaxError(BindingError):
    """A ``{`` was opened without a matching ``}`` later in the template."""

    def __init__(self, position: int, *, template: str | None = None, **kwargs: Any):
        self.position = position
        super().__init__(
            f'missing closing "}}" after character {position}',
            template=template,
            **kwargs,
        )
        self.context["position"] = position


class UnknownBindingFlagError(BindingError):
    """The flag around an identifier does not select any processor."""

    def __init__(self, expression: str, *, template: str | None = None, **kwargs: Any):
        self.expression = expression
        super().__init__(
            f'unable to process expression "{expression}"',
            template=template,
            **kwargs,
        )
        self.context["expression"] = expression


class MissingIdentifierError(BindingError):
    """The template references an identifier absent from the data mapping."""

    def __init__(self, identifier: str, *, template: str | None = None, **kwargs: Any):
        self.identifier = identifier
        super().__init__(
            f'"{identifier}" does not exist in given data',
            template=template,
            **kwargs,
        )
        self.context["identifier"] = identifier


class InvalidValueTypeError(BindingError):
    """A bound value is neither a scalar nor a sequence of scalars."""

    def __init__(
        self,
        identifier: str,
        value: Any,
        *,
        template: str | None = None,
        **kwargs: Any,
    ):
        self.identifier = identifier
        self.value = value
        super().__init__(
            f'value for "{identifier}" must be a scalar or a sequence of scalars '
            f'("{type(value).__name__}" given)',
            template=template,
            **kwargs,
        )
        self.context["identifier"] = identifier
        self.context["value_type"] = type(value).__name__


# =============================================================================
# MODEL ERRORS
# =============================================================================


class ModelResolutionError(SqlSpineError):
    """A model type could not be located, reflected or instantiated."""

    default_category = ErrorCategory.MODEL


# =============================================================================
# MIDDLEWARE ERRORS
# =============================================================================


class MiddlewareChainExhaustedError(SqlSpineError):
    """
    The middleware pipeline fell through to its sentinel stage.

    Only raised when a middleware delegates past the last real stage, which
    means the query was never executed.
    """

    default_category = ErrorCategory.INTERNAL

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(
            message
            or "the middleware stack was executed without the possibility of a "
            "return value, which indicates that the query was not executed",
            **kwargs,
        )


# =============================================================================
# CONFIGURATION / DATABASE ERRORS
# =============================================================================


class ConfigError(SqlSpineError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class ConnectionNotConfiguredError(ConfigError):
    """No default read or write executor has been installed."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"no {role} connection has been set globally", context={"role": role})


class QueryError(SqlSpineError):
    """The database driver rejected a compiled query."""

    default_category = ErrorCategory.DATABASE


__all__ = [
    "ErrorCategory",
    "SqlSpineError",
    "BindingError",
    "TemplateSyntaxError",
    "UnknownBindingFlagError",
    "MissingIdentifierError",
    "InvalidValueTypeError",
    "ModelResolutionError",
    "MiddlewareChainExhaustedError",
    "ConfigError",
    "ConnectionNotConfiguredError",
    "QueryError",
]
