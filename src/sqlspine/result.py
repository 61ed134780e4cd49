"""Query result envelope returned by executors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class QueryResult:
    """Outcome of executing one compiled query.

    ``rows`` are whatever the driver returned (``sqlite3.Row`` by default);
    turning them into model objects is the caller's business.
    """

    success: bool
    rows: list[Any] = field(default_factory=list)
    last_insert_id: Any = None
    row_count: int = -1
    elapsed_ms: float | None = None

    def first(self) -> Any | None:
        """First row, or ``None`` when the query produced no rows."""
        return self.rows[0] if self.rows else None

    def __iter__(self):
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


def was_execution_successful(result: Any) -> bool:
    """Whether an executor result reports success."""
    return bool(getattr(result, "success", False))


__all__ = ["QueryResult", "was_execution_successful"]
