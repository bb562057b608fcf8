"""Row iteration: deliver query results column by column to a visitor.

Callers never see ``sqlite3`` cursors. A query's rows are walked here and
each ``(column_name, value)`` pair is handed to a caller-supplied visitor.
The same protocol serves the registry listings and the schema version read.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

import structlog

log = structlog.get_logger(__name__)

Visitor = Callable[[str, str | None], int | None]
"""Per-column callback. ``None`` or ``0`` means success, anything else a failure code."""


@dataclass(frozen=True)
class VisitFailure:
    """The first column a visitor reported as failed."""

    column: str
    value: str | None
    code: int


@dataclass(frozen=True)
class IterationResult:
    """Outcome of driving a visitor over a query's rows."""

    rows: int = 0
    failure: VisitFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.ok


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="surrogateescape")
    return str(value)


def iterate_rows(cursor: sqlite3.Cursor, visitor: Visitor) -> IterationResult:
    """Invoke *visitor* for every column of every row in *cursor*.

    Every column of a row is visited even after one of them fails. Once a
    row has failed, no further rows are fetched and the first failure is
    reported. Exceptions raised by the visitor propagate.
    """
    columns = [desc[0] for desc in cursor.description or ()]
    rows = 0

    for row in cursor:
        rows += 1
        failure: VisitFailure | None = None
        for name, raw in zip(columns, row):
            value = _as_text(raw)
            code = visitor(name, value)
            if code and failure is None:
                failure = VisitFailure(column=name, value=value, code=int(code))
        if failure is not None:
            log.debug("row_visit_failed", column=failure.column, code=failure.code, rows=rows)
            return IterationResult(rows=rows, failure=failure)

    return IterationResult(rows=rows)
