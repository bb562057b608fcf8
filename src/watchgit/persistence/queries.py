"""Fixed registry statements, always executed with bound parameters."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

import structlog

from watchgit.exceptions import (
    AllocationError,
    ExecutionError,
    InvalidAliasError,
    PathResolutionError,
)
from watchgit.persistence.rows import IterationResult, Visitor, iterate_rows
from watchgit.persistence.schema import ALIAS_COLUMN, PATH_COLUMN, TABLE_NAME

log = structlog.get_logger(__name__)

_INSERT_SQL = f"INSERT INTO {TABLE_NAME} ({ALIAS_COLUMN}, {PATH_COLUMN}) VALUES (?, ?)"

_DELETE_BY_ALIAS = f"DELETE FROM {TABLE_NAME} WHERE {ALIAS_COLUMN} = ?"

_SELECT_ALL = f"SELECT {ALIAS_COLUMN}, {PATH_COLUMN} FROM {TABLE_NAME} ORDER BY {ALIAS_COLUMN} ASC"

_SELECT_BY_ALIAS = f"SELECT {PATH_COLUMN} FROM {TABLE_NAME} WHERE {ALIAS_COLUMN} = ?"


def validate_alias(alias: str) -> str:
    """Reject aliases that are empty, blank, or hold a NUL character."""
    if not isinstance(alias, str) or not alias.strip():
        raise InvalidAliasError(f"Alias must be a non-empty string, got {alias!r}")
    if "\x00" in alias:
        raise InvalidAliasError(f"Alias must not contain NUL characters: {alias!r}")
    try:
        alias.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidAliasError(f"Alias is not valid UTF-8 text: {alias!r}") from exc
    return alias


def canonicalize_path(path: str | Path) -> str:
    """Return the absolute, symlink-resolved form of an existing *path*.

    Paths whose name is not valid UTF-8 exist on POSIX filesystems but
    cannot be stored as SQLite text, so they are rejected here.
    """
    if not str(path):
        raise PathResolutionError("Repository path must not be empty")
    try:
        canonical = str(Path(path).resolve(strict=True))
        canonical.encode("utf-8")
    except (OSError, RuntimeError, ValueError) as exc:
        # ValueError covers embedded NUL bytes and UnicodeEncodeError
        log.warning("path_resolution_failed", path=repr(path), error=str(exc))
        raise PathResolutionError(f"Cannot resolve repository path {str(path)!r}: {exc}") from exc
    return canonical


def _execute(conn: sqlite3.Connection, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
    try:
        return conn.execute(sql, params)
    except (sqlite3.Error, UnicodeEncodeError) as exc:
        log.warning("statement_failed", sql=sql, error=str(exc))
        raise ExecutionError(str(exc)) from exc
    except MemoryError as exc:
        raise AllocationError(f"Out of memory running statement: {sql}") from exc


def add_registration(conn: sqlite3.Connection, alias: str, path: str | Path) -> str:
    """Insert ``(alias, canonical path)`` and return the canonical path.

    A repeated alias or path surfaces as ExecutionError from the UNIQUE
    constraints; nothing is pre-checked here.
    """
    validate_alias(alias)
    canonical = canonicalize_path(path)
    _execute(conn, _INSERT_SQL, (alias, canonical))
    log.info("registration_added", alias=alias, path=canonical)
    return canonical


def remove_registration(conn: sqlite3.Connection, alias: str) -> int:
    """Delete the registration for *alias*. Returns the number of rows removed."""
    cursor = _execute(conn, _DELETE_BY_ALIAS, (alias,))
    count = cursor.rowcount if cursor.rowcount >= 0 else 0
    log.info("registration_removed", alias=alias, count=count)
    return count


def _drive(cursor: sqlite3.Cursor, visitor: Visitor) -> IterationResult:
    try:
        return iterate_rows(cursor, visitor)
    except sqlite3.Error as exc:
        log.warning("row_fetch_failed", error=str(exc))
        raise ExecutionError(str(exc)) from exc
    except MemoryError as exc:
        raise AllocationError("Out of memory while reading rows") from exc


def list_all(conn: sqlite3.Connection, visitor: Visitor) -> IterationResult:
    """Visit every ``(aliases, paths)`` pair, ordered by alias."""
    return _drive(_execute(conn, _SELECT_ALL), visitor)


def list_by_alias(conn: sqlite3.Connection, alias: str, visitor: Visitor) -> IterationResult:
    """Visit the ``paths`` column of every row registered under *alias*."""
    return _drive(_execute(conn, _SELECT_BY_ALIAS, (alias,)), visitor)
