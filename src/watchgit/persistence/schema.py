"""Registry table layout and schema version stamp."""

from __future__ import annotations

import sqlite3

import structlog

from watchgit.exceptions import SchemaCreationError
from watchgit.persistence.rows import iterate_rows

log = structlog.get_logger(__name__)

SCHEMA_VERSION = 1
INVALID_VERSION = -1

TABLE_NAME = "repos_table"
ALIAS_COLUMN = "aliases"
PATH_COLUMN = "paths"

_CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        {ALIAS_COLUMN}     TEXT UNIQUE,
        {PATH_COLUMN}       TEXT UNIQUE
    )
"""

_VERSION_PRAGMA = "user_version"


def define_schema(conn: sqlite3.Connection) -> None:
    """Create the registrations table if it does not exist yet."""
    try:
        conn.execute(_CREATE_TABLE_SQL.strip())
    except sqlite3.Error as exc:
        log.error("schema_creation_failed", error=str(exc))
        raise SchemaCreationError(f"Cannot create {TABLE_NAME}: {exc}") from exc


def stamp_version(conn: sqlite3.Connection, version: int = SCHEMA_VERSION) -> None:
    """Record *version* in the database header's ``user_version`` field."""
    # PRAGMA values cannot be bound, so only a real int reaches the text.
    statement = f"PRAGMA {_VERSION_PRAGMA} = {int(version)}"
    try:
        conn.execute(statement)
    except sqlite3.Error as exc:
        log.error("schema_stamp_failed", version=version, error=str(exc))
        raise SchemaCreationError(f"Cannot stamp schema version {version}: {exc}") from exc
    log.debug("schema_version_stamped", version=version)


def read_version(conn: sqlite3.Connection) -> int:
    """Return the stamped schema version, or ``INVALID_VERSION`` if unreadable."""
    found: list[int] = []

    def visit(column: str, value: str | None) -> int:
        if column != _VERSION_PRAGMA or value is None:
            return 1
        try:
            found.append(int(value, 10))
        except ValueError:
            return 1
        return 0

    try:
        cursor = conn.execute(f"PRAGMA {_VERSION_PRAGMA}")
        if cursor.description is None or len(cursor.description) != 1:
            log.warning("schema_version_unreadable", reason="unexpected_shape")
            return INVALID_VERSION
        result = iterate_rows(cursor, visit)
    except sqlite3.Error as exc:
        log.warning("schema_version_unreadable", reason="query_failed", error=str(exc))
        return INVALID_VERSION

    if not result.ok or len(found) != 1:
        log.warning("schema_version_unreadable", reason="bad_value", rows=result.rows)
        return INVALID_VERSION
    return found[0]
