"""SQLite connection lifecycle for the registry file."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

from watchgit.exceptions import CorruptOrIncompatibleError, CreationError, ResolutionError
from watchgit.persistence.location import resolve_registry_location
from watchgit.persistence.schema import SCHEMA_VERSION, define_schema, read_version, stamp_version

log = structlog.get_logger(__name__)


def _create_registry(path: Path) -> sqlite3.Connection:
    """Create a new registry file, write the schema and stamp the version.

    On any failure, interrupts included, the connection is closed and the
    half-written file removed before the error propagates.
    """
    try:
        conn = sqlite3.connect(path, isolation_level=None)
    except sqlite3.Error as exc:
        log.error("registry_create_failed", path=str(path), error=str(exc))
        path.unlink(missing_ok=True)
        raise CreationError(f"Failed to create a new database at {path}: {exc}") from exc

    try:
        define_schema(conn)
        stamp_version(conn, SCHEMA_VERSION)
    except BaseException:
        conn.close()
        path.unlink(missing_ok=True)
        log.error("registry_create_failed", path=str(path))
        raise

    log.info("registry_created", path=str(path), version=SCHEMA_VERSION)
    return conn


def _open_existing(path: Path) -> sqlite3.Connection:
    """Open an existing registry read-write and enforce the version gate."""
    uri = f"{path.as_uri()}?mode=rw"
    try:
        conn = sqlite3.connect(uri, uri=True, isolation_level=None)
    except sqlite3.Error as exc:
        log.error("registry_open_failed", path=str(path), error=str(exc))
        raise CorruptOrIncompatibleError(path, -1, SCHEMA_VERSION) from exc

    version = read_version(conn)
    if version != SCHEMA_VERSION:
        conn.close()
        log.warning(
            "registry_incompatible",
            path=str(path),
            found_version=version,
            expected_version=SCHEMA_VERSION,
        )
        raise CorruptOrIncompatibleError(path, version, SCHEMA_VERSION)

    log.info("registry_opened", path=str(path), version=version)
    return conn


def open_connection(location: str) -> tuple[Path, sqlite3.Connection]:
    """Resolve *location* and return the registry path with a validated connection.

    A missing file is bootstrapped; an existing one must carry the current
    schema version.
    """
    path = resolve_registry_location(location)

    try:
        path.stat()
    except FileNotFoundError:
        return path, _create_registry(path)
    except OSError as exc:
        log.error("registry_stat_failed", path=str(path), error=str(exc))
        raise ResolutionError(f"Cannot access registry location {path}: {exc}") from exc

    return path, _open_existing(path)


def close_connection(conn: sqlite3.Connection) -> None:
    """Release the connection. Callers must not close the same one twice."""
    conn.close()
    log.debug("registry_closed")
