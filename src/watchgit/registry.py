"""Registry -- the entry point collaborators use to track repositories.

Wraps one open SQLite connection to the registry file and exposes the
add/remove/list operations. Results of list operations are delivered to a
visitor, one ``(column_name, value)`` pair at a time.

Not thread-safe. Each thread should open its own ``Registry``.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from types import TracebackType

import structlog

from watchgit.config import RegistrySettings
from watchgit.models import Registration
from watchgit.persistence.db import close_connection, open_connection
from watchgit.persistence.queries import (
    add_registration,
    list_all,
    list_by_alias,
    remove_registration,
)
from watchgit.persistence.rows import IterationResult, Visitor
from watchgit.persistence.schema import ALIAS_COLUMN, PATH_COLUMN, read_version

log = structlog.get_logger(__name__)


class Registry:
    """Persistent alias-to-path registry backed by a single SQLite file.

    Usage::

        with Registry.open(RegistrySettings(db_location="~/.watchgit.db")) as registry:
            registry.add("dotfiles", "~/src/dotfiles")
            registry.for_each(lambda column, value: print(column, value))
    """

    def __init__(self, path: Path, conn: sqlite3.Connection) -> None:
        self._path = path
        self._conn: sqlite3.Connection | None = conn

    @classmethod
    def open(cls, settings: RegistrySettings | None = None) -> Registry:
        """Open the registry at ``settings.db_location``, creating it if missing.

        Raises:
            ResolutionError: the location does not expand to exactly one path.
            CreationError: a new file could not be initialized (it is removed).
            CorruptOrIncompatibleError: the existing file has another schema version.
        """
        settings = settings or RegistrySettings()
        path, conn = open_connection(settings.db_location)
        return cls(path, conn)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying connection. A closed registry cannot be reused."""
        close_connection(self._require_connection())
        self._conn = None

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def schema_version(self) -> int:
        return read_version(self._require_connection())

    def __enter__(self) -> Registry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._conn is not None:
            self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def add(self, alias: str, path: str | Path) -> str:
        """Register *path* under *alias*; returns the canonical path stored."""
        return add_registration(self._require_connection(), alias, path)

    def remove(self, alias: str) -> int:
        """Forget *alias*. Returns the number of rows removed, 0 if it was unknown."""
        return remove_registration(self._require_connection(), alias)

    def for_each(self, visitor: Visitor) -> IterationResult:
        """Visit ``aliases`` and ``paths`` of every registration, by alias."""
        return list_all(self._require_connection(), visitor)

    def for_alias(self, alias: str, visitor: Visitor) -> IterationResult:
        """Visit the ``paths`` column of the registration named *alias*."""
        return list_by_alias(self._require_connection(), alias, visitor)

    def registrations(self) -> list[Registration]:
        """Return every registration ordered by alias.

        Rows with an empty or NULL alias or path can only come from outside
        ``add``; they are skipped.
        """
        pending: dict[str, str | None] = {}
        collected: list[Registration] = []

        def visit(column: str, value: str | None) -> int:
            pending[column] = value
            if column != PATH_COLUMN:
                return 0
            alias = pending.pop(ALIAS_COLUMN, None)
            pending.clear()
            if not alias or not value:
                log.warning("registration_row_skipped", alias=alias, path=value)
                return 0
            collected.append(Registration(alias=alias, path=value))
            return 0

        self.for_each(visit)
        return collected

    def lookup(self, alias: str) -> str | None:
        """Return the path registered under *alias*, or None."""
        paths: list[str] = []

        def visit(column: str, value: str | None) -> int:
            if value is not None:
                paths.append(value)
            return 0

        self.for_alias(alias, visit)
        return paths[0] if paths else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"Registry {self._path} is closed. Open a new one with Registry.open().")
        return self._conn
