"""Persistence layer for watchgit: the SQLite-backed repository registry."""

from __future__ import annotations

from watchgit.persistence.db import close_connection, open_connection
from watchgit.persistence.location import resolve_registry_location
from watchgit.persistence.queries import (
    add_registration,
    list_all,
    list_by_alias,
    remove_registration,
)
from watchgit.persistence.rows import IterationResult, VisitFailure, Visitor, iterate_rows
from watchgit.persistence.schema import SCHEMA_VERSION, define_schema, read_version, stamp_version

__all__ = [
    "SCHEMA_VERSION",
    "IterationResult",
    "VisitFailure",
    "Visitor",
    "add_registration",
    "close_connection",
    "define_schema",
    "iterate_rows",
    "list_all",
    "list_by_alias",
    "open_connection",
    "read_version",
    "remove_registration",
    "resolve_registry_location",
    "stamp_version",
]
