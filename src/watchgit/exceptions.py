"""Registry exception hierarchy."""

from __future__ import annotations

from pathlib import Path


class RegistryError(Exception):
    """Base exception for all registry errors."""


class ResolutionError(RegistryError):
    """Raised when the registry location cannot be expanded to exactly one path."""


class PathResolutionError(ResolutionError):
    """Raised when a repository path cannot be canonicalized."""


class CreationError(RegistryError):
    """Raised when a new registry file cannot be created or initialized."""


class SchemaCreationError(CreationError):
    """Raised when the table definition or version stamp cannot be written."""


class CorruptOrIncompatibleError(RegistryError):
    """Raised when an existing registry is unreadable or stamped with another version."""

    def __init__(self, path: Path | str, found_version: int, expected_version: int) -> None:
        self.path = Path(path)
        self.found_version = found_version
        self.expected_version = expected_version
        if found_version < 0:
            detail = "schema version could not be read"
        else:
            detail = f"schema version {found_version}, expected {expected_version}"
        super().__init__(f"Corrupt database or old schema ({detail}): {self.path}")


class ExecutionError(RegistryError):
    """Raised when a statement fails inside SQLite, uniqueness violations included."""


class AllocationError(RegistryError):
    """Raised when memory runs out while a statement is built or run."""


class InvalidAliasError(RegistryError, ValueError):
    """Raised when an alias is empty or contains characters SQLite text cannot hold."""
