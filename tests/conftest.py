"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog

# Make _helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from _helpers import VisitRecorder  # noqa: E402

from watchgit.config import RegistrySettings  # noqa: E402
from watchgit.registry import Registry  # noqa: E402

__all__ = ["VisitRecorder"]


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "registry.db"


@pytest.fixture
def settings(db_path: Path) -> RegistrySettings:
    return RegistrySettings(db_location=str(db_path))


@pytest.fixture
def registry(settings: RegistrySettings):
    reg = Registry.open(settings)
    yield reg
    if not reg.closed:
        reg.close()


@pytest.fixture
def repo_dirs(tmp_path: Path) -> dict[str, Path]:
    """Three real directories that can be registered."""
    root = tmp_path / "repos"
    dirs = {}
    for name in ("alpha", "beta", "gamma"):
        d = root / name
        d.mkdir(parents=True)
        dirs[name] = d.resolve()
    return dirs


@pytest.fixture
def recorder() -> VisitRecorder:
    return VisitRecorder()
