"""Tests for registry location expansion."""

from pathlib import Path

import pytest

from watchgit.exceptions import ResolutionError
from watchgit.persistence.location import resolve_registry_location


def test_home_shortcut(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolve_registry_location("~/.watchgit.db") == tmp_path / ".watchgit.db"


@pytest.mark.parametrize("template", ["$WATCHGIT_TEST_DIR/reg.db", "${WATCHGIT_TEST_DIR}/reg.db"])
def test_environment_reference(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, template: str):
    monkeypatch.setenv("WATCHGIT_TEST_DIR", str(tmp_path))
    assert resolve_registry_location(template) == tmp_path / "reg.db"


def test_undefined_variable_fails(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("WATCHGIT_NOT_SET", raising=False)
    with pytest.raises(ResolutionError, match="WATCHGIT_NOT_SET"):
        resolve_registry_location("$WATCHGIT_NOT_SET/reg.db")


def test_relative_location_becomes_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    resolved = resolve_registry_location("sub/../reg.db")
    assert resolved.is_absolute()
    assert resolved == Path.cwd() / "reg.db"


@pytest.mark.parametrize("location", ["", "   "])
def test_empty_location_fails(location: str):
    with pytest.raises(ResolutionError):
        resolve_registry_location(location)


def test_several_words_are_ambiguous(tmp_path: Path):
    with pytest.raises(ResolutionError, match="ambiguous: expands to 2 paths"):
        resolve_registry_location(f"{tmp_path}/a.db {tmp_path}/b.db")


def test_quoted_whitespace_is_one_word(tmp_path: Path):
    location = f"'{tmp_path}/my registry.db'"
    assert resolve_registry_location(location) == tmp_path / "my registry.db"


def test_unbalanced_quote_fails(tmp_path: Path):
    with pytest.raises(ResolutionError, match="Cannot parse"):
        resolve_registry_location(f"'{tmp_path}/reg.db")


def test_glob_matching_several_files_is_ambiguous(tmp_path: Path):
    (tmp_path / "reg1.db").touch()
    (tmp_path / "reg2.db").touch()
    with pytest.raises(ResolutionError, match="ambiguous"):
        resolve_registry_location(f"{tmp_path}/reg*.db")


def test_glob_matching_one_file(tmp_path: Path):
    (tmp_path / "only.db").touch()
    assert resolve_registry_location(f"{tmp_path}/on*.db") == tmp_path / "only.db"


def test_glob_without_match_stays_literal(tmp_path: Path):
    assert resolve_registry_location(f"{tmp_path}/none*.db") == tmp_path / "none*.db"


def test_variable_with_whitespace_is_ambiguous(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("WATCHGIT_TEST_LOC", f"{tmp_path}/a.db {tmp_path}/b.db")
    with pytest.raises(ResolutionError, match="ambiguous"):
        resolve_registry_location("$WATCHGIT_TEST_LOC")


def test_double_quoted_variable_is_not_split(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("WATCHGIT_TEST_DIR", f"{tmp_path}/with space")
    assert resolve_registry_location('"$WATCHGIT_TEST_DIR/reg.db"') == tmp_path / "with space" / "reg.db"


def test_single_quotes_suppress_expansion(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("WATCHGIT_TEST_DIR", "expanded")
    monkeypatch.chdir(tmp_path)
    assert resolve_registry_location("'$WATCHGIT_TEST_DIR.db'") == Path.cwd() / "$WATCHGIT_TEST_DIR.db"


def test_escaped_dollar_is_literal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("WATCHGIT_NOT_SET", raising=False)
    monkeypatch.chdir(tmp_path)
    assert resolve_registry_location(r"\$WATCHGIT_NOT_SET.db") == Path.cwd() / "$WATCHGIT_NOT_SET.db"


def test_quoted_tilde_is_literal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    assert resolve_registry_location("'~/reg.db'") == Path.cwd() / "~" / "reg.db"


def test_quoted_glob_is_literal(tmp_path: Path):
    (tmp_path / "reg1.db").touch()
    (tmp_path / "reg2.db").touch()
    assert resolve_registry_location(f"'{tmp_path}/reg*.db'") == tmp_path / "reg*.db"


def test_empty_quoted_word_fails():
    with pytest.raises(ResolutionError, match="empty path"):
        resolve_registry_location('""')


def test_command_substitution_is_refused():
    with pytest.raises(ResolutionError, match="Command substitution"):
        resolve_registry_location("$(echo /tmp/reg.db)")
