"""Registry file location resolution.

Locations follow shell word rules: single quotes keep everything literal,
double quotes allow ``$VAR`` but suppress splitting and globbing, and the
results of unquoted expansions are split on whitespace and globbed. The
whole location must come out as exactly one path.
"""

from __future__ import annotations

import glob
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from watchgit.exceptions import ResolutionError

log = structlog.get_logger(__name__)

_GLOB_CHARS = frozenset("*?[")
_DOUBLE_QUOTE_ESCAPES = frozenset('$`"\\\n')
_VAR_RE = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))")

# Segment quoting modes
_UNQUOTED = "unquoted"
_DOUBLE = "double"
_LITERAL = "literal"


def _tokenize(location: str) -> list[list[tuple[str, str]]]:
    """Split *location* into words, each a list of ``(text, mode)`` segments.

    Backslash-escaped characters become literal segments.
    """
    words: list[list[tuple[str, str]]] = []
    segments: list[tuple[str, str]] = []
    buf: list[str] = []
    in_word = False
    i, n = 0, len(location)

    def flush(mode: str) -> None:
        if buf:
            segments.append(("".join(buf), mode))
            buf.clear()

    while i < n:
        ch = location[i]
        if ch.isspace():
            flush(_UNQUOTED)
            if in_word:
                words.append(segments)
                segments = []
                in_word = False
            i += 1
            continue

        in_word = True
        if ch == "\\":
            flush(_UNQUOTED)
            if i + 1 < n:
                segments.append((location[i + 1], _LITERAL))
            i += 2
        elif ch == "'":
            flush(_UNQUOTED)
            end = location.find("'", i + 1)
            if end < 0:
                raise ResolutionError(f"Cannot parse registry location {location!r}: unbalanced single quote")
            segments.append((location[i + 1:end], _LITERAL))
            i = end + 1
        elif ch == '"':
            flush(_UNQUOTED)
            i += 1
            quoted: list[str] = []
            while i < n and location[i] != '"':
                if location[i] == "\\" and i + 1 < n and location[i + 1] in _DOUBLE_QUOTE_ESCAPES:
                    if quoted:
                        segments.append(("".join(quoted), _DOUBLE))
                        quoted = []
                    segments.append((location[i + 1], _LITERAL))
                    i += 2
                    continue
                quoted.append(location[i])
                i += 1
            if i >= n:
                raise ResolutionError(f"Cannot parse registry location {location!r}: unbalanced double quote")
            # An empty "" still contributes an (empty) word.
            segments.append(("".join(quoted), _DOUBLE))
            i += 1
        else:
            buf.append(ch)
            i += 1

    flush(_UNQUOTED)
    if in_word:
        words.append(segments)
    return words


def _expand_vars(text: str, location: str) -> str:
    if "`" in text or "$(" in text:
        raise ResolutionError(f"Command substitution is not supported in registry location {location!r}")

    def substitute(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        try:
            return os.environ[name]
        except KeyError:
            raise ResolutionError(
                f"Undefined variable {name!r} in registry location {location!r}"
            ) from None

    expanded = _VAR_RE.sub(substitute, text)
    if "${" in _VAR_RE.sub("", text):
        raise ResolutionError(f"Malformed variable reference in registry location {location!r}")
    return expanded


def _expand_tilde(segments: list[tuple[str, str]]) -> list[tuple[str, str]]:
    if not segments:
        return segments
    text, mode = segments[0]
    if mode != _UNQUOTED or not text.startswith("~"):
        return segments
    prefix, sep, rest = text.partition("/")
    expanded = [(os.path.expanduser(prefix), _LITERAL)]
    if sep:
        expanded.append((sep + rest, _UNQUOTED))
    return expanded + segments[1:]


@dataclass
class _Field:
    text: list[str] = field(default_factory=list)
    pattern: list[str] = field(default_factory=list)
    globbable: bool = False

    def add(self, text: str, *, unquoted: bool) -> None:
        self.text.append(text)
        self.pattern.append(text if unquoted else glob.escape(text))
        if unquoted and _GLOB_CHARS.intersection(text):
            self.globbable = True


def _expand_word(segments: list[tuple[str, str]], location: str) -> list[_Field]:
    """Expand one word; unquoted expansion results may split it into several fields."""
    fields: list[_Field] = []
    current: _Field | None = None

    for text, mode in _expand_tilde(segments):
        if mode == _LITERAL:
            current = current or _Field()
            current.add(text, unquoted=False)
        elif mode == _DOUBLE:
            current = current or _Field()
            current.add(_expand_vars(text, location), unquoted=False)
        else:
            pieces = re.split(r"\s+", _expand_vars(text, location))
            for index, piece in enumerate(pieces):
                if index > 0 and current is not None:
                    fields.append(current)
                    current = None
                if piece:
                    current = current or _Field()
                    current.add(piece, unquoted=True)

    if current is not None:
        fields.append(current)
    return fields


def _resolve_field(f: _Field) -> list[str]:
    literal = "".join(f.text)
    if not f.globbable:
        return [literal]
    matches = sorted(glob.glob("".join(f.pattern)))
    # An unmatched pattern stays literal, as in a shell without nullglob.
    return matches or [literal]


def resolve_registry_location(location: str) -> Path:
    """Expand a shell-style location into one absolute path.

    Handles quoting, ``~``/``~user``, ``$VAR``/``${VAR}`` and glob patterns.
    Raises ResolutionError when the location expands to zero or several
    paths, names an undefined variable, or cannot be parsed.
    """
    results: list[str] = []
    for segments in _tokenize(location):
        for f in _expand_word(segments, location):
            results.extend(_resolve_field(f))

    if not results:
        raise ResolutionError(f"Registry location {location!r} expands to no path")
    if len(results) > 1:
        raise ResolutionError(
            f"Registry location {location!r} is ambiguous: expands to {len(results)} paths"
        )
    word = results[0]
    if not word:
        raise ResolutionError(f"Registry location {location!r} expands to an empty path")

    path = Path(os.path.abspath(word))
    log.debug("registry_location_resolved", location=location, path=str(path))
    return path
