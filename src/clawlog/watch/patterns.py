"""Glob patterns for watched log paths.

Matching is a pure function of (path, pattern) so it can be tested without
touching the disk. Supported syntax:

  exact path   ``/a/b.log`` matches itself, or anything under it if a directory
  ``*``        any run of characters within one path segment
  ``?``        one character within a path segment
  ``**``       zero or more whole path segments
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from clawlog.ingest.base import SourceType

_WILDCARDS = ("*", "?")


@dataclass(frozen=True)
class WatchedPath:
    """A path pattern bound to the source type of the files it matches."""

    pattern: str
    source_type: SourceType


@dataclass(frozen=True)
class ResolvedFile:
    path: str
    source_type: SourceType


def _normalize(path: str) -> str:
    return str(path).replace("\\", "/")


def absolute_path(path: str | os.PathLike[str]) -> str:
    """Expand ``~`` and make *path* absolute against the current directory.

    Wildcards pass through untouched, so this applies to patterns as well.
    """
    return os.path.abspath(os.path.expanduser(os.fspath(path)))


def has_wildcard(pattern: str) -> bool:
    return any(w in pattern for w in _WILDCARDS)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    parts = _normalize(pattern).split("/")
    regex: list[str] = []
    for i, part in enumerate(parts):
        last = i == len(parts) - 1
        if part == "**":
            regex.append(".*" if last else "(?:[^/]*/)*")
            continue
        for ch in part:
            if ch == "*":
                regex.append("[^/]*")
            elif ch == "?":
                regex.append("[^/]")
            else:
                regex.append(re.escape(ch))
        if not last:
            regex.append("/")
    return re.compile("".join(regex) + r"\Z")


def matches_pattern(path: str, pattern: str) -> bool:
    """Return True if *path* matches the glob *pattern*."""
    path = _normalize(path)
    pattern = _normalize(pattern)
    if not has_wildcard(pattern):
        base = pattern.rstrip("/")
        return path == pattern or path == base or path.startswith(base + "/")
    return _compile(pattern).match(path) is not None


def classify(path: str, watched: list[WatchedPath]) -> SourceType | None:
    """Source type of the first descriptor whose pattern matches *path*."""
    for wp in watched:
        if matches_pattern(path, wp.pattern):
            return wp.source_type
    return None


def pattern_base_dir(pattern: str) -> Path:
    """Longest leading part of *pattern* that contains no wildcard."""
    parts = Path(pattern).parts
    static: list[str] = []
    for part in parts:
        if has_wildcard(part):
            break
        static.append(part)
    if not static:
        return Path(".")
    if len(static) == len(parts):
        return Path(pattern)
    return Path(*static)


def _walk_files(directory: Path) -> list[str]:
    files: list[str] = []
    # Unreadable subdirectories are skipped by os.walk.
    for root, _dirs, names in os.walk(directory, followlinks=True):
        for name in names:
            full = os.path.join(root, name)
            if os.path.isfile(full):
                files.append(full)
    return files


def resolve_pattern(pattern: str) -> list[str]:
    """Return existing files matching *pattern*, sorted."""
    if not has_wildcard(pattern):
        p = Path(pattern)
        if p.is_file():
            return [str(p)]
        if p.is_dir():
            return sorted(_walk_files(p))
        return []

    base = pattern_base_dir(pattern)
    if not base.is_dir():
        return []
    return sorted(f for f in _walk_files(base) if matches_pattern(f, pattern))


def resolve_watched_files(watched: list[WatchedPath]) -> list[ResolvedFile]:
    """Resolve every descriptor to existing files.

    A file matched by several descriptors is reported once, with the source
    type of the first descriptor that matches it.
    """
    seen: set[str] = set()
    results: list[ResolvedFile] = []
    for wp in watched:
        for path in resolve_pattern(wp.pattern):
            if path in seen:
                continue
            seen.add(path)
            results.append(ResolvedFile(path=path, source_type=wp.source_type))
    return results
