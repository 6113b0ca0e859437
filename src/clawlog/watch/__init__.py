"""clawlog watch layer — path patterns and the file-system watcher."""

from clawlog.watch.patterns import (
    ResolvedFile,
    WatchedPath,
    classify,
    matches_pattern,
    resolve_watched_files,
)
from clawlog.watch.watcher import FileChangeEvent, LogWatcher

__all__ = [
    "FileChangeEvent",
    "LogWatcher",
    "ResolvedFile",
    "WatchedPath",
    "classify",
    "matches_pattern",
    "resolve_watched_files",
]
