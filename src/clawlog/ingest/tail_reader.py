"""Cursor-based tail reader for append-only log files.

Returns only complete lines appended since a byte cursor. The returned
cursor is the end of the last complete line, so a record still being
written is never emitted and is picked up once its newline lands.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_BYTES = 1_000_000


@dataclass
class TailReadResult:
    """Outcome of one tail read.

    Attributes:
        cursor: Byte offset to persist; the next read starts here.
        size: File size observed at read time.
        lines: Complete lines read, without terminators.
        truncated: Leading bytes were skipped because the unread span
            exceeded ``max_bytes``.
        reset: The stored cursor was discarded (file shrank, or the unread
            span was capped).
        exists: False when the file was not found.
    """

    cursor: int = 0
    size: int = 0
    lines: list[str] = field(default_factory=list)
    truncated: bool = False
    reset: bool = False
    exists: bool = True


def read_log_slice(
    path: str | Path,
    cursor: int | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> TailReadResult:
    """Read complete lines from *path* starting at *cursor*.

    - Missing file: empty result with cursor 0 and size 0.
    - No cursor: start at ``max(0, size - max_bytes)`` instead of replaying
      the whole history.
    - Cursor beyond the file size (rotation/truncation): start from byte 0,
      ``reset`` is set.
    - Unread span larger than ``max_bytes``: skip to ``size - max_bytes``,
      ``truncated`` and ``reset`` are set.
    - A read starting mid-line drops the partial leading fragment.

    Raises:
        OSError: If the file exists but cannot be opened or read.
    """
    if max_bytes < 1:
        raise ValueError("max_bytes must be >= 1")

    try:
        size = os.stat(path).st_size
    except FileNotFoundError:
        return TailReadResult(exists=False)

    reset = False
    truncated = False

    if cursor is None:
        start = max(0, size - max_bytes)
        truncated = start > 0
    else:
        start = max(0, int(cursor))
        if start > size:
            # Rotated or truncated underneath us.
            reset = True
            start = 0
        if size - start > max_bytes:
            reset = True
            truncated = True
            start = size - max_bytes

    if size <= start:
        return TailReadResult(cursor=size, size=size, truncated=truncated, reset=reset)

    with open(path, "rb") as fh:
        at_line_start = True
        if start > 0:
            fh.seek(start - 1)
            at_line_start = fh.read(1) == b"\n"
        else:
            fh.seek(0)
        data = fh.read(size - start)

    # Only bytes up to the last newline are consumed.
    end = data.rfind(b"\n")
    if end == -1:
        return TailReadResult(cursor=start, size=size, truncated=truncated, reset=reset)
    complete = data[: end + 1]
    new_cursor = start + end + 1

    lines = complete.decode("utf-8", errors="replace").split("\n")[:-1]
    if not at_line_start and lines:
        lines = lines[1:]
    lines = [ln[:-1] if ln.endswith("\r") else ln for ln in lines]

    return TailReadResult(
        cursor=new_cursor,
        size=size,
        lines=lines,
        truncated=truncated,
        reset=reset,
    )


def read_new_lines(
    path: str | Path,
    cursor: int | None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> TailReadResult:
    """Read lines appended to *path* since *cursor* (alias used by the ingestor)."""
    return read_log_slice(path, cursor=cursor, max_bytes=max_bytes)
