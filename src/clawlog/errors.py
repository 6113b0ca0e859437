"""Exception hierarchy for clawlog."""

from __future__ import annotations


class ClawlogError(Exception):
    """Base class for all clawlog errors."""


class IngestorClosedError(ClawlogError, RuntimeError):
    """Raised when an operation is attempted on a closed ingestor."""

    def __init__(self, operation: str = "") -> None:
        msg = "Ingestor is closed"
        if operation:
            msg = f"{msg}; cannot {operation}"
        super().__init__(msg)


class UnknownSourceTypeError(ClawlogError, KeyError):
    """Raised when no parser is registered for a source type."""

    def __init__(self, source_type: object) -> None:
        super().__init__(f"Unknown source type: {source_type!r}")
        self.source_type = source_type

    def __str__(self) -> str:
        return str(self.args[0])
