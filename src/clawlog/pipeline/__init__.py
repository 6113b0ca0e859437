"""Ingestion pipeline: debounced scheduling and the log ingestor."""

from clawlog.pipeline.ingestor import (
    IngestorState,
    IngestorStatus,
    IngestSummary,
    LogIngestor,
    create_ingestor,
    default_watched_paths,
)
from clawlog.pipeline.scheduler import DebouncedQueue

__all__ = [
    "DebouncedQueue",
    "IngestSummary",
    "IngestorState",
    "IngestorStatus",
    "LogIngestor",
    "create_ingestor",
    "default_watched_paths",
]
