"""clawlog — incremental ingestion of OpenClaw logs into a queryable SQLite event store."""

from clawlog.ingest import SourceType
from clawlog.pipeline.ingestor import LogIngestor, create_ingestor, default_watched_paths

__all__ = ["LogIngestor", "SourceType", "create_ingestor", "default_watched_paths"]
