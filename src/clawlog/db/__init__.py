"""clawlog event store layer."""

from clawlog.db.connection import Database
from clawlog.db.migrations import MIGRATIONS, run_migrations
from clawlog.db.models import Event, TrackedFile
from clawlog.db.repository import EventStore
from clawlog.db.schema import ensure_schema

__all__ = [
    "Database",
    "Event",
    "EventStore",
    "MIGRATIONS",
    "TrackedFile",
    "ensure_schema",
    "run_migrations",
]
