"""Shared helpers for clawlog commands: config resolution and ingestor setup."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import typer
from rich.console import Console

from clawlog.cli.errors import err_config, err_store_open
from clawlog.config import ClawlogConfig, ConfigError, load_config
from clawlog.logging_config import setup_logging
from clawlog.pipeline.ingestor import LogIngestor
from clawlog.watch.patterns import absolute_path


def resolve_config(
    console: Console,
    *,
    state_dir: Path | None = None,
    db: Path | None = None,
    batch_size: int | None = None,
) -> ClawlogConfig:
    """Load layered config and apply CLI flag overrides (highest priority)."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from None

    if state_dir is not None:
        cfg.state_dir = Path(absolute_path(state_dir))
    if db is not None:
        cfg.store.path = Path(absolute_path(db))
    if batch_size is not None:
        cfg.store.batch_size = batch_size
    return cfg


def configure_logging(cfg: ClawlogConfig, verbose: bool) -> None:
    setup_logging(cfg.logging.level, verbose=verbose, log_file=cfg.logging.file)


def open_ingestor(console: Console, cfg: ClawlogConfig) -> LogIngestor:
    """Create the ingestor; a store that cannot be opened is fatal."""
    try:
        return LogIngestor.from_config(cfg)
    except (sqlite3.Error, OSError) as exc:
        console.print(err_store_open(str(cfg.db_path), exc))
        raise typer.Exit(1) from None
