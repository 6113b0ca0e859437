"""clawlog ingest — one-shot backfill of every matching log file."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from clawlog.cli.common import configure_logging, open_ingestor, resolve_config
from clawlog.cli.errors import warn_state_dir_missing

console = Console()


def ingest_cmd(
    state_dir: Annotated[
        Path | None,
        typer.Option("--state-dir", help="State root holding agents/ and logs/."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Event store path (created if missing)."),
    ] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", min=1, help="Events per insert transaction."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Debug logging."),
    ] = False,
) -> None:
    """Ingest new lines from all matching log files, then exit."""
    cfg = resolve_config(console, state_dir=state_dir, db=db, batch_size=batch_size)
    configure_logging(cfg, verbose)

    if not cfg.state_dir.exists() and cfg.sources is None:
        console.print(warn_state_dir_missing(str(cfg.state_dir)))

    ingestor = open_ingestor(console, cfg)
    try:
        summary = ingestor.ingest_existing()
    finally:
        asyncio.run(ingestor.close())

    console.print(
        f"[green]✓[/] Ingested [bold]{summary.events:,}[/] events "
        f"from [bold]{summary.files}[/] files → {cfg.db_path}"
    )
    if summary.failed:
        console.print(f"  [yellow]✗ {summary.failed} file(s) failed — see log output[/]")
