"""clawlog status — event store overview."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from clawlog.cli.common import open_ingestor, resolve_config
from clawlog.cli.errors import err_no_db
from clawlog.pipeline.ingestor import IngestorStatus

console = Console()


def status_cmd(
    state_dir: Annotated[
        Path | None,
        typer.Option("--state-dir", help="State root holding agents/ and logs/."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Event store path."),
    ] = None,
) -> None:
    """Show tracked files and event counts in the event store."""
    cfg = resolve_config(console, state_dir=state_dir, db=db)

    if not cfg.db_path.exists():
        console.print(err_no_db(str(cfg.db_path)))
        raise typer.Exit(1)

    ingestor = open_ingestor(console, cfg)
    try:
        snapshot = ingestor.status()
    finally:
        asyncio.run(ingestor.close())

    _show_status(snapshot)


def _show_status(snapshot: IngestorStatus) -> None:
    size_info = ""
    db_file = Path(snapshot.db_path)
    if db_file.exists():
        size_info = f" ({db_file.stat().st_size / (1024 * 1024):.1f} MB)"

    lines = [
        f"Store:          {snapshot.db_path}{size_info}",
        f"Watching:       {'yes' if snapshot.watching else 'no'}",
        f"Tracked files:  [bold]{snapshot.tracked_files:,}[/]",
        f"Total events:   [bold]{snapshot.total_events:,}[/]",
    ]
    console.print(Panel("\n".join(lines), title="[bold]Event Store[/]", expand=False))

    if not snapshot.events_by_type:
        console.print("[dim]No events ingested yet.[/]")
        return

    table = Table(title="Events by source type", show_header=True)
    table.add_column("Source type")
    table.add_column("Events", justify="right")
    for source_type, count in sorted(snapshot.events_by_type.items()):
        table.add_row(source_type, f"{count:,}")
    console.print(table)
