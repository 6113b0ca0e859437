"""clawlog watch — backfill, then ingest continuously until interrupted."""

from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from clawlog.cli.common import configure_logging, open_ingestor, resolve_config
from clawlog.pipeline.ingestor import LogIngestor

console = Console()


def watch_cmd(
    state_dir: Annotated[
        Path | None,
        typer.Option("--state-dir", help="State root holding agents/ and logs/."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Event store path (created if missing)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Debug logging."),
    ] = False,
) -> None:
    """Watch log files and ingest new lines as they are written (Ctrl-C to stop)."""
    cfg = resolve_config(console, state_dir=state_dir, db=db)
    configure_logging(cfg, verbose)

    ingestor = open_ingestor(console, cfg)
    console.print(f"[bold]Watching[/] {cfg.state_dir} → {cfg.db_path}  [dim](Ctrl-C to stop)[/]")
    try:
        asyncio.run(_run(ingestor))
    except KeyboardInterrupt:
        pass
    console.print("[green]✓[/] Stopped")


async def _run(ingestor: LogIngestor) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Windows: fall back to KeyboardInterrupt.
            pass

    try:
        await ingestor.start_watching()
        await stop.wait()
    finally:
        await ingestor.close()
