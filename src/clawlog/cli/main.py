"""clawlog CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from clawlog.cli.ingest import ingest_cmd
from clawlog.cli.status import status_cmd
from clawlog.cli.watch import watch_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("clawlog")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"clawlog {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="clawlog",
    help=(
        "clawlog — ingest OpenClaw logs into a queryable SQLite event store.\n\n"
        "  clawlog ingest  One-shot backfill of all matching log files.\n"
        "  clawlog watch   Backfill, then ingest continuously."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """clawlog — ingest OpenClaw logs into a queryable SQLite event store."""


app.command("ingest")(ingest_cmd)
app.command("watch")(watch_cmd)
app.command("status")(status_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed clawlog version."""
    typer.echo(f"clawlog {_installed_version()}")


if __name__ == "__main__":
    app()
