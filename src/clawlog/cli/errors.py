"""clawlog rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from clawlog.cli.errors import err_no_db
    console.print(err_no_db(path))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_db(db_path: str) -> str:
    """No event store at *db_path*."""
    return (
        f"[red]Error:[/] No event store found at '{db_path}'.\n"
        "  Run:  clawlog ingest   (or pass --db PATH)"
    )


def err_config(message: str) -> str:
    """Config file contains an invalid value."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {message}\n"
        "  Fix clawlog.yaml (or ~/.clawlog/config.yaml) and retry."
    )


def err_store_open(db_path: str, exc: Exception) -> str:
    """Event store could not be created or opened."""
    return (
        f"[red]Error:[/] Cannot open event store '{db_path}': {exc}\n"
        "  Check the directory exists and is writable, or pass --db PATH."
    )


def warn_state_dir_missing(state_dir: str) -> str:
    """State root does not exist yet — nothing to ingest."""
    return (
        f"[yellow]Warning:[/] State directory '{state_dir}' does not exist.\n"
        "  Pass --state-dir PATH or set CLAWLOG_STATE_DIR."
    )
