"""
Root entrypoint for the labnotes CLI.

This module defines the top‑level `labnotes` command and mounts sub‑apps
from other modules under labnotes/cli/:

    • labnotes/cli/entries_cli.py    →  `labnotes entries ...`
    • labnotes/cli/reconcile_cli.py  →  `labnotes reconcile ...`

`entries` talks to the live databases (legacy lab system and the dashboard
Supabase table). `reconcile` works on JSON exports and needs no database.
"""

# ---------------------------------------------------------------------------
# Imports (must be at top to satisfy flake8 E402)
# ---------------------------------------------------------------------------
from dotenv import load_dotenv
import typer

from .entries_cli import entries_app
from .reconcile_cli import reconcile_app

# Load environment variables
load_dotenv()

# ---------------------------------------------------------------------------
# Root CLI application
# ---------------------------------------------------------------------------
cli = typer.Typer(
    help=(
        "Specimen notebook command‑line interface.\n\n"
        "Shows one chronological notebook per specimen, combining the legacy "
        "lab system's notes with entries added through the dashboard:\n\n"
        "    labnotes entries show --labno <lab number>\n\n"
        "New entries (with attachments) are added with `labnotes entries add`."
    )
)

# ---------------------------------------------------------------------------
# Register sub‑applications
# ---------------------------------------------------------------------------
cli.add_typer(entries_app, name="entries")
cli.add_typer(reconcile_app, name="reconcile")

# ---------------------------------------------------------------------------
# Entry point for `python -m labnotes.cli.main`
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    cli()
