"""
Offline reconciliation of exported notebook rows.

Public surface:

    • `reconcile_app` → mounted in labnotes/cli/main.py as:

          labnotes reconcile run --legacy-path legacy.json --modern-path modern.json [--json]

Each file holds the raw rows of one source, either as a plain JSON list or
wrapped as {"data": [...]} (the shape the dashboard API returns). Either
file may be omitted. This is useful for checking how a specimen's notebook
will render without touching either database.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

import typer

from labnotes.authors import load_author_table
from labnotes.cli.render import render_entries
from labnotes.config import load_settings
from labnotes.formatting import get_display_timezone
from labnotes.logging_utils import log_verbose
from labnotes.reconciliation import ReconciliationReport, reconcile_entries
from labnotes.sources.legacy import clean_legacy_row
from labnotes.sources.modern import row_to_record
from labnotes.types import NotebookRecord, PresentedEntry

# ---------------------------------------------------------------------------
# Sub‑application definition
# ---------------------------------------------------------------------------
reconcile_app = typer.Typer(
    help=(
        "Reconcile exported legacy and dashboard notebook rows from JSON files.\n\n"
        "No database connection is needed."
    )
)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
def load_rows(path: Path) -> List[Any]:
    """
    Read a list of raw rows from a JSON export.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is not JSON, holds neither a list nor {"data": [...]},
        or a row is not a JSON object.
    """
    if not path.exists():
        raise FileNotFoundError(f"{path} not found")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]

    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of rows or {{\"data\": [...]}}")

    for index, row in enumerate(payload):
        if not isinstance(row, dict):
            raise ValueError(f"{path}: row {index} is not a JSON object")

    return payload


def load_records(
    legacy_path: Optional[Path] = None,
    modern_path: Optional[Path] = None,
) -> List[NotebookRecord]:
    """Load both exports and tag every row with its source."""
    records: List[NotebookRecord] = []
    if legacy_path is not None:
        records.extend(clean_legacy_row(row) for row in load_rows(legacy_path))
    if modern_path is not None:
        records.extend(row_to_record(row) for row in load_rows(modern_path))
    return records


def run_reconcile(
    legacy_path: Optional[Path] = None,
    modern_path: Optional[Path] = None,
    verbose: bool = False,
) -> List[PresentedEntry]:
    """
    Load the exports and run them through the reconciliation pipeline.
    """
    settings = load_settings()
    author_table = load_author_table(settings["author_table_path"])

    records = load_records(legacy_path, modern_path)
    log_verbose(f"Loaded {len(records)} notebook rows.", verbose)

    report = ReconciliationReport()
    presented = reconcile_entries(
        records,
        author_table=author_table,
        tz=get_display_timezone(settings["display_timezone"]),
        report=report,
    )
    log_verbose(f"Reconciled: {report.to_summary_dict()}", verbose)
    return presented


# ---------------------------------------------------------------------------
# Command: labnotes reconcile run
# ---------------------------------------------------------------------------
@reconcile_app.command("run")
def reconcile_command(
    legacy_path: Optional[Path] = typer.Option(
        None,
        "--legacy-path",
        dir_okay=False,
        help="JSON export of legacy notebook rows.",
    ),
    modern_path: Optional[Path] = typer.Option(
        None,
        "--modern-path",
        dir_okay=False,
        help="JSON export of dashboard (pdo_notebook) rows.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print entries as JSON."),
    verbose: bool = typer.Option(False, "--verbose", help="Show high‑level progress logs."),
) -> None:
    """
    Reconcile exported rows and print the notebook, oldest first.
    """
    if legacy_path is None and modern_path is None:
        typer.echo("Error: provide --legacy-path, --modern-path, or both.")
        raise typer.Exit(code=1)

    try:
        presented = run_reconcile(legacy_path, modern_path, verbose=verbose)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(presented, indent=2))
        return

    settings = load_settings()
    for line in render_entries(presented, settings["api_base_url"]):
        typer.echo(line)
