"""
Command‑line interface for notebook entries.

Public surface:

    • `entries_app` → mounted in labnotes/cli/main.py as:

          labnotes entries show   --labno 2024010001 [--labid ...] [--fname ... --lname ...]
          labnotes entries recent [--limit 10]
          labnotes entries add    --labno ... --fname ... --lname ... --notes ... [--attachment FILE ...]

The commands stay thin: they build the sources from settings, delegate to
labnotes.sources and labnotes.reconciliation, and print the result.
"""

import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from labnotes.authors import load_author_table
from labnotes.cli.render import render_entries
from labnotes.config import Settings, load_settings
from labnotes.formatting import format_datetime, get_display_timezone
from labnotes.logging_utils import log_debug, log_verbose, log_warning
from labnotes.reconciliation import ReconciliationReport, reconcile_entries
from labnotes.sources import (
    LegacyNotebookSource,
    NotebookStoreClient,
    SourcesUnavailableError,
    fetch_all_entries,
)
from labnotes.sources.modern import validate_submission
from labnotes.types import NotebookSubmission
from labnotes.uploads import stage_attachments

# ---------------------------------------------------------------------------
# Sub‑application definition
# ---------------------------------------------------------------------------
entries_app = typer.Typer(
    help="Commands for viewing and adding notebook entries for a specimen."
)


# ---------------------------------------------------------------------------
# Source construction
# ---------------------------------------------------------------------------
# Kept as module-level helpers so tests can monkeypatch them with fakes.
# A source that is not configured is returned as None; the concurrent fetch
# treats it like a failed source.
# ---------------------------------------------------------------------------
def build_legacy_source(settings: Settings) -> Optional[LegacyNotebookSource]:
    if not settings["legacy_database_url"]:
        return None
    return LegacyNotebookSource.from_url(settings["legacy_database_url"])


def build_store(settings: Settings, dry_run: bool = False) -> Optional[NotebookStoreClient]:
    if not (settings["supabase_url"] and settings["supabase_key"]) and not dry_run:
        return None
    return NotebookStoreClient.from_settings(settings, dry_run=dry_run)


def _fail(message: object) -> NoReturn:
    typer.echo(f"Error: {message}")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Command: entries show
# ---------------------------------------------------------------------------
@entries_app.command("show")
def show_entries(
    labno: str = typer.Option(..., "--labno", help="Lab number (specimen number)."),
    labid: Optional[str] = typer.Option(None, "--labid", help="Optional LABID filter."),
    fname: Optional[str] = typer.Option(None, "--fname", help="Patient first name."),
    lname: Optional[str] = typer.Option(None, "--lname", help="Patient last name."),
    as_json: bool = typer.Option(False, "--json", help="Print entries as JSON."),
    verbose: bool = typer.Option(False, "--verbose", help="Show high‑level progress logs."),
) -> None:
    """
    Show the reconciled notebook for one specimen.

    Legacy and dashboard entries are fetched in parallel. If one source is
    unavailable the other is still shown and a warning is printed; if both
    are unavailable the command fails.
    """
    settings = load_settings()

    try:
        author_table = load_author_table(settings["author_table_path"])
        legacy_source = build_legacy_source(settings)
        store = build_store(settings)

        log_verbose("Fetching legacy and dashboard notebook rows...", verbose)
        result = fetch_all_entries(
            legacy_source,
            store,
            labno=labno,
            labid=labid,
            first_name=fname,
            last_name=lname,
        )
    except SourcesUnavailableError as e:
        _fail(f"{e}. Check the database settings and retry.")
    except (ValueError, RuntimeError, FileNotFoundError) as e:
        _fail(e)

    if result["legacy_error"]:
        log_warning(f"legacy notebook unavailable: {result['legacy_error']}")
    if result["modern_error"]:
        log_warning(f"dashboard notebook unavailable: {result['modern_error']}")

    report = ReconciliationReport()
    presented = reconcile_entries(
        result["records"],
        author_table=author_table,
        tz=get_display_timezone(settings["display_timezone"]),
        report=report,
    )
    log_verbose(f"Reconciled: {report.to_summary_dict()}", verbose)

    if as_json:
        typer.echo(json.dumps(presented, indent=2))
        return

    for line in render_entries(presented, settings["api_base_url"]):
        typer.echo(line)


# ---------------------------------------------------------------------------
# Command: entries recent
# ---------------------------------------------------------------------------
@entries_app.command("recent")
def recent_entries(
    limit: int = typer.Option(10, "--limit", min=1, help="Number of rows to show."),
) -> None:
    """
    List the most recent dashboard notebook rows across all specimens.
    """
    settings = load_settings()
    tz = get_display_timezone(settings["display_timezone"])

    try:
        store = build_store(settings)
        if store is None:
            raise RuntimeError(
                "Supabase credentials not found. Ensure SUPABASE_URL and SUPABASE_KEY "
                "are set in your environment or .env file."
            )
        records = store.fetch_recent(limit=limit)
    except (ValueError, RuntimeError) as e:
        _fail(e)

    if not records:
        typer.echo("No notebook entries found.")
        return

    for rec in records:
        attachment = f"  [{rec['attachment_path']}]" if rec["attachment_path"] else ""
        typer.echo(
            f"{format_datetime(rec['created_at'], tz)}  {rec['specimen_number']}"
            f"  {rec['author_name'] or 'N/A'}  {rec['notes'][:60]}{attachment}"
        )


# ---------------------------------------------------------------------------
# Command: entries add
# ---------------------------------------------------------------------------
@entries_app.command("add")
def add_entry(
    labno: str = typer.Option(..., "--labno", help="Lab number (specimen number)."),
    fname: str = typer.Option(..., "--fname", help="Patient first name."),
    lname: str = typer.Option(..., "--lname", help="Patient last name."),
    notes: str = typer.Option(..., "--notes", help="Notebook text."),
    labid: str = typer.Option("", "--labid", help="LABID, if known."),
    username: Optional[str] = typer.Option(None, "--username", help="Acting user."),
    attachment: Optional[List[Path]] = typer.Option(
        None,
        "--attachment",
        help="File to attach; repeat for several files.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate and show the rows without copying files or writing to Supabase.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Show the rows written."),
) -> None:
    """
    Add a notebook entry, optionally with attachments.

    Each attachment is copied into the uploads directory and stored as its
    own row; the rows are shown as one entry by `entries show`.
    """
    settings = load_settings()

    try:
        store = build_store(settings, dry_run=dry_run)
        if store is None:
            raise RuntimeError(
                "Supabase credentials not found. Ensure SUPABASE_URL and SUPABASE_KEY "
                "are set in your environment or .env file."
            )

        submission: NotebookSubmission = {
            "labno": labno,
            "labid": labid,
            "fname": fname,
            "lname": lname,
            "notes": notes,
        }
        if username:
            submission["username"] = username

        # Validate before copying anything into the uploads directory.
        validate_submission(submission)
        submission["attachments"] = stage_attachments(
            attachment or [], settings["uploads_dir"], dry_run=dry_run
        )

        result = store.add_entry(submission)
    except (ValueError, RuntimeError, FileNotFoundError, OSError) as e:
        _fail(e)

    prefix = "[dry-run] " if dry_run else ""
    if result["files"]:
        typer.echo(
            f"{prefix}Notebook entry saved successfully with "
            f"{len(result['files'])} attachment(s)"
        )
    else:
        typer.echo(f"{prefix}Notebook entry saved successfully")
    typer.echo(f"User: {result['user']}  Timestamp: {result['timestamp']}")

    log_debug("Rows", result["rows"], debug)
