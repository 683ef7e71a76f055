"""
Supabase-backed store for the dashboard's own notebook entries.

The `pdo_notebook` table is owned by this application. Each "add notebook
entry" submission writes one row per attached file (or a single row with an
empty attachment_path when nothing is attached); the reconciliation pipeline
later folds those rows back into one displayed entry.

This wrapper provides:

    • typed reads (`fetch_entries`, `fetch_recent`) returning ModernRecords
    • the submission write path (`add_entry`) with validation and cleanup
      of orphaned uploads on failure
    • deterministic dry‑run behavior (no writes)
    • consistent error normalization across SDK responses and test doubles
"""

from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union, cast

from supabase import create_client

from labnotes.config import Settings
from labnotes.formatting import get_display_timezone
from labnotes.logging_utils import log_warning
from labnotes.types import (
    AddEntryResult,
    ModernRecord,
    NotebookSubmission,
    SupabaseClientInterface,
)

DEFAULT_TABLE = "pdo_notebook"
DEFAULT_USER = "SYSTEM"
STORE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# ---------------------------------------------------------------------------
# Helper: normalize Supabase responses
# ---------------------------------------------------------------------------


def _extract_data(resp: Any) -> List[Dict[str, Any]]:
    """
    Normalize Supabase responses across:
        • real SDK objects (`.data` / `.error` attributes)
        • dict-style responses from test doubles

    Always returns a list of row dictionaries.
    Raises RuntimeError on any Supabase error.
    """

    # Dict-style response (test doubles)
    if isinstance(resp, dict):
        status = resp.get("status", 200)
        if status >= 400 or resp.get("error"):
            raise RuntimeError(f"Supabase error: {resp}")
        data = resp.get("data", [])
        return cast(List[Dict[str, Any]], data or [])

    # SDK-style response
    error = getattr(resp, "error", None)
    if error:
        raise RuntimeError(f"Supabase error: {error}")

    data = getattr(resp, "data", None)
    if data is None:
        return []

    if isinstance(data, list):
        return cast(List[Dict[str, Any]], data)

    return cast(List[Dict[str, Any]], [data])


def format_store_timestamp(moment: datetime) -> str:
    """Render a timestamp the way the `createDate` column stores it."""
    return moment.strftime(STORE_TIMESTAMP_FORMAT)


def validate_submission(submission: NotebookSubmission) -> None:
    """
    Check the required submission fields.

    Raises
    ------
    ValueError
        If notes are blank, or any of labno, fname, lname is missing.
    """
    if not (submission.get("notes") or "").strip():
        raise ValueError("Notes field is required")

    if not submission.get("labno") or not submission.get("fname") or not submission.get("lname"):
        raise ValueError("Missing required patient information (labno, fname, lname)")


def row_to_record(row: Mapping[str, Any]) -> ModernRecord:
    """
    Map a `pdo_notebook` row to a ModernRecord.
    """
    return {
        "kind": "modern",
        "specimen_number": str(row.get("labno") or ""),
        "notes": str(row.get("notes") or ""),
        "created_at": row.get("createDate"),
        "modified_at": row.get("modDate"),
        "author_name": row.get("techCreate"),
        "attachment_path": row.get("attachment_path") or None,
    }


# ---------------------------------------------------------------------------
# Main wrapper class
# ---------------------------------------------------------------------------


class NotebookStoreClient:
    """
    A thin, dependency‑injected wrapper around a Supabase‑compatible client.

    Parameters
    ----------
    client : Any
        A Supabase‑compatible client (real SDK or test double). May be None
        in dry‑run mode.
    dry_run : bool
        If True, writes are simulated and never reach Supabase.
    table : str
        Name of the notebook table.
    uploads_dir : str | Path
        Directory where uploaded attachments are stored.
    tz : tzinfo | None
        Timezone used to stamp new entries. Defaults to the display timezone.
    """

    def __init__(
        self,
        client: Optional[SupabaseClientInterface] = None,
        dry_run: bool = False,
        table: str = DEFAULT_TABLE,
        uploads_dir: Union[str, Path] = "uploads",
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.client = client
        self.dry_run = dry_run
        self.table = table
        self.uploads_dir = Path(uploads_dir)
        self.tz = tz or get_display_timezone()

    @classmethod
    def from_settings(cls, settings: Settings, dry_run: bool = False) -> "NotebookStoreClient":
        """
        Factory constructor for production usage.

        Creates the official Supabase SDK client from SUPABASE_URL and
        SUPABASE_KEY and wraps it.

        Raises
        ------
        RuntimeError
            If the Supabase credentials are missing and dry_run is False.
        """
        url = settings["supabase_url"]
        key = settings["supabase_key"]

        client: Optional[SupabaseClientInterface] = None
        if url and key:
            client = create_client(url, key)
        elif not dry_run:
            raise RuntimeError(
                "Supabase credentials not found. Ensure SUPABASE_URL and SUPABASE_KEY "
                "are set in your environment or .env file."
            )

        return cls(
            client,
            dry_run=dry_run,
            table=settings["notebook_table"],
            uploads_dir=settings["uploads_dir"],
            tz=get_display_timezone(settings["display_timezone"]),
        )

    # -----------------------------------------------------------------------
    # Internal helper: enforce presence of a real Supabase client
    # -----------------------------------------------------------------------

    def _require_client(self) -> SupabaseClientInterface:
        if self.client is None:
            raise RuntimeError("Supabase client is not configured")
        return self.client

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def fetch_entries(
        self,
        labno: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> List[ModernRecord]:
        """
        Fetch notebook rows, newest first.

        Each non-empty argument adds an equality filter; with no arguments
        every row is returned.
        """
        client = self._require_client()
        query = client.table(self.table).select("*")

        for column, value in (("fname", first_name), ("lname", last_name), ("labno", labno)):
            if value:
                query = query.eq(column, value)

        resp = query.order("createDate", desc=True).execute()
        return [row_to_record(row) for row in _extract_data(resp)]

    def fetch_recent(self, limit: int = 10) -> List[ModernRecord]:
        """
        Fetch the most recent notebook rows across all specimens.
        """
        if limit <= 0:
            raise ValueError("limit must be a positive integer")

        client = self._require_client()
        resp = client.table(self.table).select("*").order("createDate", desc=True).limit(limit).execute()
        return [row_to_record(row) for row in _extract_data(resp)]

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def add_entry(self, submission: NotebookSubmission, now: Optional[datetime] = None) -> AddEntryResult:
        """
        Store one notebook submission.

        A submission with N attachments becomes N rows that share notes,
        user and timestamp; without attachments it becomes a single row with
        an empty attachment_path.

        The acting user is `username`, else `tech_create`, else "SYSTEM".

        Parameters
        ----------
        submission : NotebookSubmission
            Form fields plus the filenames already saved under uploads_dir.
        now : datetime | None
            Override for the submission time (tests). Defaults to the current
            time in the store timezone.

        Raises
        ------
        ValueError
            If notes are blank or labno/fname/lname are missing.
        RuntimeError
            If the insert fails. Uploaded files named in the submission are
            removed before the error propagates.
        """
        validate_submission(submission)

        notes = (submission.get("notes") or "").strip()
        labno = submission.get("labno")
        fname = submission.get("fname")
        lname = submission.get("lname")

        files = [f for f in submission.get("attachments") or [] if f]
        user = submission.get("username") or submission.get("tech_create") or DEFAULT_USER
        timestamp = format_store_timestamp(now or datetime.now(self.tz))

        base_row: Dict[str, Any] = {
            "labno": labno,
            "labid": submission.get("labid") or "",
            "fname": fname,
            "lname": lname,
            "code": "",
            "facility_name": "",
            "notes": notes,
            "createDate": timestamp,
            "techCreate": user,
            "modDate": timestamp,
            "techMod": user,
        }
        rows = [{**base_row, "attachment_path": f} for f in files] or [
            {**base_row, "attachment_path": ""}
        ]

        if self.dry_run:
            inserted = rows
        else:
            try:
                client = self._require_client()
                resp = client.table(self.table).insert(rows).execute()
                inserted = _extract_data(resp) or rows
            except Exception:
                self._remove_orphaned_files(files)
                raise

        return {
            "entries_created": len(rows),
            "files": files,
            "user": user,
            "timestamp": timestamp,
            "rows": inserted,
        }

    def _remove_orphaned_files(self, files: List[str]) -> None:
        """
        Delete uploads whose notebook rows were never written.

        Only the basename is used so a crafted filename cannot point outside
        the uploads directory.
        """
        for name in files:
            path = self.uploads_dir / Path(name).name
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                log_warning(f"Failed to delete orphaned file {path}: {e}")
