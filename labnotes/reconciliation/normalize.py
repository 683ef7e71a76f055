"""
Entry normalization.

Converts a LegacyRecord or ModernRecord into a NormalizedEntry. The two
sources disagree on almost everything (author as an id vs. a name, one
optional attachment vs. none, different timestamp columns); after this stage
the rest of the pipeline sees one shape.

Pure functions only. No field is required to be present: anything missing
degrades to "", None or "N/A".
"""

from datetime import tzinfo
from typing import Mapping, Optional

from labnotes.authors import DEFAULT_AUTHOR_TABLE, resolve_legacy_author
from labnotes.formatting import (
    NOT_AVAILABLE,
    format_date,
    format_datetime,
    format_time,
    raw_timestamp_text,
    to_sort_key,
)
from labnotes.types import LegacyRecord, ModernRecord, NormalizedEntry, NotebookRecord


def normalize_record(
    record: NotebookRecord,
    author_table: Optional[Mapping[str, str]] = None,
    tz: Optional[tzinfo] = None,
) -> NormalizedEntry:
    """
    Normalize one notebook record, dispatching on its `kind`.

    Raises
    ------
    ValueError
        If the record carries an unknown `kind`. The discriminant is set by
        the source adapters, so this only happens on a programming error.
    """
    kind = record.get("kind")

    if kind == "legacy":
        table = DEFAULT_AUTHOR_TABLE if author_table is None else author_table
        return normalize_legacy(record, table, tz)  # type: ignore[arg-type]

    if kind == "modern":
        return normalize_modern(record, tz)  # type: ignore[arg-type]

    raise ValueError(f"Unknown notebook record kind: {kind!r}")


def normalize_legacy(
    record: LegacyRecord,
    author_table: Mapping[str, str],
    tz: Optional[tzinfo] = None,
) -> NormalizedEntry:
    created_at = record.get("created_at")
    author_id = record.get("author_id")

    return {
        "origin": "legacy",
        "specimen_number": _text(record.get("specimen_number")),
        "notes": _text(record.get("notes")),
        "author_display_name": resolve_legacy_author(author_id, author_table),
        "author_key": _text(author_id),
        "raw_created_at": raw_timestamp_text(created_at),
        "created_date": format_date(created_at, tz),
        "created_time": format_time(created_at, tz),
        "last_modified_display": format_datetime(record.get("last_modified_at"), tz),
        # Legacy rows have no attachment concept.
        "attachment": None,
        "sort_key": to_sort_key(created_at, tz),
    }


def normalize_modern(record: ModernRecord, tz: Optional[tzinfo] = None) -> NormalizedEntry:
    created_at = record.get("created_at")
    author_name = _text(record.get("author_name")).strip()
    attachment = _text(record.get("attachment_path")).strip()

    return {
        "origin": "modern",
        "specimen_number": _text(record.get("specimen_number")),
        "notes": _text(record.get("notes")),
        "author_display_name": author_name or NOT_AVAILABLE,
        "author_key": author_name,
        "raw_created_at": raw_timestamp_text(created_at),
        "created_date": format_date(created_at, tz),
        "created_time": format_time(created_at, tz),
        "last_modified_display": format_datetime(record.get("modified_at"), tz),
        "attachment": attachment or None,
        "sort_key": to_sort_key(created_at, tz),
    }


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
