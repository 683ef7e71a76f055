"""
labnotes/types.py

Centralized type definitions for the lab notebook reconciliation engine.

This module defines the TypedDicts and Protocols shared by the source
adapters, the reconciliation pipeline, the CLI, and the test doubles.
Keeping them in one place gives:

    • a single source of truth for both notebook record shapes
    • clear contracts between the fetch boundary and the reconciliation stages
    • easy mocking and dependency injection in tests

When a column is added to the legacy view or the `pdo_notebook` table,
this file should be updated first.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Protocol, Tuple, TypedDict, Union

# Raw timestamps arrive as datetime objects (SQL drivers), strings (JSON
# artifacts, Supabase rows) or epoch milliseconds.
RawTimestamp = Union[datetime, str, int, float, None]

Origin = Literal["legacy", "modern"]


# ---------------------------------------------------------------------------
# LegacyRecord
# ---------------------------------------------------------------------------
# One row of the read-only audit notebook (PHCMS.SAMPLE_NOTES_ARCHIVE joined to
# the demographics archive). Each row is a complete, singular entry.
#
# `kind` is set by the source adapter that produced the row. Downstream stages
# dispatch on it and never sniff for column names.
# ---------------------------------------------------------------------------
class LegacyRecord(TypedDict):
    kind: Literal["legacy"]
    specimen_number: str
    notes: str
    created_at: RawTimestamp
    last_modified_at: RawTimestamp
    author_id: Optional[str]


# ---------------------------------------------------------------------------
# ModernRecord
# ---------------------------------------------------------------------------
# One row of the application-owned `pdo_notebook` table. A single submission
# with N attached files is stored as N rows sharing specimen, author, notes
# and creation second.
# ---------------------------------------------------------------------------
class ModernRecord(TypedDict):
    kind: Literal["modern"]
    specimen_number: str
    notes: str
    created_at: RawTimestamp
    modified_at: RawTimestamp
    author_name: Optional[str]
    attachment_path: Optional[str]


NotebookRecord = Union[LegacyRecord, ModernRecord]


# ---------------------------------------------------------------------------
# NormalizedEntry
# ---------------------------------------------------------------------------
# The intermediate shape produced by the Entry Normalizer. Both record kinds
# collapse into this shape before grouping.
#
# `raw_created_at` and `author_key` keep the untouched source values so the
# legacy grouping key can be built from them.
# ---------------------------------------------------------------------------
class NormalizedEntry(TypedDict):
    origin: Origin
    specimen_number: str
    notes: str
    author_display_name: str
    author_key: str
    raw_created_at: str
    created_date: str
    created_time: str
    last_modified_display: str
    attachment: Optional[str]
    sort_key: int


# ---------------------------------------------------------------------------
# GroupedEntry
# ---------------------------------------------------------------------------
# Canonical Grouped Entry: the de-duplicated, display-ready unit. Built fresh
# on every reconcile call and never persisted.
# ---------------------------------------------------------------------------
class GroupedEntry(TypedDict):
    specimen_number: str
    notes: str
    created_date: str
    created_time: str
    last_modified_display: str
    author_display_name: str
    attachments: List[str]
    origin: Origin
    sort_key: int


class PresentedEntry(TypedDict):
    entry: GroupedEntry
    separator_before: bool


GroupKey = Tuple[Any, ...]


# ---------------------------------------------------------------------------
# NotebookSubmission
# ---------------------------------------------------------------------------
# Input for NotebookStoreClient.add_entry(). Mirrors the form posted by the
# "add notebook" dialog. `attachments` are filenames already saved in the
# uploads directory.
# ---------------------------------------------------------------------------
class NotebookSubmission(TypedDict, total=False):
    labno: str
    labid: str
    fname: str
    lname: str
    notes: str
    username: str
    tech_create: str
    attachments: List[str]


class ReconciliationSummary(TypedDict):
    legacy_records: int
    modern_records: int
    groups: int
    merged_rows: int
    attachments: int


# ---------------------------------------------------------------------------
# SupabaseExecuteResponse
# ---------------------------------------------------------------------------
# The normalized response returned from Supabase `.execute()` by test doubles.
# The real SDK returns an object with `.data` / `.error` attributes instead;
# both shapes are handled by the store client.
# ---------------------------------------------------------------------------
class SupabaseExecuteResponse(TypedDict, total=False):
    status: int
    data: Any
    error: Optional[Any]


# ---------------------------------------------------------------------------
# Source protocols
# ---------------------------------------------------------------------------
# Structural interfaces for the two notebook sources. The concurrent fetcher
# depends only on these, so tests can pass any object with the right method.
# ---------------------------------------------------------------------------
class LegacySourceInterface(Protocol):
    def fetch_entries(self, labno: str, labid: Optional[str] = None) -> List[LegacyRecord]: ...


class ModernSourceInterface(Protocol):
    def fetch_entries(
        self,
        labno: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> List[ModernRecord]: ...


class SupabaseClientInterface(Protocol):
    """
    The subset of the Supabase Python client used by NotebookStoreClient:

        client.table("pdo_notebook").select("*").eq(...).order(...).execute()
        client.table("pdo_notebook").insert([...]).execute()
    """

    def table(self, name: str) -> Any: ...


AuthorTable = Dict[str, str]


class AddEntryResult(TypedDict):
    entries_created: int
    files: List[str]
    user: str
    timestamp: str
    rows: List[Dict[str, Any]]
