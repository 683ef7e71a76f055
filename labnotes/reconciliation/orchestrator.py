"""
Notebook reconciliation pipeline.

This module defines the canonical path from raw notebook records (both
sources, already tagged with `kind`) to the ordered list the UI renders:

    1. Normalize: one shape for legacy and modern rows
    2. Group: fold multi-attachment submissions into one entry
    3. Sort: oldest first
    4. Present: mark the legacy → modern boundary

The pipeline is synchronous and pure. It performs no I/O and does not
mutate its input; every call builds fresh structures. Fetching belongs to
labnotes.sources, rendering belongs to the CLI.
"""

from datetime import tzinfo
from typing import Iterable, List, Mapping, Optional

from labnotes.reconciliation.aggregation import KeyBuilder, aggregate_entries
from labnotes.reconciliation.grouping import build_group_key
from labnotes.reconciliation.normalize import normalize_record
from labnotes.reconciliation.presenter import present_entries, sort_grouped_entries
from labnotes.types import (
    NormalizedEntry,
    NotebookRecord,
    PresentedEntry,
    ReconciliationSummary,
)


# ============================================================================
# RECONCILIATION REPORT: STRUCTURED PIPELINE METRICS
# ============================================================================
class ReconciliationReport:
    """
    Counters describing one reconcile call.

    The CLI prints these in verbose mode, and tests assert on exact values.
    """

    def __init__(self) -> None:
        # Raw rows seen, per source
        self.legacy_records = 0
        self.modern_records = 0

        # Canonical Grouped Entries produced
        self.groups = 0

        # Rows folded into an already-existing group
        self.merged_rows = 0

        # Total attachments across all groups (after de-duplication)
        self.attachments = 0

    def to_summary_dict(self) -> ReconciliationSummary:
        return {
            "legacy_records": self.legacy_records,
            "modern_records": self.modern_records,
            "groups": self.groups,
            "merged_rows": self.merged_rows,
            "attachments": self.attachments,
        }


# ============================================================================
# MAIN PIPELINE
# ============================================================================
def reconcile_entries(
    records: Iterable[NotebookRecord],
    author_table: Optional[Mapping[str, str]] = None,
    tz: Optional[tzinfo] = None,
    report: Optional[ReconciliationReport] = None,
    key_builder: KeyBuilder = build_group_key,
) -> List[PresentedEntry]:
    """
    Reconcile legacy and modern notebook records into display order.

    Args:
        records:
            Legacy and modern records in any order.
        author_table:
            Legacy USER_ID → display name. Defaults to the built-in table.
        tz:
            Display timezone. Defaults to the configured dashboard timezone.
        report:
            Optional ReconciliationReport to fill in.
        key_builder:
            Grouping key function; injectable for tests.

    Returns:
        PresentedEntry items, oldest first. Empty input gives an empty list.
    """
    # ------------------------------------------------------------
    # Stage 1: Normalize
    # ------------------------------------------------------------
    normalized: List[NormalizedEntry] = []
    for record in records:
        entry = normalize_record(record, author_table, tz)
        normalized.append(entry)

        if report is not None:
            if entry["origin"] == "legacy":
                report.legacy_records += 1
            else:
                report.modern_records += 1

    # ------------------------------------------------------------
    # Stage 2: Group
    # ------------------------------------------------------------
    groups = aggregate_entries(normalized, key_builder=key_builder)

    # ------------------------------------------------------------
    # Stages 3 + 4: Sort and present
    # ------------------------------------------------------------
    presented = present_entries(sort_grouped_entries(groups.values()))

    if report is not None:
        report.groups = len(groups)
        report.merged_rows = len(normalized) - len(groups)
        report.attachments = sum(len(g["attachments"]) for g in groups.values())

    return presented
