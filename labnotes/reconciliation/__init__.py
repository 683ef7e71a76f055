"""
Public reconciliation API surface.

External callers (CLI, services, tests) should import from here rather than
reaching into submodules directly.

The reconciliation subsystem includes:
    • reconcile_entries: full pipeline entry point
    • ReconciliationReport: minimal reporting structure
    • attachment_kind / attachment_url: display helpers for attachments
"""

from .orchestrator import ReconciliationReport, reconcile_entries
from .presenter import attachment_kind, attachment_url

__all__ = [
    "reconcile_entries",
    "ReconciliationReport",
    "attachment_kind",
    "attachment_url",
]
