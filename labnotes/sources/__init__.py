"""
Public API for the notebook data sources.

    from labnotes.sources import LegacyNotebookSource, NotebookStoreClient
    from labnotes.sources import fetch_all_entries, SourcesUnavailableError

Both adapters tag their rows with `kind` so the reconciliation pipeline
never has to infer where a row came from.
"""

from .combined import FetchResult, SourcesUnavailableError, fetch_all_entries
from .legacy import LegacyNotebookSource
from .modern import NotebookStoreClient

__all__ = [
    "LegacyNotebookSource",
    "NotebookStoreClient",
    "fetch_all_entries",
    "FetchResult",
    "SourcesUnavailableError",
]
