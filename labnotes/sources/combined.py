"""
Best-effort concurrent fetch of both notebook sources.

The legacy database and the notebook store are independent systems, so they
are queried in parallel. A failure in one must not hide the other: the
failing source contributes no rows and its error is reported alongside the
result. Only when both fail is the fetch itself an error.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple, TypedDict, TypeVar

from labnotes.types import (
    LegacySourceInterface,
    ModernSourceInterface,
    NotebookRecord,
)

T = TypeVar("T")

SOURCE_NOT_CONFIGURED = "source not configured"


class SourcesUnavailableError(RuntimeError):
    """Raised when neither notebook source could be read."""

    def __init__(self, legacy_error: str, modern_error: str) -> None:
        self.legacy_error = legacy_error
        self.modern_error = modern_error
        super().__init__(
            f"Unable to load notebook entries (legacy: {legacy_error}; modern: {modern_error})"
        )


class FetchResult(TypedDict):
    records: List[NotebookRecord]
    legacy_count: int
    modern_count: int
    legacy_error: Optional[str]
    modern_error: Optional[str]


def _collect(future: Optional["Future[Sequence[T]]"]) -> Tuple[List[T], Optional[str]]:
    if future is None:
        return [], SOURCE_NOT_CONFIGURED
    try:
        return list(future.result()), None
    except Exception as e:
        # Non‑fatal: the source contributes nothing and the error is reported.
        return [], str(e) or e.__class__.__name__


def fetch_all_entries(
    legacy_source: Optional[LegacySourceInterface],
    modern_source: Optional[ModernSourceInterface],
    labno: str,
    labid: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> FetchResult:
    """
    Fetch legacy and modern notebook rows for one specimen in parallel.

    Either source may be None (not configured); it is then treated like a
    source that failed.

    Returns:
        A FetchResult whose `records` holds legacy rows followed by modern
        rows. Order is irrelevant downstream; the presenter sorts.

    Raises:
        SourcesUnavailableError: if both sources fail.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        legacy_future = (
            executor.submit(legacy_source.fetch_entries, labno, labid)
            if legacy_source is not None
            else None
        )
        modern_future = (
            executor.submit(modern_source.fetch_entries, labno, first_name, last_name)
            if modern_source is not None
            else None
        )

        legacy_records, legacy_error = _collect(legacy_future)
        modern_records, modern_error = _collect(modern_future)

    if legacy_error is not None and modern_error is not None:
        raise SourcesUnavailableError(legacy_error, modern_error)

    records: List[NotebookRecord] = [*legacy_records, *modern_records]
    return {
        "records": records,
        "legacy_count": len(legacy_records),
        "modern_count": len(modern_records),
        "legacy_error": legacy_error,
        "modern_error": modern_error,
    }
