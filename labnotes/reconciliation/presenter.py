"""
Ordering and presentation of grouped notebook entries.

Entries are shown oldest first so the newest note sits at the bottom of the
list, like a paper notebook. Legacy entries predate the application store, so
after sorting they normally form a block at the top; a single separator marks
where the dashboard's own entries begin.
"""

from pathlib import PurePosixPath
from typing import Iterable, List

from labnotes.types import GroupedEntry, PresentedEntry

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
DOCUMENT_EXTENSIONS = {"doc", "docx"}


def sort_grouped_entries(groups: Iterable[GroupedEntry]) -> List[GroupedEntry]:
    """Stable ascending sort by creation instant."""
    return sorted(groups, key=lambda g: g["sort_key"])


def present_entries(sorted_entries: Iterable[GroupedEntry]) -> List[PresentedEntry]:
    """
    Attach the separator flag to an already-sorted sequence.

    The flag is set on the first modern entry whose predecessor is legacy,
    and only once. A list with a single origin gets no separator.
    """
    presented: List[PresentedEntry] = []
    separator_emitted = False
    previous = None

    for entry in sorted_entries:
        show_separator = (
            not separator_emitted
            and previous is not None
            and previous["origin"] == "legacy"
            and entry["origin"] == "modern"
        )
        if show_separator:
            separator_emitted = True

        presented.append({"entry": entry, "separator_before": show_separator})
        previous = entry

    return presented


def attachment_kind(filename: str) -> str:
    """
    Classify an attachment by extension: image, pdf, document, text or other.
    """
    if not filename:
        return "other"

    ext = PurePosixPath(filename).suffix.lstrip(".").lower()
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext == "pdf":
        return "pdf"
    if ext in DOCUMENT_EXTENSIONS:
        return "document"
    if ext == "txt":
        return "text"
    return "other"


def attachment_url(base_url: str, filename: str) -> str:
    """Download URL of an uploaded attachment: <base>/uploads/<filename>."""
    return f"{base_url.rstrip('/')}/uploads/{filename}"
