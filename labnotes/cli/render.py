"""
Console rendering of reconciled notebook entries.

Kept separate from the command modules so that `entries show` and
`reconcile run` print identical output.
"""

from typing import List, Sequence

from labnotes.reconciliation import attachment_kind, attachment_url
from labnotes.types import PresentedEntry

SEPARATOR_LINE = "──── Dashboard entries ────"
EMPTY_MESSAGE = "No notebook entries found."


def render_entries(presented: Sequence[PresentedEntry], base_url: str) -> List[str]:
    """
    Render presented entries as console lines, oldest first.

    Returns a single "No notebook entries found." line for empty input.
    """
    if not presented:
        return [EMPTY_MESSAGE]

    lines: List[str] = []
    for item in presented:
        entry = item["entry"]

        if item["separator_before"]:
            lines.append(SEPARATOR_LINE)

        lines.append(
            f"[{entry['origin']}] {entry['created_date']} {entry['created_time']}"
            f"  {entry['author_display_name']}"
            f"  (specimen {entry['specimen_number'] or 'N/A'})"
        )
        for note_line in (entry["notes"] or "").splitlines() or [""]:
            lines.append(f"    {note_line}")
        lines.append(f"    Last modified: {entry['last_modified_display']}")

        if entry["attachments"]:
            lines.append(f"    Attachments ({len(entry['attachments'])}):")
            for name in entry["attachments"]:
                lines.append(
                    f"      - {name} [{attachment_kind(name)}] {attachment_url(base_url, name)}"
                )

        lines.append("")

    return lines
