"""
Fold normalized entries into Canonical Grouped Entries.
"""

from typing import Callable, Dict, Iterable

from labnotes.reconciliation.grouping import build_group_key
from labnotes.types import GroupedEntry, GroupKey, NormalizedEntry

KeyBuilder = Callable[[NormalizedEntry], GroupKey]


def aggregate_entries(
    entries: Iterable[NormalizedEntry],
    key_builder: KeyBuilder = build_group_key,
) -> Dict[GroupKey, GroupedEntry]:
    """
    Group normalized entries by key, merging attachment lists.

    Rules:
        • The first entry seen for a key seeds the group; its notes, author
          and timestamps win.
        • Later entries with the same key only contribute their attachment,
          and only if that filename is not already on the group.

    Dict order is insertion order, which is not chronological. Ordering is
    the presenter's job.
    """
    groups: Dict[GroupKey, GroupedEntry] = {}

    for entry in entries:
        key = key_builder(entry)
        attachment = entry["attachment"]

        existing = groups.get(key)
        if existing is not None:
            if attachment and attachment not in existing["attachments"]:
                existing["attachments"].append(attachment)
            continue

        groups[key] = {
            "specimen_number": entry["specimen_number"],
            "notes": entry["notes"],
            "created_date": entry["created_date"],
            "created_time": entry["created_time"],
            "last_modified_display": entry["last_modified_display"],
            "author_display_name": entry["author_display_name"],
            "attachments": [attachment] if attachment else [],
            "origin": entry["origin"],
            "sort_key": entry["sort_key"],
        }

    return groups
