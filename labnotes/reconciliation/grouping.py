"""
Grouping keys for notebook entries.

A modern submission with several attached files is stored as several rows.
The grouping key is what folds those rows back into one displayed entry:

    modern → ("modern", specimen, author, creation second, notes[:50])

Legacy rows are already one entry per note, so their key includes a fresh
random nonce and never matches anything:

    legacy → ("legacy", specimen, raw created_at, author id, nonce)

Known limitation of the one-second window: two distinct submissions by the
same author, for the same specimen, with the same notes, inside the same
second merge; a submission whose rows straddle a second boundary splits.
"""

import uuid
from typing import Callable

from labnotes.types import GroupKey, NormalizedEntry

NOTES_PREFIX_LENGTH = 50

NonceFactory = Callable[[], str]


def _random_nonce() -> str:
    return uuid.uuid4().hex


def build_group_key(entry: NormalizedEntry, nonce_factory: NonceFactory = _random_nonce) -> GroupKey:
    """
    Compute the grouping key for a normalized entry.

    Args:
        entry:
            Output of normalize_record().
        nonce_factory:
            Source of per-call uniqueness for legacy keys. Tests may inject a
            deterministic factory; it must still return a distinct value per
            call for legacy entries to stay ungrouped.
    """
    if entry["origin"] == "legacy":
        return (
            "legacy",
            entry["specimen_number"],
            entry["raw_created_at"],
            entry["author_key"],
            nonce_factory(),
        )

    return (
        "modern",
        entry["specimen_number"],
        entry["author_display_name"],
        entry["sort_key"] // 1000,
        entry["notes"][:NOTES_PREFIX_LENGTH],
    )
