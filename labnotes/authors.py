"""
Static lookup of legacy author identifiers to staff display names.

Legacy notebook rows only carry a numeric USER_ID. The dashboard shows the
staff login name instead, using a small closed table. The table is passed
into the normalizer as a dependency so it can be replaced from a JSON file
(LABNOTES_AUTHOR_TABLE) or in tests without touching the pipeline.
"""

import json
from pathlib import Path
from typing import Mapping, Optional, Union

from labnotes.formatting import NOT_AVAILABLE
from labnotes.types import AuthorTable

DEFAULT_AUTHOR_TABLE: AuthorTable = {
    "222": "AAMORFE",
    "202": "ABBRUTAS",
    "223": "ATDELEON",
    "148": "GEYEDRA",
    "87": "MCDIMAILIG",
    "145": "KGSTAROSA",
    "210": "MRGOMEZ",
    "86": "VMWAGAN",
    "129": "JMAPELADO",
}


def load_author_table(path: Optional[Union[str, Path]] = None) -> AuthorTable:
    """
    Load the author table.

    With no path the built-in table is returned (as a copy). With a path,
    the file must contain a JSON object of identifier → name; keys and values
    are coerced to strings.

    Raises
    ------
    FileNotFoundError
        If the path does not exist.
    ValueError
        If the file is not valid JSON or not a JSON object.
    """
    if path is None:
        return dict(DEFAULT_AUTHOR_TABLE)

    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(f"Author table not found: {path_obj}")

    try:
        raw = json.loads(path_obj.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in author table: {path_obj}") from e

    if not isinstance(raw, dict):
        raise ValueError(f"Author table must be a JSON object: {path_obj}")

    return {str(k).strip(): str(v) for k, v in raw.items()}


def resolve_legacy_author(author_id: object, table: Mapping[str, str]) -> str:
    """
    Resolve a legacy USER_ID to a display name.

    Order: table entry → raw identifier → "N/A". Never raises.
    """
    if author_id is None:
        return NOT_AVAILABLE

    key = str(author_id).strip()
    if not key:
        return NOT_AVAILABLE

    return table.get(key) or key
