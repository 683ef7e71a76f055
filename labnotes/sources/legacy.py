"""
Legacy notebook source.

Reads audit-style notebook rows from the lab information system. The notes
live in PHCMS.SAMPLE_NOTES_ARCHIVE and are joined to the demographics archive
so that the specimen can be matched by lab number and LABID.

The source is read only. Rows come back tagged `kind="legacy"`; nothing
downstream has to guess which database a row came from.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import create_engine, text

from labnotes.types import LegacyRecord

NOTES_READ_ERROR = "Error reading notes"

LEGACY_NOTEBOOK_QUERY = """
    SELECT
        sd."LABNO",
        sd."LABID",
        sd."LNAME",
        sd."FNAME",
        sn."NOTES",
        sn."LASTMOD",
        sn."USER_ID",
        sn."CREATE_DT",
        sn."CREATETIME"
    FROM
        "PHMSDS"."SAMPLE_DEMOG_ARCHIVE" sd
    JOIN
        "PHCMS"."SAMPLE_NOTES_ARCHIVE" sn
    ON
        sd."LABNO" = sn."LABNO"
    {where_clause}
    ORDER BY sn."CREATE_DT" DESC NULLS LAST, sn."CREATETIME" DESC NULLS LAST
"""


class LegacyNotebookSource:
    """
    Fetch legacy notebook rows through a SQLAlchemy engine.

    Any engine-like object exposing `connect()` as a context manager whose
    connection supports `execute(statement, params)` is accepted, which keeps
    tests free of a real Oracle instance.
    """

    def __init__(self, engine: Any) -> None:
        self.engine = engine

    @classmethod
    def from_url(cls, url: Optional[str]) -> "LegacyNotebookSource":
        """
        Build a source from a SQLAlchemy URL (LEGACY_DATABASE_URL).

        Raises
        ------
        RuntimeError
            If no URL is configured.
        """
        if not url:
            raise RuntimeError(
                "Legacy database URL not found. Ensure LEGACY_DATABASE_URL is set "
                "in your environment or .env file."
            )
        return cls(create_engine(url, pool_pre_ping=True))

    def fetch_entries(self, labno: str, labid: Optional[str] = None) -> List[LegacyRecord]:
        """
        Return the legacy notebook rows for a specimen, newest first.

        Matching is case-insensitive. The LABID filter is only applied when a
        non-blank value is given.

        Raises
        ------
        ValueError
            If `labno` is missing or blank.
        """
        if not labno or not labno.strip():
            raise ValueError("Lab number is required")

        conditions = ['LOWER(sd."LABNO") = :labno']
        binds: Dict[str, Any] = {"labno": labno.strip().lower()}

        if labid and labid.strip():
            conditions.append('LOWER(sd."LABID") = :labid')
            binds["labid"] = labid.strip().lower()

        query = LEGACY_NOTEBOOK_QUERY.format(where_clause="WHERE " + " AND ".join(conditions))

        with self.engine.connect() as connection:
            result = connection.execute(text(query), binds)
            rows = result.mappings().all()

        return [clean_legacy_row(row) for row in rows]


def clean_legacy_row(row: Mapping[str, Any]) -> LegacyRecord:
    """
    Map one raw result row to a LegacyRecord.

    Column names are matched case-insensitively because drivers and
    dialects disagree on whether quoted upper-case names come back upper- or
    lower-cased.
    """
    cols = {str(k).upper(): v for k, v in row.items()}

    return {
        "kind": "legacy",
        "specimen_number": _text_or_empty(cols.get("LABNO")),
        "notes": clean_notes(cols.get("NOTES")),
        "created_at": _iso_or_none(cols.get("CREATE_DT")),
        "last_modified_at": _iso_or_none(cols.get("LASTMOD")),
        "author_id": _text_or_none(cols.get("USER_ID")),
    }


def clean_notes(value: Any) -> str:
    """
    Turn a NOTES column value into text.

    NOTES is a CLOB upstream, so depending on the driver settings it may
    arrive as a str, raw bytes, or a LOB handle with a `read()` method.
    A handle that fails to read yields "Error reading notes" so one bad row
    does not hide the rest of the notebook.
    """
    if value is None:
        return ""

    if isinstance(value, str):
        return value

    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")

    if hasattr(value, "read"):
        try:
            data = value.read()
        except Exception:
            return NOTES_READ_ERROR
        if isinstance(data, (bytes, bytearray)):
            return bytes(data).decode("utf-8", errors="replace")
        return "" if data is None else str(data)

    return str(value)


def _iso_or_none(value: Any) -> Optional[str]:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value:
        return str(value)
    return None


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _text_or_empty(value: Any) -> str:
    return "" if value is None else str(value)
