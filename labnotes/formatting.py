"""
Timestamp parsing and display formatting for notebook entries.

Every function here is total: missing or malformed input degrades to None
(parsing) or the "N/A" sentinel (display), never an exception. This is a
display-safety layer, not a validation layer.

Display conventions follow the dashboard UI (en-US):

    date      → MM/DD/YYYY
    time      → hh:MM AM/PM
    datetime  → MM/DD/YYYY hh:MM AM/PM
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from labnotes.types import RawTimestamp

NOT_AVAILABLE = "N/A"

DEFAULT_DISPLAY_TIMEZONE = "Asia/Manila"

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%I:%M %p"

# Formats seen in the wild that datetime.fromisoformat() may reject on older
# interpreters (variable fraction digits, US-style dates from CSV exports).
_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
)


def get_display_timezone(name: Optional[str] = None) -> tzinfo:
    """
    Resolve an IANA timezone name, falling back to UTC if it is unknown.
    """
    try:
        return ZoneInfo(name or DEFAULT_DISPLAY_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def parse_timestamp(value: RawTimestamp) -> Optional[datetime]:
    """
    Convert a raw source timestamp into a datetime.

    Accepts:
        • datetime objects (returned unchanged)
        • ISO‑8601 strings, with or without a trailing "Z" or offset
        • MySQL-style "YYYY-MM-DD HH:MM:SS" strings
        • epoch milliseconds (int, float, or a digit-only string)

    Returns None for anything missing or unparseable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, (int, float)):
        return _from_epoch_ms(value)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if text.isdigit():
        return _from_epoch_ms(int(text))

    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    return None


def _from_epoch_ms(ms: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def to_display_time(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Move an aware datetime into the display timezone.

    Naive datetimes are assumed to already be in display time and are
    returned unchanged.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz or get_display_timezone())


def _parse_local(value: RawTimestamp, tz: Optional[tzinfo]) -> Optional[datetime]:
    dt = parse_timestamp(value)
    if dt is None:
        return None
    try:
        return to_display_time(dt, tz)
    except (OverflowError, ValueError):
        # e.g. 9999-12-31T23:00Z shifted east of UTC
        return None


def format_date(value: RawTimestamp, tz: Optional[tzinfo] = None) -> str:
    local = _parse_local(value, tz)
    if local is None:
        return NOT_AVAILABLE
    return _safe_strftime(local, DATE_FORMAT)


def format_time(value: RawTimestamp, tz: Optional[tzinfo] = None) -> str:
    local = _parse_local(value, tz)
    if local is None:
        return NOT_AVAILABLE
    return _safe_strftime(local, TIME_FORMAT)


def format_datetime(value: RawTimestamp, tz: Optional[tzinfo] = None) -> str:
    """
    Render a timestamp as "MM/DD/YYYY hh:MM AM/PM", or "N/A".

    Used for the "last modified" column, which shows date and time together.
    """
    local = _parse_local(value, tz)
    if local is None:
        return NOT_AVAILABLE
    date_part = _safe_strftime(local, DATE_FORMAT)
    time_part = _safe_strftime(local, TIME_FORMAT)
    if NOT_AVAILABLE in (date_part, time_part):
        return NOT_AVAILABLE
    return f"{date_part} {time_part}"


def _safe_strftime(dt: datetime, fmt: str) -> str:
    try:
        return dt.strftime(fmt)
    except ValueError:
        return NOT_AVAILABLE


def to_sort_key(value: RawTimestamp, tz: Optional[tzinfo] = None) -> int:
    """
    Epoch milliseconds of a creation instant, or 0 when it is absent.

    Naive datetimes are interpreted in the display timezone so legacy and
    modern rows sort on the same clock.
    """
    dt = parse_timestamp(value)
    if dt is None:
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz or get_display_timezone())
    try:
        return int(round(dt.timestamp() * 1000))
    except (OverflowError, OSError, ValueError):
        return 0


def raw_timestamp_text(value: RawTimestamp) -> str:
    """
    Stable string form of a raw timestamp, used inside grouping keys.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
