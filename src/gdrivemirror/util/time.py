from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse a Drive timestamp (RFC3339) into a tz-aware UTC datetime.

    Drive returns values such as ``2025-01-01T12:34:56.123Z``; explicit
    offsets (``+09:00``) are accepted too. Naive values are rejected.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        raise ValueError(f"timestamp has no timezone: {value!r}")
    return dt.astimezone(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """Format a tz-aware datetime as RFC3339 UTC with a trailing 'Z'."""
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    s = dt.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return s.replace("+00:00", "Z")


def stamp(value: Union[datetime, str, None]) -> str:
    """
    Canonical string form of a modification time, used as a cache key part.

    Accepts a datetime, an RFC3339 string or None. None/empty becomes "".
    Strings that do not parse are kept verbatim so comparisons still work.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return to_rfc3339(value)
    if not value:
        return ""
    try:
        return to_rfc3339(parse_rfc3339(value))
    except ValueError:
        return value


def parse_optional(value: object) -> Optional[datetime]:
    """Parse an RFC3339 string if present and valid, else None."""
    if not isinstance(value, str):
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None
