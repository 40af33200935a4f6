"""ISO-8601 timestamps, EXIF dates and precision-aware date formatting.

All timestamps in the catalog are UTC strings with millisecond precision,
e.g. "2023-12-25T16:45:00.000Z". Because they are zero-padded and share one
timezone, plain string comparison orders them chronologically.
"""

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from photoshelf.models.photo import DatePrecision, Photo

_EXIF_DATE_PREFIX = re.compile(r"^(\d{4}):(\d{2}):(\d{2})")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Formats a datetime as a UTC ISO-8601 string with milliseconds and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    # strftime does not zero-pad years below 1000 on every platform
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}.{value.microsecond // 1000:03d}Z"
    )


def now_iso() -> str:
    return to_iso(utc_now())


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parses an ISO-8601 string into an aware UTC datetime.

    Naive values are taken as UTC. Returns None for empty or invalid input.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def year_of(value: Optional[str]) -> Optional[int]:
    """Returns the UTC calendar year of an ISO-8601 string, or None."""
    parsed = parse_iso(value)
    return parsed.year if parsed else None


def parse_exif_datetime(value: Optional[str], offset: Optional[str] = None) -> Optional[datetime]:
    """Parses an EXIF date ("2023:06:15 14:30:00") into an aware UTC datetime.

    Args:
        value: EXIF date string
        offset: Optional EXIF OffsetTime value ("+02:00" or "+0200"); without it
            the camera-local time is taken as UTC

    Returns:
        Parsed datetime or None if the value is not a valid date
    """
    if not value:
        return None

    text = _EXIF_DATE_PREFIX.sub(r"\1-\2-\3", value.strip().rstrip("\x00"))

    if offset:
        offset = offset.strip()
        if len(offset) == 5 and offset[0] in "+-":
            offset = f"{offset[:3]}:{offset[3:]}"
        if re.fullmatch(r"[+-]\d{2}:\d{2}", offset):
            text = f"{text}{offset}"

    return parse_iso(text)


def create_estimated_date(year: int, month: int = 6, day: int = 15) -> str:
    """Returns a noon-UTC timestamp for an estimated date; mid-year, mid-month by default."""
    return to_iso(datetime(year, month, day, 12, 0, 0, tzinfo=timezone.utc))


def create_decade_estimate(decade: int) -> str:
    """Middle of the decade, e.g. 1985-06-15 for the 1980s."""
    return create_estimated_date(decade + 5)


def format_date_for_display(value: str, precision: Union[DatePrecision, str] = DatePrecision.EXACT) -> str:
    """Formats a capture date according to how certain it is.

    >>> format_date_for_display("2023-12-25T16:45:00.000Z", "month")
    'December 2023 (est.)'
    """
    precision = DatePrecision(precision)
    if precision == DatePrecision.UNKNOWN:
        return "Date unknown"

    parsed = parse_iso(value)
    if parsed is None:
        return "Date unknown"

    full_date = f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"
    if precision == DatePrecision.DAY:
        return f"{full_date} (day known)"
    if precision == DatePrecision.MONTH:
        return f"{parsed.strftime('%B')} {parsed.year} (est.)"
    if precision == DatePrecision.YEAR:
        return f"{parsed.year} (est.)"
    if precision == DatePrecision.DECADE:
        return f"{parsed.year // 10 * 10}s (est.)"
    return full_date


def format_date_short(value: str, precision: Union[DatePrecision, str] = DatePrecision.EXACT) -> str:
    """Compact variant of format_date_for_display for tables and cards."""
    precision = DatePrecision(precision)
    parsed = parse_iso(value)
    if precision == DatePrecision.UNKNOWN or parsed is None:
        return "?"
    if precision in (DatePrecision.EXACT, DatePrecision.DAY):
        return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"
    if precision == DatePrecision.MONTH:
        return f"{parsed.strftime('%b')} {parsed.year}"
    if precision == DatePrecision.YEAR:
        return str(parsed.year)
    return f"{parsed.year // 10 * 10}s"


def sort_by_date_taken(photos: Iterable[Photo], descending: bool = True) -> List[Photo]:
    """Returns a new list ordered by dateTaken (string comparison)."""
    return sorted(photos, key=lambda p: p.date_taken, reverse=descending)


def find_by_date_range(photos: Iterable[Photo], start: str, end: str) -> List[Photo]:
    """Photos whose dateTaken lies within [start, end] (inclusive)."""
    return [p for p in photos if start <= p.date_taken <= end]


def find_by_year(photos: Iterable[Photo], year: int) -> List[Photo]:
    return find_by_date_range(photos, f"{year:04d}-01-01T00:00:00.000Z", f"{year:04d}-12-31T23:59:59.999Z")
