import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.errors import InvalidDate

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_utc_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime object to an ISO 8601 string with 'Z' suffix.

    If the datetime is naive, it is assumed to be in UTC and is made aware.
    If it is timezone-aware, it is converted to UTC.

    Args:
        dt: A datetime object or None

    Returns:
        An ISO 8601 formatted string with 'Z' suffix, or None if the input is None.
    """
    dt = ensure_utc(dt)
    if dt is None:
        return None

    # Format to ISO string and replace the +00:00 suffix with 'Z'.
    iso_string = dt.isoformat()

    if iso_string.endswith("+00:00"):
        return iso_string.replace("+00:00", "Z")

    return iso_string


def parse_report_date(value) -> date:
    """Accept a date or a strict YYYY-MM-DD string; anything else is InvalidDate."""
    if isinstance(value, datetime):
        raise InvalidDate("Expected a calendar date, not a timestamp.")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise InvalidDate("Date parameter is required (YYYY-MM-DD format)")
    if not _DATE_PATTERN.match(value):
        raise InvalidDate()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDate(f"'{value}' is not a valid calendar date.")


def resolve_timezone(tz: str) -> tzinfo:
    """Map a timezone name to a tzinfo, raising ValueError for unknown names."""
    if not tz or tz.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone '{tz}'")


def day_window_utc(target_date: date, tz: str = "UTC") -> Tuple[datetime, datetime]:
    """
    Half-open UTC window [start, end) covering one calendar day in ``tz``.

    Args:
        target_date: The calendar day being reported on
        tz: IANA timezone string (e.g., 'UTC', 'Asia/Kolkata')

    Returns:
        (start, end) as timezone-aware UTC datetimes
    """
    zone = resolve_timezone(tz)

    local_start = datetime.combine(target_date, time.min, tzinfo=zone)
    local_end = datetime.combine(target_date + timedelta(days=1), time.min, tzinfo=zone)
    return local_start.astimezone(timezone.utc), local_end.astimezone(timezone.utc)


def hours_between(start: datetime, end: Optional[datetime]) -> float:
    # Open check-ins contribute no hours
    if end is None:
        return 0.0
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 3600.0
