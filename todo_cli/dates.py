"""
todo - Due Date Parsing
=======================
Accepted due date forms:

    2030-01-01                  midnight UTC of that day
    2030-01-01T09:30:00Z        RFC 3339, any offset, converted to UTC
    2030-01-01T09:30:00+02:00

Anything else is an InvalidDateFormatError. A date that is not strictly
after "now" is a DueDateNotInFutureError; that check belongs to the write
path, so the entity itself accepts any date.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from .errors import DueDateNotInFutureError, InvalidDateFormatError, StorageError
from .schema import utc_now

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

CALENDAR_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
RFC3339_RE = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def _parse_calendar_date(text: str) -> Optional[datetime]:
    if not CALENDAR_DATE_RE.fullmatch(text):
        return None
    try:
        day = datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        return None
    return day.replace(tzinfo=timezone.utc)


def _parse_rfc3339(text: str) -> Optional[datetime]:
    match = RFC3339_RE.fullmatch(text)
    if match is None:
        return None
    # fromisoformat before 3.11 only takes exactly 6 fraction digits
    fraction = (match["fraction"] or "").ljust(6, "0")[:6]
    offset = "+00:00" if match["offset"] in ("Z", "z") else match["offset"]
    try:
        value = datetime.fromisoformat(f"{match['base']}T{match['time']}.{fraction}{offset}")
    except ValueError:
        return None
    return value.astimezone(timezone.utc)


def parse_date(text: str) -> datetime:
    """Parse either accepted form into a UTC instant, without the future check"""
    value = _parse_calendar_date(text) or _parse_rfc3339(text)
    if value is None:
        raise InvalidDateFormatError(text)
    return value


def parse_due_date(text: str, now: Optional[datetime] = None) -> datetime:
    """Parse a due date given on the command line and require it to be in the future"""
    value = parse_date(text)
    if value <= (now or utc_now()):
        raise DueDateNotInFutureError(text)
    return value


def format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(DATE_FORMAT)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def to_storage(value: datetime) -> str:
    """Fixed-width RFC 3339 text, so stored values also sort chronologically"""
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_storage(text: str) -> datetime:
    try:
        value = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise StorageError(f"Corrupt timestamp in database: {text!r}") from e
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
