"""Date normalization to canonical UTC ISO-8601 strings"""

import re
from datetime import datetime, timezone
from pathlib import PurePosixPath

from dateutil import parser as dateutil_parser


TIMESTAMP_RE = re.compile(r'^\d{10}$|^\d{13}$')
FILENAME_DATE_RE = re.compile(r'(\d{4})[-_](\d{2})[-_](\d{2})')
FILENAME_TIMESTAMP_RE = re.compile(r'^(\d{13}|\d{10})(?!\d)')


def to_iso(dt: datetime) -> str:
    """Format as UTC ISO-8601 with milliseconds and a Z suffix; naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def from_timestamp(digits: str) -> datetime | None:
    """10 digits are Unix seconds, 13 are milliseconds; other lengths are rejected."""
    if len(digits) == 10:
        seconds = int(digits)
    elif len(digits) == 13:
        seconds = int(digits) / 1000
    else:
        return None
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return dt if 2000 < dt.year < 2100 else None


def parse_date(value: str | None) -> str | None:
    """Normalize an ISO string, Unix timestamp, or common textual date. None if unparseable."""
    if not value:
        return None
    value = str(value).strip()
    if not value:
        return None

    if TIMESTAMP_RE.match(value):
        dt = from_timestamp(value)
        return to_iso(dt) if dt else None

    try:
        return to_iso(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        pass

    try:
        return to_iso(dateutil_parser.parse(value, dayfirst=False))
    except (ValueError, OverflowError):
        return None


def date_from_filename(file_name: str | None) -> str | None:
    """Date embedded in a filename: YYYY-MM-DD / YYYY_MM_DD anywhere, or a leading timestamp."""
    if not file_name:
        return None
    base = PurePosixPath(file_name).name

    if m := FILENAME_DATE_RE.search(base):
        try:
            return to_iso(datetime(int(m.group(1)), int(m.group(2)), int(m.group(3))))
        except ValueError:
            pass

    if m := FILENAME_TIMESTAMP_RE.match(base):
        dt = from_timestamp(m.group(1))
        if dt:
            return to_iso(dt)
    return None
