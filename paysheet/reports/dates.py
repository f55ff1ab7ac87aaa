"""
Canonical dates.

Every date the reporting engine compares is first rendered as a
zero-padded ``YYYY-MM-DD`` string in the local calendar. Zero padding
is what makes plain string comparison equal to date comparison.
"""

from datetime import date, datetime
from typing import Optional, Union


# Tried in order. US month-first wins for ambiguous slash dates, which
# is how browsers parse them.
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d-%b-%Y",
)


def _from_datetime(value: datetime) -> Optional[str]:
    if value.tzinfo is not None:
        try:
            value = value.astimezone()
        except (OverflowError, ValueError):
            # The local day falls outside datetime's range.
            return None
    return value.date().isoformat()


def normalize_date(value: Union[str, date, datetime, None]) -> Optional[str]:
    """
    Canonical ``YYYY-MM-DD`` for ``value``, or None if it cannot be parsed.

    Timezone-aware timestamps are converted to the local day first, so
    ``2024-01-05T23:30:00-05:00`` lands on whatever day that instant is
    locally.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _from_datetime(value)
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except (ValueError, OverflowError):
            continue

    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(iso)
    except (ValueError, OverflowError):
        return None
    return _from_datetime(parsed)


def parse_canonical(value: str) -> date:
    """Inverse of normalize_date for strings it produced."""
    return date.fromisoformat(value)
