"""Month-name and date parsing helpers."""

from datetime import date, datetime
from typing import Final

MONTH_NAMES: Final = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_MONTH_LOOKUP: Final[dict[str, int]] = {
    **{name.lower(): i for i, name in enumerate(MONTH_NAMES, start=1)},
    **{name[:3].lower(): i for i, name in enumerate(MONTH_NAMES, start=1)},
    "sept": 9,
}


def parse_month(value: object) -> int | None:
    """Parse a month given as a name, abbreviation or number.

    "December", "dec", "DEC", 12 and "12" all give 12.

    Returns:
        Month number 1-12, or None if the value is not a recognisable month.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 1 <= value <= 12 else None
    if not isinstance(value, str):
        return None
    cleaned = value.strip().rstrip(".").lower()
    if cleaned.isdigit():
        return parse_month(int(cleaned))
    return _MONTH_LOOKUP.get(cleaned)


def month_name(month: int) -> str:
    """Full English name for a month number."""
    return MONTH_NAMES[month - 1]


def parse_iso_date(value: object) -> date | None:
    """Parse an ISO date or datetime string into a date.

    Accepts "2024-01-15", "2024-01-15T10:30:00" and "2024-01-15T10:30:00Z".
    Date and datetime objects pass through (datetimes are truncated to the day).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None
