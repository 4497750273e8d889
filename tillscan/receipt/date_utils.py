"""Date helpers for receipt parsing."""

from datetime import date

_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def default_receipt_date(today: date | None = None) -> date:
    """Return the date used when a receipt shows none (the extraction day)."""
    return today or date.today()


def month_from_name(name: str) -> int:
    """Map "Jan", "January", "Sept." to a month number. Raises ValueError if unknown."""
    key = name.strip(". ").lower()[:3]
    if key not in _MONTHS:
        raise ValueError(f"Unknown month name: {name!r}")
    return _MONTHS[key]


def expand_two_digit_year(year: int) -> int:
    """Map 2-digit years to 2000-2069 / 1970-1999."""
    if year >= 100:
        return year
    return 2000 + year if year <= 69 else 1900 + year
