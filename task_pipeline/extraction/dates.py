"""Resolve deadline phrases ("by March 6", "tomorrow", "EOD") to ISO dates."""

from __future__ import annotations

import re
from datetime import date, timedelta

_MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

# Longest names first so "sept" wins over "sep" and "june" over "jun".
_MONTH_DAY_RE = re.compile(
    r"\b(?P<month>"
    + "|".join(sorted(_MONTHS, key=len, reverse=True))
    + r")\s+(?P<day>\d{1,2})(?:st|nd|rd|th)?\b",
    re.IGNORECASE,
)
_TOMORROW_RE = re.compile(r"\btomorrow\b", re.IGNORECASE)
_TODAY_RE = re.compile(r"\b(?:today|eod|end\s+of\s+day)\b", re.IGNORECASE)


def resolve_due_date(text: str, today: date) -> str | None:
    """Convert the first recognisable date phrase in *text* to ``YYYY-MM-DD``.

    Rules are tried most-specific first:

    1. ``<Month> <day>`` (full or short month name, optional ordinal suffix
       such as ``5th``) in ``today.year``.
    2. ``tomorrow`` -> ``today + 1 day``.
    3. ``today`` / ``EOD`` / ``end of day`` -> ``today``.

    The year is never read from the phrase and past dates are not rejected.
    A month/day pair that is not a real calendar date (``Feb 30``) is skipped
    and the later rules still get a chance.

    Args:
        text: Free text that may contain a deadline.
        today: Anchor date for relative phrases.

    Returns:
        An ISO date string, or ``None`` when nothing matched.
    """
    if not text:
        return None

    for match in _MONTH_DAY_RE.finditer(text):
        month = _MONTHS[match.group("month").lower()]
        day = int(match.group("day"))
        try:
            return date(today.year, month, day).isoformat()
        except ValueError:
            continue

    if _TOMORROW_RE.search(text):
        return (today + timedelta(days=1)).isoformat()

    if _TODAY_RE.search(text):
        return today.isoformat()

    return None
