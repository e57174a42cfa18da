"""
French civil-registry wording for dates and times.

Registry extracts spell times out in words ("onze heures cinquante-huit
minutes") and print dates in long form ("1er mars 2025").
"""

import re
from datetime import date, datetime

MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)

_UNITS = (
    "zéro", "un", "deux", "trois", "quatre", "cinq", "six", "sept", "huit", "neuf",
    "dix", "onze", "douze", "treize", "quatorze", "quinze", "seize",
    "dix-sept", "dix-huit", "dix-neuf",
)
_TENS = {20: "vingt", 30: "trente", 40: "quarante", 50: "cinquante"}

_TIME_RE = re.compile(r"^\s*(\d{1,2})\s*[:hH]\s*(\d{1,2})?\s*(?:min)?\s*$")


def number_in_words(n: int, feminine: bool = False) -> str:
    """0 <= n < 60, which covers hours and minutes."""
    if not 0 <= n < 60:
        raise ValueError(f"out of range: {n}")
    if n < 20:
        words = _UNITS[n]
    else:
        tens, unit = divmod(n, 10)
        if unit == 0:
            words = _TENS[tens * 10]
        elif unit == 1:
            words = f"{_TENS[tens * 10]} et un"
        else:
            words = f"{_TENS[tens * 10]}-{_UNITS[unit]}"
    if feminine and (words == "un" or words.endswith(" et un")):
        words += "e"
    return words


def time_in_words(value: str) -> str | None:
    """'11:58' -> 'onze heures cinquante-huit minutes'. None if unparseable."""
    match = _TIME_RE.match(str(value or ""))
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    if hours > 23 or minutes > 59:
        return None

    text = f"{number_in_words(hours, feminine=True)} heure{'s' if hours > 1 else ''}"
    if minutes:
        text += f" {number_in_words(minutes, feminine=True)} minute{'s' if minutes > 1 else ''}"
    return text


def parse_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def long_date(value: date) -> str:
    """date(2025, 3, 1) -> '1er mars 2025'"""
    day = "1er" if value.day == 1 else str(value.day)
    return f"{day} {MONTHS[value.month - 1]} {value.year}"


def short_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")
