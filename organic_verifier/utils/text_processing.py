"""Text processing utilities."""

import re
from datetime import datetime

_NON_WORD = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%Y-%m-%d %H:%M:%S",
)


def normalize_text(text: str) -> str:
    """
    Canonicalize a product or ingredient name for comparison.

    Lower-cases, drops everything except word characters, whitespace and
    hyphens, collapses whitespace runs to a single space and trims. Two
    product strings are "the same" exactly when their normalized forms are.

    Args:
        text: Free-text product name

    Returns:
        Normalized text
    """
    text = text.lower()
    text = _NON_WORD.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def parse_date(date_str: str) -> datetime | None:
    """
    Parse date string to datetime.

    Args:
        date_str: Date string

    Returns:
        Datetime object or None
    """
    value = date_str.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None
