"""
Date parsing for dates captured from receipt and statement text.
"""

import re
from datetime import date, datetime
from typing import Optional

# Numeric dates are read month-first (01/02/2024 is January 2nd) and fall back
# to day-first only when the month-first reading is impossible (13/02/2024).
NUMERIC_FORMATS = [
    '%m/%d/%Y', '%m-%d-%Y',
    '%m/%d/%y', '%m-%d-%y',
    '%d/%m/%Y', '%d-%m-%Y',
    '%d/%m/%y', '%d-%m-%y',
    '%Y/%m/%d', '%Y-%m-%d',
    '%y/%m/%d', '%y-%m-%d',
]

TEXTUAL_FORMATS = [
    '%B %d, %Y', '%b %d, %Y',
    '%B %d %Y', '%b %d %Y',
    '%B %d, %y', '%b %d, %y',
    '%B %d %y', '%b %d %y',
]


def _normalize_month_name(date_str: str) -> str:
    # "Sept. 5, 2024" -> "Sep 5, 2024"
    date_str = re.sub(r'^([A-Za-z]{3,9})\.', r'\1', date_str)
    return re.sub(r'^sept\b', 'Sep', date_str, flags=re.IGNORECASE)


def parse_date_string(date_str: str) -> Optional[date]:
    """
    Parse a captured date string into a calendar date.

    Args:
        date_str: Date text such as "01/15/2024", "2024-01-15" or "Jan 15, 2024"

    Returns:
        The parsed date, or None when no supported format produces a real date
    """
    if not date_str:
        return None

    date_str = ' '.join(date_str.split())
    formats = NUMERIC_FORMATS if date_str[0].isdigit() else TEXTUAL_FORMATS
    if not date_str[0].isdigit():
        date_str = _normalize_month_name(date_str)

    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None
