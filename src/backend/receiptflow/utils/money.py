"""
Shared money parsing utilities.

Amounts captured from receipt and statement text come in a handful of shapes:
- Plain: 45, 45.0, 45.00
- Thousands separators: 1,234.56
- Currency prefixed: $12.34, € 12.34
- Signed: -12.34, +2000.00, ($12.34)

Everything is kept as Decimal; floats never enter the pipeline.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
import re

ZERO = Decimal('0')

# Matches the numeric part of an amount, with or without thousands separators
AMOUNT_PATTERN = r'\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d*)?'

# Amounts above this are almost always misread reference numbers
MAX_AMOUNT = Decimal('1000000')

_CURRENCY_RE = re.compile(r'[$£€¥]\s*|\b[A-Z]{3}\b\s*', re.IGNORECASE)


def parse_money(
    amount_str: str,
    allow_negative: bool = False,
    max_amount: Optional[Decimal] = MAX_AMOUNT,
) -> Optional[Decimal]:
    """
    Parse a money string into a Decimal.

    Args:
        amount_str: String containing amount (e.g., "$1,234.56", "+2000.00")
        allow_negative: Whether to keep a leading minus sign (or parentheses)
        max_amount: Reject amounts larger than this; None accepts any size

    Returns:
        Decimal amount or None if parsing fails

    Examples:
        >>> parse_money("$1,234.56")
        Decimal('1234.56')
        >>> parse_money("($12.34)", allow_negative=True)
        Decimal('-12.34')
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    is_negative = False
    cleaned = amount_str.strip()

    # Parentheses notation for negative amounts
    if cleaned.startswith('(') and cleaned.endswith(')'):
        if not allow_negative:
            return None
        is_negative = True
        cleaned = cleaned[1:-1].strip()

    if cleaned.startswith('+'):
        cleaned = cleaned[1:].strip()
    elif cleaned.startswith('-'):
        if not allow_negative:
            return None
        is_negative = True
        cleaned = cleaned[1:].strip()

    cleaned = _CURRENCY_RE.sub('', cleaned).replace(',', '').replace(' ', '')
    if not cleaned:
        return None

    try:
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite():
        return None
    if max_amount is not None and abs(result) > max_amount:
        return None

    return -result if is_negative else result


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts, starting from a Decimal zero."""
    return sum(values, ZERO)
