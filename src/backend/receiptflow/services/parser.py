"""
Receipt parser service for extracting structured data from OCR text.
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple

from receiptflow.models.transaction import ExtractedReceiptData, LineItem
from receiptflow.utils.dates import parse_date_string
from receiptflow.utils.money import AMOUNT_PATTERN, ZERO, parse_money, sum_money

logger = logging.getLogger(__name__)

CURRENCY_SYMBOL = r'[$€£¥]'


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


def split_lines(text: Optional[str]) -> List[str]:
    """
    Split raw text into trimmed, non-empty lines.

    Line order is kept: the merchant is read from the first line and dates
    are taken from the first line that has one.
    """
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def _labelled_amount(label: str) -> str:
    return rf'{label}[:\s]*{CURRENCY_SYMBOL}?\s*({AMOUNT_PATTERN})'


class ReceiptParser:
    """Service for parsing receipt text and extracting structured data."""

    def __init__(self):
        """Initialize parser with regex patterns."""
        self._init_patterns()

    def _init_patterns(self):
        """Initialize regex patterns for parsing."""

        # Every match is collected; the largest value is the grand total
        self.total_patterns = [
            PatternSpec(
                name='total',
                pattern=_labelled_amount('total'),
                example='TOTAL $45.00',
            ),
            PatternSpec(
                name='amount',
                pattern=_labelled_amount('amount'),
                example='Amount: 45.00',
            ),
            PatternSpec(
                name='sum',
                pattern=_labelled_amount('sum'),
                example='Sum 45.00',
            ),
        ]

        # First match wins
        self.tax_patterns = [
            PatternSpec(
                name='tax',
                pattern=_labelled_amount('tax'),
                example='TAX 0.90',
            ),
            PatternSpec(
                name='vat',
                pattern=_labelled_amount('vat'),
                example='VAT: €2.10',
            ),
            PatternSpec(
                name='gst',
                pattern=_labelled_amount('gst'),
                example='GST $1.25',
            ),
        ]

        self.date_patterns = [
            PatternSpec(
                name='numeric_date',
                pattern=r'(?<!\d)(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})(?!\d)',
                example='01/15/2024',
                notes='MM/DD/YYYY, read day-first only when month-first is impossible',
            ),
            PatternSpec(
                name='year_first_date',
                pattern=r'(?<!\d)(\d{2,4}[/-]\d{1,2}[/-]\d{1,2})(?!\d)',
                example='2024-01-15',
            ),
            PatternSpec(
                name='month_name_date',
                pattern=r'([A-Za-z]{3,9}\.?\s+\d{1,2},?\s+\d{2,4})',
                example='Jan 15, 2024',
            ),
        ]

        self.item_pattern = PatternSpec(
            name='line_item',
            pattern=rf'(.+?)\s+{CURRENCY_SYMBOL}?({AMOUNT_PATTERN})',
            example='Burger 8.50',
            notes='Lines mentioning total or tax are excluded before matching',
        )

        self.item_exclusions = ('total', 'tax')

    def parse(self, text: str) -> ExtractedReceiptData:
        """
        Parse receipt text and extract all available fields.

        Args:
            text: OCR-extracted text from receipt

        Returns:
            Extracted fields; anything not found is left zero or empty
        """
        lines = split_lines(text)

        items = self.extract_items(lines)
        total = self.extract_total(lines)

        # Receipts without a readable total still list their items
        if total == ZERO and items:
            total = sum_money(item.price for item in items)
            logger.debug("Total derived from line items", extra={
                "item_count": len(items),
                "total": str(total),
            })

        return ExtractedReceiptData(
            merchant_name=self.extract_merchant(lines),
            total_amount=total,
            tax_amount=self.extract_tax(lines),
            date=self.extract_date(lines),
            items=tuple(items),
        )

    def extract_merchant(self, lines: List[str]) -> str:
        """The merchant name is conventionally printed on the first line."""
        return lines[0] if lines else ''

    def extract_total(self, lines: List[str]) -> Decimal:
        """
        Extract the total amount.

        Receipts often repeat subtotal and total, so the largest labelled
        amount anywhere in the document is taken as the grand total.

        Args:
            lines: Normalized receipt lines

        Returns:
            Total as Decimal, or 0 if no labelled amount was found
        """
        try:
            total = ZERO
            for line in lines:
                for spec in self.total_patterns:
                    match = spec.compiled.search(line)
                    if not match:
                        continue
                    amount = parse_money(match.group(1), max_amount=None)
                    if amount is not None and amount > total:
                        total = amount
            return total

        except Exception:
            logger.warning("Error extracting total", exc_info=True)
            return ZERO

    def extract_tax(self, lines: List[str]) -> Decimal:
        """
        Extract the tax amount.

        Unlike the total, the first tax line found is used as is.

        Args:
            lines: Normalized receipt lines

        Returns:
            Tax as Decimal, or 0 if no tax line was found
        """
        try:
            for line in lines:
                for spec in self.tax_patterns:
                    match = spec.compiled.search(line)
                    if not match:
                        continue
                    tax = parse_money(match.group(1), max_amount=None)
                    if tax is not None:
                        return tax
            return ZERO

        except Exception:
            logger.warning("Error extracting tax", exc_info=True)
            return ZERO

    def extract_date(self, lines: List[str]) -> Optional[date]:
        """
        Extract the receipt date.

        Args:
            lines: Normalized receipt lines

        Returns:
            First capture that is a real calendar date, or None
        """
        try:
            for line in lines:
                for spec in self.date_patterns:
                    match = spec.compiled.search(line)
                    if not match:
                        continue
                    parsed = parse_date_string(match.group(1))
                    if parsed:
                        return parsed
            return None

        except Exception:
            logger.warning("Error extracting date", exc_info=True)
            return None

    def extract_items(self, lines: List[str]) -> List[LineItem]:
        """
        Extract priced line items.

        Args:
            lines: Normalized receipt lines

        Returns:
            Items in line order, each with quantity 1
        """
        items = []
        try:
            for line in lines:
                line_lower = line.lower()
                if any(word in line_lower for word in self.item_exclusions):
                    continue

                parsed = self._parse_item_line(line)
                if parsed:
                    items.append(LineItem(name=parsed[0], price=parsed[1]))

        except Exception:
            logger.warning("Error extracting line items", exc_info=True)

        return items

    def _parse_item_line(self, line: str) -> Optional[Tuple[str, Decimal]]:
        match = self.item_pattern.compiled.search(line)
        if not match:
            return None

        name = match.group(1).strip()
        price = parse_money(match.group(2), max_amount=None)
        if len(name) <= 2 or price is None or price <= 0:
            return None

        return name, price


_default_parser = ReceiptParser()


def extract_receipt_data(text: str) -> ExtractedReceiptData:
    """Extract receipt fields from decoded text with the default parser."""
    return _default_parser.parse(text)
