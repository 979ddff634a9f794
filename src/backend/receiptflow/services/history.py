"""
Transaction history support: detects bank-statement style uploads and parses
their rows into suggested transactions.
"""

import logging
from typing import Iterable, List, Optional, Union

from receiptflow.models.transaction import SuggestedTransaction, TransactionType
from receiptflow.services.classifier import MerchantClassifier, OTHER_INCOME
from receiptflow.services.parser import CURRENCY_SYMBOL, PatternSpec, split_lines
from receiptflow.utils.dates import parse_date_string
from receiptflow.utils.money import AMOUNT_PATTERN, parse_money

logger = logging.getLogger(__name__)

BANK_TRANSFER = 'bank-transfer'

INCOME_KEYWORDS = ('deposit', 'salary', 'payment received')

ROW_PATTERN = PatternSpec(
    name='history_row',
    pattern=(
        r'(?<!\d)(?P<date>\d{4}[/-]\d{1,2}[/-]\d{1,2}|\d{1,2}[/-]\d{1,2}[/-]\d{2,4})(?!\d)\s+'
        r'(?P<description>.+?)\s+'
        rf'[+-]?{CURRENCY_SYMBOL}?[+-]?(?P<amount>{AMOUNT_PATTERN})'
    ),
    example='01/05/2024 Salary Deposit +2000.00',
    notes='The sign only marks polarity; the amount is kept as a magnitude',
)


def _as_lines(text: Union[str, Iterable[str], None]) -> List[str]:
    if text is None or isinstance(text, str):
        return split_lines(text)
    return [line.strip() for line in text if line and line.strip()]


def detect_history_mode(text: Union[str, Iterable[str], None]) -> bool:
    """
    Decide whether a document is a tabular transaction history.

    A history is recognised by a header line that mentions "date", "amount"
    and either "description" or "transaction".

    Args:
        text: Raw decoded text, or its already-split lines

    Returns:
        True for transaction history, False for a single receipt
    """
    for line in _as_lines(text):
        line_lower = line.lower()
        if (
            'date' in line_lower
            and 'amount' in line_lower
            and ('description' in line_lower or 'transaction' in line_lower)
        ):
            return True
    return False


class TransactionHistoryParser:
    """Parses statement rows into income and expense suggestions."""

    def __init__(self, classifier: Optional[MerchantClassifier] = None):
        self.classifier = classifier or MerchantClassifier()
        self.row_pattern = ROW_PATTERN

    def parse(self, text: Union[str, Iterable[str], None]) -> List[SuggestedTransaction]:
        """
        Parse every row that looks like a dated, priced transaction.

        Rows that do not fit, have an impossible date, or a zero amount are
        skipped without error.

        Args:
            text: Raw decoded text, or its already-split lines

        Returns:
            Suggested transactions in input order (possibly empty)
        """
        lines = _as_lines(text)
        transactions = []

        for line in lines:
            transaction = self.parse_row(line)
            if transaction is not None:
                transactions.append(transaction)

        logger.debug("Parsed transaction history", extra={
            "line_count": len(lines),
            "transaction_count": len(transactions),
        })
        return transactions

    def parse_row(self, line: str) -> Optional[SuggestedTransaction]:
        """Parse a single statement row, or return None if it is not one."""
        match = self.row_pattern.compiled.search(line)
        if not match:
            return None

        row_date = parse_date_string(match.group('date'))
        amount = parse_money(match.group('amount'), max_amount=None)
        if row_date is None or amount is None or amount <= 0:
            return None

        description = match.group('description').strip()
        transaction_type = self.classify_polarity(description, line)

        if transaction_type == TransactionType.INCOME:
            category = OTHER_INCOME
        else:
            category = self.classifier.suggest(description)

        return SuggestedTransaction(
            type=transaction_type,
            amount=amount,
            description=description,
            category=category,
            date=row_date,
            payment_method=BANK_TRANSFER,
        )

    def classify_polarity(self, description: str, line: str) -> TransactionType:
        """Income when the description says so or the row carries a '+'."""
        description_lower = description.lower()
        if any(keyword in description_lower for keyword in INCOME_KEYWORDS) or '+' in line:
            return TransactionType.INCOME
        return TransactionType.EXPENSE


_default_history_parser = TransactionHistoryParser()


def parse_transaction_history(text: str) -> List[SuggestedTransaction]:
    """Parse statement text with the default keyword table."""
    return _default_history_parser.parse(text)
