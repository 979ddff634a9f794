"""
Domain records produced by the extraction pipeline.

All records are frozen: they are derived once per document and any user edits
happen downstream.
"""

from dataclasses import dataclass
import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class TransactionType(str, Enum):
    """Polarity of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class ReceiptMode(str, Enum):
    """How an uploaded document was interpreted."""
    SINGLE_RECEIPT = "single_receipt"
    TRANSACTION_HISTORY = "transaction_history"
    UNKNOWN = "unknown"  # Decoding failed, nothing was interpreted


@dataclass(frozen=True)
class LineItem:
    """A single purchased product or service parsed from receipt text."""
    name: str
    price: Decimal
    quantity: int = 1  # Never inferred from the text


@dataclass(frozen=True)
class ExtractedReceiptData:
    """
    Raw fields pulled out of a single receipt.

    Zero amounts, an empty merchant name and a missing date all mean
    "not detected".
    """
    merchant_name: str = ""
    total_amount: Decimal = Decimal('0')
    tax_amount: Decimal = Decimal('0')
    date: Optional[datetime.date] = None
    items: Tuple[LineItem, ...] = ()


@dataclass(frozen=True)
class ReceiptReference:
    """The upload a suggested transaction was derived from."""
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    extracted_data: Optional[ExtractedReceiptData] = None


@dataclass(frozen=True)
class SuggestedTransaction:
    """
    A transaction candidate offered to the user for confirmation.

    `category` is a best-effort suggestion and is not guaranteed to belong to
    the category taxonomy for `type`.
    """
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: datetime.date
    location: Optional[str] = None
    payment_method: Optional[str] = None
    receipt: Optional[ReceiptReference] = None


@dataclass(frozen=True)
class PipelineResult:
    """Everything the pipeline derived from one decoded document."""
    mode: ReceiptMode
    extracted_text: str = ""
    extracted_data: Optional[ExtractedReceiptData] = None
    suggested_transaction: Optional[SuggestedTransaction] = None
    transactions: Tuple[SuggestedTransaction, ...] = ()
    decode_error: Optional[str] = None

    @property
    def candidates(self) -> Tuple[SuggestedTransaction, ...]:
        """All suggested transactions regardless of mode."""
        if self.suggested_transaction is not None:
            return (self.suggested_transaction,)
        return self.transactions
