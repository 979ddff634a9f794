"""
Extraction pipeline: turns decoded receipt or statement text into suggested
transactions.

Normalize -> detect mode -> (extract fields -> classify -> assemble) for a
single receipt, or parse rows for a transaction history. A failed decode
short-circuits to a manual-entry placeholder so an upload always completes.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from receiptflow.models.transaction import (
    ExtractedReceiptData,
    PipelineResult,
    ReceiptMode,
    ReceiptReference,
    SuggestedTransaction,
    TransactionType,
)
from receiptflow.services.classifier import MerchantClassifier, OTHER_EXPENSE
from receiptflow.services.history import TransactionHistoryParser, detect_history_mode
from receiptflow.services.ocr import DecodeResult
from receiptflow.services.parser import ReceiptParser, split_lines

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = 'Receipt transaction'
PDF_DEFAULT_DESCRIPTION = 'PDF receipt transaction'
MANUAL_ENTRY_DESCRIPTION = 'Manual entry required'


def assemble_suggestion(
    extracted: ExtractedReceiptData,
    category: str,
    today: date,
    default_description: str = DEFAULT_DESCRIPTION,
    source: Optional[ReceiptReference] = None,
) -> SuggestedTransaction:
    """
    Combine extracted receipt fields into one expense suggestion.

    Args:
        extracted: Fields from the receipt parser (total fallback already applied)
        category: Suggested category for the merchant
        today: Date to use when the receipt has none
        default_description: Description when no merchant was found
        source: Upload the receipt came from

    Returns:
        Expense suggestion carrying a reference to the extracted data
    """
    receipt = ReceiptReference(
        file_name=source.file_name if source else None,
        mime_type=source.mime_type if source else None,
        extracted_data=extracted,
    )
    return SuggestedTransaction(
        type=TransactionType.EXPENSE,
        amount=extracted.total_amount,
        description=extracted.merchant_name or default_description,
        category=category,
        date=extracted.date or today,
        location=extracted.merchant_name or None,
        receipt=receipt,
    )


def manual_entry_placeholder(
    today: date,
    source: Optional[ReceiptReference] = None,
) -> SuggestedTransaction:
    """The suggestion offered when nothing could be read from the upload."""
    return SuggestedTransaction(
        type=TransactionType.EXPENSE,
        amount=Decimal('0'),
        description=MANUAL_ENTRY_DESCRIPTION,
        category=OTHER_EXPENSE,
        date=today,
        receipt=source,
    )


class ReceiptPipeline:
    """Service that sequences extraction for one decoded document."""

    def __init__(
        self,
        parser: Optional[ReceiptParser] = None,
        classifier: Optional[MerchantClassifier] = None,
        history_parser: Optional[TransactionHistoryParser] = None,
        clock: Callable[[], date] = date.today,
    ):
        """Initialize pipeline; the classifier is shared with the history parser."""
        self.parser = parser or ReceiptParser()
        self.classifier = classifier or MerchantClassifier()
        self.history_parser = history_parser or TransactionHistoryParser(self.classifier)
        self.clock = clock

    def process(
        self,
        decoded: DecodeResult,
        source: Optional[ReceiptReference] = None,
        default_description: str = DEFAULT_DESCRIPTION,
    ) -> PipelineResult:
        """
        Run the pipeline on the outcome of an OCR or PDF decode.

        Args:
            decoded: Decoder result, successful or not
            source: Upload the text came from
            default_description: Description for receipts without a merchant

        Returns:
            Pipeline result; never raises for unreadable content
        """
        if not decoded.ok:
            logger.warning("Decoding failed, returning manual entry placeholder", extra={
                "file_name": source.file_name if source else None,
                "error": decoded.error,
            })
            return PipelineResult(
                mode=ReceiptMode.UNKNOWN,
                suggested_transaction=manual_entry_placeholder(self.clock(), source),
                decode_error=decoded.error,
            )

        return self.process_text(decoded.text, source, default_description)

    def process_text(
        self,
        text: str,
        source: Optional[ReceiptReference] = None,
        default_description: str = DEFAULT_DESCRIPTION,
    ) -> PipelineResult:
        """Run the pipeline on text that was decoded successfully."""
        text = text or ''
        lines = split_lines(text)

        if detect_history_mode(lines):
            transactions = self.history_parser.parse(lines)
            logger.info("Processed transaction history", extra={
                "file_name": source.file_name if source else None,
                "transaction_count": len(transactions),
            })
            return PipelineResult(
                mode=ReceiptMode.TRANSACTION_HISTORY,
                extracted_text=text,
                transactions=tuple(transactions),
            )

        extracted = self.parser.parse(text)
        category = self.classifier.suggest(extracted.merchant_name)
        suggestion = assemble_suggestion(
            extracted,
            category,
            today=self.clock(),
            default_description=default_description,
            source=source,
        )

        logger.info("Processed single receipt", extra={
            "file_name": source.file_name if source else None,
            "merchant": extracted.merchant_name,
            "amount": str(extracted.total_amount),
            "category": category,
        })
        return PipelineResult(
            mode=ReceiptMode.SINGLE_RECEIPT,
            extracted_text=text,
            extracted_data=extracted,
            suggested_transaction=suggestion,
        )
