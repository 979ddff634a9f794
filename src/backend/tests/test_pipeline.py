"""
Tests for the extraction pipeline: mode branching, suggestion assembly and the
manual-entry placeholder.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from datetime import date
from decimal import Decimal
from typing import Optional, get_type_hints
import warnings

import pytest
from pydantic import TypeAdapter

from receiptflow.models.transaction import (
    ExtractedReceiptData,
    ReceiptMode,
    ReceiptReference,
    SuggestedTransaction,
    TransactionType,
)
from receiptflow.services.ocr import DecodeResult
from receiptflow.services.pipeline import (
    PDF_DEFAULT_DESCRIPTION,
    ReceiptPipeline,
    assemble_suggestion,
    manual_entry_placeholder,
)

TODAY = date(2024, 6, 1)


@pytest.fixture
def pipeline():
    return ReceiptPipeline(clock=lambda: TODAY)


class TestSingleReceipt:

    def test_diner_receipt(self, pipeline):
        text = "Joe's Diner\n03/14/2024\nBurger 8.50\nFries 3.00\nTAX 0.90\nTOTAL 12.40"
        result = pipeline.process_text(text)

        assert result.mode == ReceiptMode.SINGLE_RECEIPT
        assert result.extracted_text == text
        assert result.transactions == ()

        suggestion = result.suggested_transaction
        assert suggestion.type == TransactionType.EXPENSE
        assert suggestion.amount == Decimal('12.40')
        assert suggestion.description == "Joe's Diner"
        assert suggestion.location == "Joe's Diner"
        assert suggestion.category == "food"
        assert suggestion.date == date(2024, 3, 14)
        assert suggestion.receipt.extracted_data == result.extracted_data

    def test_missing_date_defaults_to_today(self, pipeline):
        result = pipeline.process_text("Shell\nTotal 40.00")
        assert result.suggested_transaction.date == TODAY
        assert result.suggested_transaction.category == "gas"

    def test_empty_text_gives_empty_expense(self, pipeline):
        result = pipeline.process_text("")
        suggestion = result.suggested_transaction

        assert result.mode == ReceiptMode.SINGLE_RECEIPT
        assert suggestion.amount == Decimal('0')
        assert suggestion.category == "other-expense"
        assert suggestion.description == "Receipt transaction"
        assert suggestion.location is None

    def test_source_reference_is_carried(self, pipeline):
        source = ReceiptReference(file_name="scan.pdf", mime_type="application/pdf")
        result = pipeline.process(
            DecodeResult.success("Corner Store\nTotal 5.00"),
            source=source,
            default_description=PDF_DEFAULT_DESCRIPTION,
        )
        receipt = result.suggested_transaction.receipt
        assert receipt.file_name == "scan.pdf"
        assert receipt.mime_type == "application/pdf"
        assert receipt.extracted_data.total_amount == Decimal('5.00')

    def test_same_text_same_result(self, pipeline):
        text = "Corner Store\nSoap 1.99\nTotal 1.99"
        assert pipeline.process_text(text) == pipeline.process_text(text)


class TestTransactionHistory:

    def test_history_rows_pass_through(self, pipeline):
        text = (
            "Date Amount Description\n"
            "01/02/2024 Coffee 4.50\n"
            "01/05/2024 Salary Deposit +2000.00\n"
            "not a row"
        )
        result = pipeline.process_text(text)

        assert result.mode == ReceiptMode.TRANSACTION_HISTORY
        assert result.suggested_transaction is None
        assert result.extracted_data is None
        assert [t.type for t in result.transactions] == [
            TransactionType.EXPENSE,
            TransactionType.INCOME,
        ]
        assert result.candidates == result.transactions

    def test_history_without_rows_is_empty(self, pipeline):
        result = pipeline.process_text("Date Amount Description")
        assert result.mode == ReceiptMode.TRANSACTION_HISTORY
        assert result.candidates == ()


class TestDecodeFailure:

    def test_failed_decode_returns_placeholder(self, pipeline):
        result = pipeline.process(DecodeResult.failure("tesseract not installed"))

        assert result.mode == ReceiptMode.UNKNOWN
        assert result.decode_error == "tesseract not installed"
        assert result.extracted_text == ""

        placeholder = result.suggested_transaction
        assert placeholder.type == TransactionType.EXPENSE
        assert placeholder.amount == Decimal('0')
        assert placeholder.category == "other-expense"
        assert placeholder.description == "Manual entry required"
        assert placeholder.date == TODAY

    def test_successful_empty_decode_is_not_a_failure(self, pipeline):
        result = pipeline.process(DecodeResult.success(""))
        assert result.mode == ReceiptMode.SINGLE_RECEIPT
        assert result.decode_error is None


class TestAssembly:

    def test_assemble_uses_default_description(self):
        extracted = ExtractedReceiptData(total_amount=Decimal('3.00'))
        suggestion = assemble_suggestion(
            extracted, "other-expense", TODAY, default_description=PDF_DEFAULT_DESCRIPTION
        )
        assert suggestion.description == "PDF receipt transaction"
        assert suggestion.amount == Decimal('3.00')
        assert suggestion.date == TODAY

    def test_placeholder_keeps_source(self):
        source = ReceiptReference(file_name="photo.jpg")
        assert manual_entry_placeholder(TODAY, source).receipt == source


class TestRecordTypes:

    def test_date_fields_are_typed_as_dates(self):
        assert get_type_hints(ExtractedReceiptData)['date'] == Optional[date]
        assert get_type_hints(SuggestedTransaction)['date'] is date

    def test_dated_receipt_serializes_cleanly(self):
        data = ExtractedReceiptData(merchant_name="Shop", total_amount=Decimal('5.00'), date=date(2024, 1, 15))

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            dumped = TypeAdapter(ExtractedReceiptData).dump_python(data, mode='json')

        assert dumped['date'] == '2024-01-15'
