"""
Tests for receipt field extraction: merchant, total, tax, date and line items.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from datetime import date
from decimal import Decimal

from receiptflow.models.transaction import ExtractedReceiptData, LineItem
from receiptflow.services.parser import ReceiptParser, extract_receipt_data, split_lines


DINER_RECEIPT = """Joe's Diner
Burger 8.50
Fries 3.00
TAX 0.90
TOTAL 12.40"""


class TestSplitLines:
    """Line normalization."""

    def test_trims_and_drops_empty_lines(self):
        text = "  Store  \n\n   \r\nItem 1.00\t\n"
        assert split_lines(text) == ["Store", "Item 1.00"]

    def test_empty_input_yields_no_lines(self):
        assert split_lines("") == []
        assert split_lines(None) == []


class TestTotalExtraction:

    def test_single_total_line(self):
        result = extract_receipt_data("TOTAL $45.00")
        assert result.total_amount == Decimal('45.00')

    def test_largest_labelled_amount_wins(self):
        text = "Shop\nSubtotal: 40.00\nTotal: $43.20\nAmount 50.00\nChange 6.80"
        result = extract_receipt_data(text)
        assert result.total_amount == Decimal('50.00')

    def test_thousands_separator(self):
        result = extract_receipt_data("Invoice\nTotal: $1,234.56")
        assert result.total_amount == Decimal('1234.56')

    def test_totals_above_a_million_are_kept(self):
        result = extract_receipt_data("Dealer\nTOTAL 1,250,000.00")
        assert result.total_amount == Decimal('1250000.00')

    def test_no_total_and_no_items_is_zero(self):
        result = extract_receipt_data("Thank you for shopping")
        assert result.total_amount == Decimal('0')

    def test_total_falls_back_to_item_sum(self):
        result = extract_receipt_data("Corner Cafe\nCoffee 3.50\nBagel 6.25")
        assert [item.price for item in result.items] == [Decimal('3.50'), Decimal('6.25')]
        assert result.total_amount == Decimal('9.75')

    def test_fallback_not_used_when_total_found(self):
        result = extract_receipt_data(DINER_RECEIPT)
        assert result.total_amount == Decimal('12.40')


class TestTaxExtraction:

    def test_first_tax_line_wins(self):
        text = "Store\nTax 1.00\nVAT 5.00\nGST: 7.00\nTotal 20.00"
        assert extract_receipt_data(text).tax_amount == Decimal('1.00')

    def test_vat_with_currency_symbol(self):
        assert extract_receipt_data("VAT: €2.10").tax_amount == Decimal('2.10')

    def test_missing_tax_is_zero(self):
        assert extract_receipt_data("Total 5.00").tax_amount == Decimal('0')


class TestDateExtraction:

    def test_numeric_month_first(self):
        assert extract_receipt_data("Store\n01/02/2024").date == date(2024, 1, 2)

    def test_numeric_day_first_when_month_impossible(self):
        assert extract_receipt_data("Store\n25/12/2023").date == date(2023, 12, 25)

    def test_year_first(self):
        assert extract_receipt_data("Store\nDate: 2024-03-15").date == date(2024, 3, 15)

    def test_month_name(self):
        assert extract_receipt_data("Store\nJanuary 15, 2024").date == date(2024, 1, 15)

    def test_first_valid_date_wins(self):
        text = "Store\n99/99/2024\nMar 3, 2024\n04/05/2024"
        assert extract_receipt_data(text).date == date(2024, 3, 3)

    def test_no_date(self):
        assert extract_receipt_data("Store\nTotal 1.00").date is None


class TestLineItems:

    def test_items_skip_total_and_tax_lines(self):
        result = extract_receipt_data(DINER_RECEIPT)
        assert result.items == (
            LineItem(name='Burger', price=Decimal('8.50')),
            LineItem(name='Fries', price=Decimal('3.00')),
        )

    def test_quantity_is_always_one(self):
        result = extract_receipt_data("Shop\n3 Apples 4.50")
        assert result.items[0].name == '3 Apples'
        assert result.items[0].quantity == 1

    def test_short_names_and_zero_prices_are_dropped(self):
        result = extract_receipt_data("Shop\nAB 2.00\nFree sample 0.00\nSoap $1.99")
        assert result.items == (LineItem(name='Soap', price=Decimal('1.99')),)


class TestReceiptParser:

    def test_diner_scenario(self):
        result = ReceiptParser().parse(DINER_RECEIPT)

        assert result.merchant_name == "Joe's Diner"
        assert result.tax_amount == Decimal('0.90')
        assert result.total_amount == Decimal('12.40')
        assert [(i.name, i.price) for i in result.items] == [
            ('Burger', Decimal('8.50')),
            ('Fries', Decimal('3.00')),
        ]

    def test_empty_text_is_all_empty(self):
        assert ReceiptParser().parse("") == ExtractedReceiptData()

    def test_parse_is_deterministic(self):
        parser = ReceiptParser()
        assert parser.parse(DINER_RECEIPT) == parser.parse(DINER_RECEIPT)

    def test_amounts_are_decimal(self):
        result = ReceiptParser().parse(DINER_RECEIPT)
        assert isinstance(result.total_amount, Decimal)
        assert isinstance(result.tax_amount, Decimal)
        assert all(isinstance(item.price, Decimal) for item in result.items)
