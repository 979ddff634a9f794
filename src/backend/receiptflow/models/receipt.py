"""
Pydantic models for the receipt processing API.
"""

from pydantic import BaseModel
from typing import Optional

from receiptflow.models.transaction import (
    ExtractedReceiptData,
    ReceiptMode,
    SuggestedTransaction,
)


class ExtractTextRequest(BaseModel):
    """Model for submitting already-decoded receipt or statement text."""
    text: str
    file_name: Optional[str] = None


class ReceiptProcessResponse(BaseModel):
    """Model for receipt processing API responses."""
    success: bool = True
    message: str
    type: ReceiptMode
    file_name: Optional[str] = None
    extracted_text: str = ""
    extracted_data: Optional[ExtractedReceiptData] = None
    suggested_transaction: Optional[SuggestedTransaction] = None
    transactions: list[SuggestedTransaction] = []
    needs_review: bool = False
    review_reason: Optional[str] = None
