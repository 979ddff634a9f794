"""
Receipt processing API router.

Uploads are decoded and run through the extraction pipeline; nothing is
stored. The client confirms or edits the suggestions and commits them
through the transactions service.
"""

from fastapi import APIRouter, HTTPException, UploadFile, File
from typing import List, Optional, Tuple
import logging

from receiptflow.config import settings
from receiptflow.models.receipt import ExtractTextRequest, ReceiptProcessResponse
from receiptflow.models.transaction import (
    PipelineResult,
    ReceiptMode,
    ReceiptReference,
    SuggestedTransaction,
)
from receiptflow.services.classifier import is_valid_category
from receiptflow.services.ocr import OCRService
from receiptflow.services.pipeline import (
    DEFAULT_DESCRIPTION,
    PDF_DEFAULT_DESCRIPTION,
    ReceiptPipeline,
)

router = APIRouter(prefix="/receipts", tags=["receipts"])
logger = logging.getLogger(__name__)

pipeline = ReceiptPipeline()
ocr_service = OCRService()

IMAGE_MESSAGES = {
    ReceiptMode.SINGLE_RECEIPT: "Receipt processed successfully",
    ReceiptMode.TRANSACTION_HISTORY: "Transaction history processed successfully",
    ReceiptMode.UNKNOWN: "Receipt uploaded but OCR processing failed",
}

PDF_MESSAGES = {
    ReceiptMode.SINGLE_RECEIPT: "PDF receipt processed successfully",
    ReceiptMode.TRANSACTION_HISTORY: "Transaction history processed successfully",
    ReceiptMode.UNKNOWN: "PDF uploaded but processing failed",
}

TEXT_MESSAGES = {
    ReceiptMode.SINGLE_RECEIPT: "Text processed successfully",
    ReceiptMode.TRANSACTION_HISTORY: "Transaction history processed successfully",
    ReceiptMode.UNKNOWN: "Text could not be processed",
}


def _review_flags(result: PipelineResult) -> Tuple[bool, Optional[str]]:
    """
    Flag results the user should look at before committing.

    Suggested categories are not guaranteed to be accepted on commit, so any
    candidate outside the taxonomy is flagged here rather than rejected.
    """
    candidates: List[SuggestedTransaction] = list(result.candidates)
    reasons = []

    if result.mode == ReceiptMode.UNKNOWN:
        reasons.append("text could not be extracted")
    elif not candidates:
        reasons.append("no transactions found")

    if any(c.amount <= 0 for c in candidates) and result.mode != ReceiptMode.UNKNOWN:
        reasons.append("missing amount")

    invalid = sorted({c.category for c in candidates if not is_valid_category(c.type, c.category)})
    if invalid:
        reasons.append(f"category needs confirmation ({', '.join(invalid)})")

    if not reasons:
        return False, None
    return True, "; ".join(reasons)


def _to_response(result: PipelineResult, message: str, file_name: Optional[str]) -> ReceiptProcessResponse:
    needs_review, review_reason = _review_flags(result)
    return ReceiptProcessResponse(
        message=message,
        type=result.mode,
        file_name=file_name,
        extracted_text=result.extracted_text,
        extracted_data=result.extracted_data,
        suggested_transaction=result.suggested_transaction,
        transactions=list(result.transactions),
        needs_review=needs_review,
        review_reason=review_reason,
    )


async def _read_upload(file: UploadFile, max_size_mb: int) -> bytes:
    file_data = await file.read()
    file_size_mb = len(file_data) / (1024 * 1024)

    if file_size_mb > max_size_mb:
        raise HTTPException(
            status_code=400,
            detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {max_size_mb}MB"
        )
    return file_data


@router.post("/upload-image", response_model=ReceiptProcessResponse)
async def upload_image(receipt: UploadFile = File(...)):
    """
    Process a receipt photo.

    Args:
        receipt: Uploaded image file

    Returns:
        Extracted data and suggested transaction(s)
    """
    content_type = receipt.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    file_data = await _read_upload(receipt, settings.MAX_IMAGE_SIZE_MB)
    source = ReceiptReference(file_name=receipt.filename, mime_type=content_type)

    decoded = ocr_service.decode_image(file_data)
    result = pipeline.process(decoded, source=source, default_description=DEFAULT_DESCRIPTION)

    logger.info("Image receipt processed", extra={
        "file_name": receipt.filename,
        "mode": result.mode.value,
        "candidate_count": len(result.candidates),
    })
    return _to_response(result, IMAGE_MESSAGES[result.mode], receipt.filename)


@router.post("/upload-pdf", response_model=ReceiptProcessResponse)
async def upload_pdf(receipt: UploadFile = File(...)):
    """
    Process a PDF receipt or bank statement.

    Args:
        receipt: Uploaded PDF file

    Returns:
        Extracted data and suggested transaction(s)
    """
    content_type = receipt.content_type or ""
    if content_type != "application/pdf":
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    file_data = await _read_upload(receipt, settings.MAX_PDF_SIZE_MB)
    source = ReceiptReference(file_name=receipt.filename, mime_type=content_type)

    decoded = ocr_service.decode_pdf(file_data)
    result = pipeline.process(decoded, source=source, default_description=PDF_DEFAULT_DESCRIPTION)

    logger.info("PDF processed", extra={
        "file_name": receipt.filename,
        "mode": result.mode.value,
        "candidate_count": len(result.candidates),
    })
    return _to_response(result, PDF_MESSAGES[result.mode], receipt.filename)


@router.post("/extract", response_model=ReceiptProcessResponse)
async def extract_text(request: ExtractTextRequest):
    """
    Run extraction on text decoded elsewhere.

    Args:
        request: Decoded text and optional file name

    Returns:
        Extracted data and suggested transaction(s)
    """
    source = ReceiptReference(file_name=request.file_name, mime_type="text/plain")
    result = pipeline.process_text(request.text, source=source)
    return _to_response(result, TEXT_MESSAGES[result.mode], request.file_name)
