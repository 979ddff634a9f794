"""
OCR service for extracting text from receipt images and PDFs.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

import pytesseract
from PIL import Image, ImageEnhance
from pdf2image import convert_from_bytes
import PyPDF2

from receiptflow.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tiff')


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of turning an uploaded file into text.

    Either `text` is set (possibly empty, when the file had nothing readable)
    or `error` describes why decoding failed.
    """
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, text: str) -> "DecodeResult":
        return cls(text=text or '')

    @classmethod
    def failure(cls, error: str) -> "DecodeResult":
        return cls(error=error or 'unknown decoding error')


class OCRService:
    """Service for extracting text from receipt files."""

    def __init__(self):
        """Initialize OCR service with Tesseract configuration."""
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    def decode(self, file_data: bytes, mime_type: str, filename: str = "") -> DecodeResult:
        """
        Extract text from a file (auto-detects format).

        Args:
            file_data: Raw file bytes
            mime_type: MIME type of the file
            filename: Optional filename for extension detection

        Returns:
            Decode result with the extracted text or the failure reason
        """
        mime_type = mime_type or ''
        filename = (filename or '').lower()

        if mime_type == 'application/pdf' or filename.endswith('.pdf'):
            return self.decode_pdf(file_data)
        if mime_type.startswith('image/') or filename.endswith(IMAGE_EXTENSIONS):
            return self.decode_image(file_data)

        logger.warning("Unsupported file type", extra={"mime_type": mime_type, "file_name": filename})
        return DecodeResult.failure(f"Unsupported file type: {mime_type or 'unknown'}")

    def decode_image(self, image_data: bytes) -> DecodeResult:
        """
        Extract text from an image using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG, etc.)

        Returns:
            Decode result
        """
        try:
            image = Image.open(io.BytesIO(image_data))
            image = self._preprocess_image(image)
            text = pytesseract.image_to_string(
                image,
                lang=settings.OCR_LANGUAGE,
                config=settings.OCR_CONFIG,
            )
            return DecodeResult.success(text.strip())

        except Exception as e:
            logger.warning("Error extracting text from image", exc_info=True)
            return DecodeResult.failure(f"OCR failed: {e}")

    def decode_pdf(self, pdf_data: bytes) -> DecodeResult:
        """
        Extract text from a PDF file.
        First tries to extract text directly, then falls back to OCR.

        Args:
            pdf_data: Raw PDF bytes

        Returns:
            Decode result
        """
        try:
            text = self._extract_pdf_text_direct(pdf_data)

            # If little or no text found, PDF might be image-based
            if len(text.strip()) < settings.PDF_MIN_TEXT_LENGTH:
                logger.debug("PDF appears to be image-based, using OCR")
                text = self._extract_pdf_text_ocr(pdf_data)

            return DecodeResult.success(text.strip())

        except Exception as e:
            logger.warning("Error extracting text from PDF", exc_info=True)
            return DecodeResult.failure(f"PDF text extraction failed: {e}")

    def _extract_pdf_text_direct(self, pdf_data: bytes) -> str:
        """Extract the text layer of a text-based PDF."""
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(pdf_data))

        text = ""
        for page in pdf_reader.pages:
            text += (page.extract_text() or "") + "\n"

        return text

    def _extract_pdf_text_ocr(self, pdf_data: bytes) -> str:
        """Render each page to an image and OCR it."""
        text = ""
        for image in convert_from_bytes(pdf_data):
            image = self._preprocess_image(image)
            page_text = pytesseract.image_to_string(
                image,
                lang=settings.OCR_LANGUAGE,
                config=settings.OCR_CONFIG,
            )
            text += page_text + "\n"

        return text

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image to improve OCR accuracy.

        Args:
            image: PIL Image object

        Returns:
            Grayscale image with boosted contrast
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = image.convert('L')

        # Helps with faded thermal receipts
        enhancer = ImageEnhance.Contrast(image)
        return enhancer.enhance(2.0)
