from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "ReceiptFlow"
    DEBUG: bool = True

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # OCR
    TESSERACT_CMD: str = "/usr/local/bin/tesseract"  # macOS default
    OCR_LANGUAGE: str = "eng"
    OCR_CONFIG: str = r"--oem 3 --psm 6"

    # PDFs with less direct text than this are treated as scanned images
    PDF_MIN_TEXT_LENGTH: int = 50

    # Upload limits
    MAX_IMAGE_SIZE_MB: int = 10
    MAX_PDF_SIZE_MB: int = 20

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
