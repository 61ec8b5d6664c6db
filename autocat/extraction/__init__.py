"""
Content extraction module.

Provides:
- File type detection (file_detector.py)
- PDF text layer and Tesseract OCR (text_extraction.py)
- Extraction service and provider interfaces (service.py)
"""

from autocat.extraction.file_detector import detect_file_type
from autocat.extraction.service import (
    ContentExtractionService,
    LocalContentExtractionService,
    Transcriber,
    VisualDetector,
)
from autocat.extraction.text_extraction import (
    OcrResult,
    extract_pdf_text,
    normalize_whitespace,
    ocr_image,
    sanitize_text,
)

__all__ = [
    "detect_file_type",
    "ContentExtractionService",
    "LocalContentExtractionService",
    "Transcriber",
    "VisualDetector",
    "OcrResult",
    "extract_pdf_text",
    "normalize_whitespace",
    "ocr_image",
    "sanitize_text",
]
