"""
Content extraction service.

Turns a file on disk into the CandidateContent the engine consumes. Provider
failures (OCR, object detection, transcription) never propagate: the content
degrades to whatever could be extracted and the failure is recorded in its
`errors` list. A missing or corrupt source file is fatal.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from autocat.config import get
from autocat.exceptions import ContentUnavailableError
from autocat.logging_config import get_logger
from autocat.matching.image_features import load_image
from autocat.matching.json_matcher import flatten
from autocat.matching.pdf_matcher import split_pages
from autocat.models import (
    AudioContent,
    CandidateContent,
    DetectedRegion,
    FileType,
    ImageContent,
    JsonContent,
    PdfContent,
    TranscriptWord,
)
from .text_extraction import (
    PAGE_SEPARATOR,
    extract_pdf_text,
    normalize_whitespace,
    ocr_image,
    render_pdf_pages,
)

logger = get_logger(__name__)


class Transcriber(ABC):
    """Speech-to-text provider producing word-level timings."""

    @abstractmethod
    def transcribe(self, path: Path) -> list[TranscriptWord]:
        """Transcribe an audio file. May raise on provider failure."""


class VisualDetector(ABC):
    """Object and logo detection provider."""

    @abstractmethod
    def detect(self, image_bytes: bytes) -> tuple[list[DetectedRegion], list[DetectedRegion]]:
        """Return (objects, logos) with boxes in image pixel coordinates."""


class ContentExtractionService(ABC):
    """Extracts comparable content from a candidate file."""

    @abstractmethod
    def extract(self, path: Union[str, Path], file_type: FileType) -> CandidateContent:
        """
        Extract the content of one file.

        Raises:
            ContentUnavailableError: the file is missing, unreadable or corrupt
        """


class LocalContentExtractionService(ContentExtractionService):
    """
    Extraction with local tools: PyMuPDF for PDFs, Tesseract for OCR.

    Transcription and visual detection are delegated to optional providers;
    without a transcriber audio files yield an empty transcript, without a
    detector images are analysed on their pixels alone.
    """

    def __init__(
        self,
        transcriber: Optional[Transcriber] = None,
        detector: Optional[VisualDetector] = None,
        enable_ocr: bool = True,
        ocr_language: Optional[str] = None,
        min_ocr_confidence: Optional[float] = None,
        pdf_ocr_fallback: Optional[bool] = None,
        pdf_ocr_dpi: Optional[int] = None,
    ):
        self.transcriber = transcriber
        self.detector = detector
        self.enable_ocr = enable_ocr
        self.ocr_language = ocr_language or get("extraction", "ocr_language")
        self.min_ocr_confidence = (
            min_ocr_confidence
            if min_ocr_confidence is not None
            else get("extraction", "min_ocr_confidence")
        )
        self.pdf_ocr_fallback = (
            pdf_ocr_fallback if pdf_ocr_fallback is not None else get("extraction", "pdf_ocr_fallback")
        )
        self.pdf_ocr_dpi = pdf_ocr_dpi or get("extraction", "pdf_ocr_dpi")

    def extract(self, path: Union[str, Path], file_type: FileType) -> CandidateContent:
        path = Path(path)
        if not path.is_file():
            raise ContentUnavailableError(f"File not found: {path}")

        logger.info(f"Extracting {file_type.value} content from {path.name}")
        if file_type == FileType.IMAGE:
            return self._extract_image(path)
        if file_type == FileType.PDF:
            return self._extract_pdf(path)
        if file_type == FileType.JSON:
            return self._extract_json(path)
        return self._extract_audio(path)

    @staticmethod
    def _read_bytes(path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise ContentUnavailableError(f"Could not read {path}: {e}") from e

    def _extract_image(self, path: Path) -> ImageContent:
        image_bytes = self._read_bytes(path)
        try:
            image = load_image(image_bytes)
        except (OSError, ValueError) as e:
            raise ContentUnavailableError(f"Invalid image {path.name}: {e}") from e

        content = ImageContent(image_bytes=image_bytes, width=image.width, height=image.height)

        if self.enable_ocr:
            try:
                result = ocr_image(image, self.ocr_language, self.min_ocr_confidence)
                content.ocr_text = result.text
                content.text_boxes = result.text_boxes
                logger.debug(
                    f"OCR found {result.word_count} words (confidence {result.mean_confidence:.2f})"
                )
            except Exception as e:
                logger.warning(f"OCR failed for {path.name}: {e}")
                content.errors.append(f"ocr: {e}")

        if self.detector is not None:
            try:
                objects, logos = self.detector.detect(image_bytes)
                content.detected_objects = list(objects)
                content.detected_logos = list(logos)
                content.detector_available = True
            except Exception as e:
                logger.warning(f"Visual detection failed for {path.name}: {e}")
                content.errors.append(f"detection: {e}")

        return content

    def _extract_pdf(self, path: Path) -> PdfContent:
        file_bytes = self._read_bytes(path)
        raw_text = extract_pdf_text(file_bytes)
        errors = []

        if not raw_text.replace(PAGE_SEPARATOR, "").strip() and self.pdf_ocr_fallback and self.enable_ocr:
            logger.info(f"{path.name} has no text layer, running OCR")
            try:
                pages = render_pdf_pages(file_bytes, self.pdf_ocr_dpi)
                raw_text = PAGE_SEPARATOR.join(
                    ocr_image(page, self.ocr_language, self.min_ocr_confidence).text
                    for page in pages
                )
            except ContentUnavailableError:
                raise
            except Exception as e:
                logger.warning(f"PDF OCR failed for {path.name}: {e}")
                errors.append(f"ocr: {e}")

        extracted_text = normalize_whitespace(raw_text)
        # Split before normalizing, which would erase the page breaks
        pages = [
            page.model_copy(update={"content": normalize_whitespace(page.content)})
            for page in split_pages(raw_text)
        ] if extracted_text else []
        return PdfContent(extracted_text=extracted_text, pages=pages, errors=errors)

    def _extract_json(self, path: Path) -> JsonContent:
        try:
            data = json.loads(self._read_bytes(path).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ContentUnavailableError(f"Invalid JSON {path.name}: {e}") from e
        return JsonContent(key_values=flatten(data))

    def _extract_audio(self, path: Path) -> AudioContent:
        if self.transcriber is None:
            logger.warning("No transcriber configured, audio yields an empty transcript")
            return AudioContent(errors=["transcription: no transcriber configured"])
        try:
            words = self.transcriber.transcribe(path)
        except Exception as e:
            logger.warning(f"Transcription failed for {path.name}: {e}")
            return AudioContent(errors=[f"transcription: {e}"])
        return AudioContent(words=list(words))
