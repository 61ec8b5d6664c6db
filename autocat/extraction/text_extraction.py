"""
Text extraction: PDF text layer and OCR word boxes.

PDF text comes from the PyMuPDF text layer, with pages joined by form
feeds so the page split downstream can find them. Images (and PDFs without
a text layer) go through Tesseract, which also yields the word and line
boxes the region correlator needs.
"""

import re
from dataclasses import dataclass, field

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from autocat.exceptions import ContentUnavailableError, ExternalServiceError
from autocat.logging_config import get_logger
from autocat.models import TextBox

logger = get_logger(__name__)

PAGE_SEPARATOR = "\f"


@dataclass
class OcrResult:
    """Result of OCR on one image."""

    text: str  # Lines joined by newlines
    text_boxes: list[TextBox] = field(default_factory=list)  # Words, then lines
    mean_confidence: float = 0.0  # 0-1, 0 when nothing was recognised

    @property
    def word_count(self) -> int:
        return len(self.text.split())


def sanitize_text(text: str) -> str:
    """
    Remove illegal control characters from extracted text.

    Keeps tab, newline, carriage return and the form feed used as page
    separator.
    """
    if not text:
        return ""
    return re.sub(r"[\x00-\x08\x0b\x0e-\x1f\x7f]", "", text)


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run, newlines included, into one space."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def open_pdf(file_bytes: bytes) -> fitz.Document:
    """
    Open a PDF from memory.

    Raises:
        ContentUnavailableError: corrupt or password-protected PDF
    """
    try:
        doc = fitz.open(stream=file_bytes, filetype="pdf")
    except Exception as e:
        raise ContentUnavailableError(f"Invalid PDF: {e}") from e
    if doc.is_encrypted:
        doc.close()
        raise ContentUnavailableError("Password-protected PDFs are not supported")
    return doc


def extract_pdf_text(file_bytes: bytes) -> str:
    """Text layer of every page, pages separated by form feeds."""
    doc = open_pdf(file_bytes)
    try:
        pages = [sanitize_text(page.get_text("text")).replace(PAGE_SEPARATOR, "\n") for page in doc]
    finally:
        doc.close()
    logger.debug(f"Extracted {sum(len(p) for p in pages)} chars from {len(pages)} PDF pages")
    return PAGE_SEPARATOR.join(pages)


def render_pdf_pages(file_bytes: bytes, dpi: int = 150) -> list[Image.Image]:
    """Render every page of a PDF to an RGB PIL image."""
    doc = open_pdf(file_bytes)
    images = []
    try:
        for page in doc:
            pix = page.get_pixmap(dpi=dpi)
            images.append(Image.frombytes("RGB", (pix.width, pix.height), pix.samples))
    finally:
        doc.close()
    return images


def ocr_image(
    image: Image.Image,
    language: str = "eng",
    min_confidence: float = 0.0,
) -> OcrResult:
    """
    Run Tesseract on an image.

    Args:
        image: PIL Image
        language: Tesseract language code
        min_confidence: Words below this confidence (0-100) are dropped

    Returns:
        OcrResult with word boxes followed by one box per text line

    Raises:
        ExternalServiceError: Tesseract is missing or failed
    """
    try:
        data = pytesseract.image_to_data(
            image, lang=language, output_type=pytesseract.Output.DICT
        )
    except (pytesseract.TesseractError, OSError, RuntimeError) as e:
        raise ExternalServiceError(f"Tesseract OCR failed: {e}") from e

    word_boxes: list[TextBox] = []
    lines: dict[tuple, list[int]] = {}
    confidences = []

    for i, raw_conf in enumerate(data["conf"]):
        conf = float(raw_conf)
        text = sanitize_text(str(data["text"][i])).strip()
        if conf < 0 or not text or conf < min_confidence:  # -1 means no confidence data
            continue

        left, top = data["left"][i], data["top"][i]
        right, bottom = left + data["width"][i], top + data["height"][i]
        word_boxes.append(
            TextBox(
                text=text,
                vertices=[(left, top), (right, top), (right, bottom), (left, bottom)],
                confidence=min(conf / 100, 1.0),
            )
        )
        confidences.append(conf)
        key = (data["page_num"][i], data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(len(word_boxes) - 1)

    line_boxes = []
    line_texts = []
    for indices in lines.values():
        words = [word_boxes[i] for i in indices]
        line_text = " ".join(w.text for w in words)
        line_texts.append(line_text)
        if len(words) < 2:
            continue
        vertices = [v for w in words for v in w.vertices]
        xs = [v[0] for v in vertices]
        ys = [v[1] for v in vertices]
        line_boxes.append(
            TextBox(
                text=line_text,
                vertices=[(min(xs), min(ys)), (max(xs), min(ys)), (max(xs), max(ys)), (min(xs), max(ys))],
                confidence=sum(w.confidence or 0.0 for w in words) / len(words),
            )
        )

    mean_confidence = sum(confidences) / len(confidences) / 100 if confidences else 0.0
    return OcrResult(
        text="\n".join(line_texts),
        text_boxes=word_boxes + line_boxes,
        mean_confidence=mean_confidence,
    )
