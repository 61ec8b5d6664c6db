"""
PDF keyword matcher.

Scores stored `pdf` keyword patterns against the extracted text of a PDF and
locates the page holding each exact occurrence.
"""

import re
from typing import Iterable, Optional

from autocat.corpus import CategoryDirectory
from autocat.logging_config import get_logger
from autocat.models import (
    AnnotationRecord,
    EvidenceKind,
    FileType,
    MatchCandidate,
    PdfContent,
    PdfKeywordPattern,
    PdfPage,
)
from autocat.settings import MatchingSettings
from .corpus_scan import scan_corpus
from .text_scoring import classify_match_type, keyword_confidence

logger = get_logger(__name__)

# Form feed, or two blank lines in a row
PAGE_BREAK = re.compile(r"\f|\n\s*\n\s*\n")


def split_pages(text: str) -> list[PdfPage]:
    """Split extracted text into pages, dropping blank ones.

    Falls back to a single page holding the whole text when nothing remains.
    """
    parts = [part for part in PAGE_BREAK.split(text) if part.strip()]
    if not parts:
        parts = [text]
    return [PdfPage(page_number=i + 1, content=part) for i, part in enumerate(parts)]


def find_page(pages: Iterable[PdfPage], keyword: str) -> Optional[int]:
    """Number of the first page containing the keyword (case-insensitive)."""
    keyword_lower = keyword.lower()
    for page in pages:
        if keyword_lower in page.content.lower():
            return page.page_number
    return None


def match_pdf_pattern(
    content: PdfContent,
    pages: list[PdfPage],
    pattern: PdfKeywordPattern,
    category: str,
    settings: MatchingSettings,
) -> Optional[MatchCandidate]:
    """Score one keyword pattern; None below the acceptance threshold."""
    text = content.extracted_text
    if not text:
        return None

    confidence = keyword_confidence(text, pattern.keyword_text, settings.pdf_exact_confidence)
    if confidence <= settings.pdf_accept_threshold:
        logger.debug(f"No match for '{pattern.keyword_text}' (confidence {confidence:.3f})")
        return None

    match_type = classify_match_type(
        text, pattern.keyword_text, confidence, settings.pdf_partial_threshold
    )
    return MatchCandidate(
        pattern_ref=pattern.id,
        category=category,
        confidence=confidence,
        evidence_kind=EvidenceKind.PDF_KEYWORD,
        match_type=match_type,
        text=pattern.keyword_text,
        source="pdf_keyword_match",
        page_number=find_page(pages, pattern.keyword_text),
    )


def match_pdf(
    content: PdfContent,
    corpus: list[AnnotationRecord],
    directory: CategoryDirectory,
    settings: MatchingSettings,
) -> list[MatchCandidate]:
    """Scan every `pdf` pattern of the corpus against the document text."""
    if not content.extracted_text:
        return []

    pages = content.pages or split_pages(content.extracted_text)

    def score(pattern: PdfKeywordPattern, category: str) -> Optional[MatchCandidate]:
        return match_pdf_pattern(content, pages, pattern, category, settings)

    candidates = scan_corpus(
        corpus, FileType.PDF, score, directory, settings.max_workers
    )
    logger.info(f"PDF matching found {len(candidates)} keyword matches")
    return candidates
