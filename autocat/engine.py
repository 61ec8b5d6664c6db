"""
Categorization engine.

Selects the matcher for the request's modality, scans the corpus, aggregates
the evidence and returns one AnalysisResult. The engine performs no I/O: the
extracted content, corpus and category list all arrive in the request.
"""

import time
from typing import Any, Optional

from autocat.corpus import CategoryDirectory
from autocat.exceptions import UnsupportedFileTypeError
from autocat.logging_config import (
    generate_correlation_id,
    get_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)
from autocat.matching.aggregator import aggregate
from autocat.matching.audio_matcher import audio_metadata, match_audio
from autocat.matching.json_matcher import match_json, stringify
from autocat.matching.pdf_matcher import match_pdf, split_pages
from autocat.matching.region_correlator import match_image
from autocat.models import (
    AnalysisRequest,
    AnalysisResult,
    AudioContent,
    FileType,
    ImageContent,
    JsonContent,
    MatchCandidate,
    PdfContent,
)
from autocat.settings import MatchingSettings

logger = get_logger(__name__)

_CONTENT_TYPES = {
    FileType.IMAGE: ImageContent,
    FileType.PDF: PdfContent,
    FileType.JSON: JsonContent,
    FileType.AUDIO: AudioContent,
}


class CategorizationEngine:
    """Multi-modal matching and evidence aggregation."""

    def __init__(self, settings: Optional[MatchingSettings] = None):
        self.settings = settings or MatchingSettings()

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Categorize one candidate file.

        Args:
            request: File type, extracted content, corpus, categories and
                optional reference images

        Returns:
            AnalysisResult; "uncategorized" with confidence 0 when nothing matched

        Raises:
            UnsupportedFileTypeError: the content does not belong to file_type
        """
        token = None if get_correlation_id() else set_correlation_id(generate_correlation_id())
        try:
            return self._analyze(request)
        finally:
            if token is not None:
                reset_correlation_id(token)

    def _analyze(self, request: AnalysisRequest) -> AnalysisResult:
        expected = _CONTENT_TYPES.get(request.file_type)
        if expected is None or not isinstance(request.content, expected):
            raise UnsupportedFileTypeError(
                f"{type(request.content).__name__} cannot be analysed as {request.file_type}"
            )

        start_time = time.perf_counter()
        directory = CategoryDirectory(request.categories)
        corpus = request.corpus
        content = request.content

        if request.file_type == FileType.IMAGE:
            matches, raw = self._analyze_image(content, request, directory)
        elif request.file_type == FileType.PDF:
            matches, raw = self._analyze_pdf(content, corpus, directory)
        elif request.file_type == FileType.JSON:
            matches, raw = self._analyze_json(content, corpus, directory)
        else:
            matches, raw = self._analyze_audio(content, corpus, directory)

        decision = aggregate(matches, self.settings.confidence_scope)
        raw["votes"] = decision.votes
        raw["errors"] = list(content.errors)

        result = AnalysisResult(
            category=decision.category,
            confidence=decision.confidence,
            matches=matches,
            raw=raw,
        )
        result.raw["dest_path"] = result.dest_path

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Categorized {request.file_type.value} as '{result.category}' "
            f"(confidence {result.confidence:.2f}, {len(matches)} matches, "
            f"{len(corpus)} records, {elapsed_ms:.0f}ms)"
        )
        if content.errors:
            logger.warning(f"Content extraction degraded: {'; '.join(content.errors)}")
        return result

    def _analyze_image(
        self,
        content: ImageContent,
        request: AnalysisRequest,
        directory: CategoryDirectory,
    ) -> tuple[list[MatchCandidate], dict[str, Any]]:
        regions = match_image(
            content, request.corpus, directory, self.settings, request.reference_images
        )
        raw = {
            "ocr_text": content.ocr_text,
            "text_box_count": len(content.text_boxes),
            "detected_objects": [o.name for o in content.detected_objects],
            "detected_logos": [l.name for l in content.detected_logos],
            "text_match_count": len(regions.text_matches),
            "visual_match_count": len(regions.visual_matches),
            "similar_match_count": len(regions.similar_matches),
            "dimensions": {"width": content.width, "height": content.height},
        }
        return regions.all, raw

    def _analyze_pdf(
        self,
        content: PdfContent,
        corpus: list,
        directory: CategoryDirectory,
    ) -> tuple[list[MatchCandidate], dict[str, Any]]:
        matches = match_pdf(content, corpus, directory, self.settings)
        pages = content.pages or (split_pages(content.extracted_text) if content.extracted_text else [])
        raw = {
            "extracted_text_length": len(content.extracted_text),
            "page_count": len(pages),
            "pages": [p.model_dump() for p in pages],
        }
        return matches, raw

    def _analyze_json(
        self,
        content: JsonContent,
        corpus: list,
        directory: CategoryDirectory,
    ) -> tuple[list[MatchCandidate], dict[str, Any]]:
        matches = match_json(content, corpus, directory, self.settings)
        raw = {
            "extracted_keys": [
                {"key": kv.path, "value": stringify(kv.value)} for kv in content.key_values
            ],
        }
        return matches, raw

    def _analyze_audio(
        self,
        content: AudioContent,
        corpus: list,
        directory: CategoryDirectory,
    ) -> tuple[list[MatchCandidate], dict[str, Any]]:
        matches = match_audio(content, corpus, directory, self.settings)
        raw = {
            "transcription": content.transcript,
            "audio_metadata": audio_metadata(
                content.words, self.settings.audio_pause_gap_seconds
            ),
        }
        return matches, raw
