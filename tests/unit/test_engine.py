"""Unit tests for autocat.engine module."""

from unittest.mock import patch

import pytest

from autocat.engine import CategorizationEngine
from autocat.exceptions import UnsupportedFileTypeError
from autocat.logging_config import get_correlation_id, reset_correlation_id, set_correlation_id
from autocat.matching.aggregator import aggregate
from autocat.matching.json_matcher import flatten
from autocat.models import (
    AnalysisRequest,
    AnnotationRecord,
    AudioContent,
    ConfidenceScope,
    FileType,
    ImageContent,
    JsonContent,
    PdfContent,
    TextBox,
    TranscriptWord,
)
from autocat.settings import MatchingSettings


@pytest.fixture
def corpus(sample_raw_corpus):
    return [AnnotationRecord.from_raw(r) for r in sample_raw_corpus]


@pytest.fixture
def engine(settings):
    return CategorizationEngine(settings)


def _request(file_type, content, corpus, categories, **kwargs):
    return AnalysisRequest(file_type=file_type, content=content, corpus=corpus, categories=categories, **kwargs)


class TestAnalyzePdf:
    """Tests for PDF categorization."""

    def test_invoice_keyword(self, engine, corpus, categories):
        content = PdfContent(extracted_text="Invoice Number: 12345")
        result = engine.analyze(_request(FileType.PDF, content, corpus, categories))

        assert result.category == "Finance"
        assert result.confidence == pytest.approx(0.9)
        assert len(result.matches) == 1
        assert result.dest_path == "/category/finance"
        assert result.raw["dest_path"] == "/category/finance"
        assert result.raw["page_count"] == 1
        assert result.raw["votes"] == {"Finance": 1}
        assert result.raw["errors"] == []

    def test_nothing_matches(self, engine, corpus, categories):
        result = engine.analyze(_request(FileType.PDF, PdfContent(extracted_text="lorem ipsum"), corpus, categories))
        assert result.category == "uncategorized"
        assert result.confidence == 0.0
        assert result.matches == []

    def test_empty_corpus(self, engine, categories):
        content = PdfContent(extracted_text="Invoice Number")
        result = engine.analyze(_request(FileType.PDF, content, [], categories))
        assert result.category == "uncategorized"


class TestAnalyzeOtherModalities:
    """Tests for JSON, audio and image categorization."""

    def test_json(self, engine, corpus, categories):
        content = JsonContent(key_values=flatten({"contract": {"party": "Acme Corp"}}))
        result = engine.analyze(_request(FileType.JSON, content, corpus, categories))
        assert result.category == "Legal"
        assert result.confidence == pytest.approx(0.95)
        assert result.raw["extracted_keys"] == [{"key": "contract.party", "value": "Acme Corp"}]

    def test_audio(self, engine, corpus, categories):
        words = [
            TranscriptWord(word=w, start_time=i * 0.5, end_time=i * 0.5 + 0.4)
            for i, w in enumerate(["the", "quick", "brown", "fox"])
        ]
        result = engine.analyze(_request(FileType.AUDIO, AudioContent(words=words), corpus, categories))
        assert result.category == "HR"
        assert result.confidence == pytest.approx(0.95)
        assert result.raw["transcription"] == "the quick brown fox"
        assert result.raw["audio_metadata"]["word_count"] == 4

    def test_image(self, engine, corpus, categories, checkerboard_png):
        content = ImageContent(
            image_bytes=checkerboard_png,
            ocr_text="TOTAL",
            text_boxes=[TextBox(text="TOTAL", vertices=[(12, 12), (50, 12), (50, 28), (12, 28)])],
            width=64,
            height=64,
        )
        result = engine.analyze(_request(FileType.IMAGE, content, corpus, categories))
        assert result.category == "Finance"
        assert result.confidence == pytest.approx(0.8)
        assert result.raw["text_match_count"] == 1
        assert result.raw["visual_match_count"] == 1
        assert result.raw["dimensions"] == {"width": 64, "height": 64}

    def test_degraded_content_reported(self, engine, corpus, categories):
        content = AudioContent(errors=["transcription: no transcriber configured"])
        result = engine.analyze(_request(FileType.AUDIO, content, corpus, categories))
        assert result.category == "uncategorized"
        assert result.raw["errors"] == ["transcription: no transcriber configured"]


class TestEngineContract:
    """Tests for request validation and configuration."""

    def test_content_type_mismatch(self, engine, corpus, categories):
        with pytest.raises(UnsupportedFileTypeError):
            engine.analyze(_request(FileType.IMAGE, PdfContent(extracted_text="x"), corpus, categories))

    def test_confidence_scope(self, record_factory, categories):
        """GLOBAL reports the overall max, WINNER the winning category's max."""
        corpus = [
            record_factory("1", "cat-finance", [
                {"id": "f1", "annotationType": "json", "jsonKey": "invoice.id", "jsonValue": "X1"},
            ]),
            record_factory("2", "cat-legal", [
                {"id": "l1", "annotationType": "json", "jsonKey": "buyer", "jsonValue": "acme"},
                {"id": "l2", "annotationType": "json", "jsonKey": "seller", "jsonValue": "corporation"},
            ]),
        ]
        content = JsonContent(key_values=flatten({"invoice": {"id": "X1"}, "vendor": "Acme Corporation"}))
        request = _request(FileType.JSON, content, corpus, categories)

        global_result = CategorizationEngine(MatchingSettings(max_workers=1)).analyze(request)
        winner_result = CategorizationEngine(
            MatchingSettings(max_workers=1, confidence_scope=ConfidenceScope.WINNER)
        ).analyze(request)

        assert global_result.category == winner_result.category == "Legal"
        assert global_result.confidence == pytest.approx(0.95)
        assert winner_result.confidence == pytest.approx(0.7)

    def test_default_settings(self):
        assert CategorizationEngine().settings == MatchingSettings()


class TestCorrelationId:
    """Tests for per-request correlation IDs."""

    def _seen_ids(self, engine, request, runs):
        seen = []

        def recording_aggregate(*args):
            seen.append(get_correlation_id())
            return aggregate(*args)

        with patch("autocat.engine.aggregate", side_effect=recording_aggregate):
            for _ in range(runs):
                engine.analyze(request)
        return seen

    def test_fresh_id_per_request(self, engine, corpus, categories):
        request = _request(FileType.PDF, PdfContent(extracted_text="Invoice Number"), corpus, categories)
        seen = self._seen_ids(engine, request, runs=2)

        assert all(seen)
        assert seen[0] != seen[1]
        assert get_correlation_id() == ""

    def test_caller_id_kept(self, engine, corpus, categories):
        request = _request(FileType.PDF, PdfContent(extracted_text="Invoice Number"), corpus, categories)
        token = set_correlation_id("req-1")
        try:
            assert self._seen_ids(engine, request, runs=1) == ["req-1"]
            assert get_correlation_id() == "req-1"
        finally:
            reset_correlation_id(token)
