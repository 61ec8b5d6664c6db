"""Unit tests for autocat.matching.audio_matcher module."""

import pytest

from autocat.matching.audio_matcher import audio_metadata, extract_snippet, match_audio
from autocat.models import AudioContent, EvidenceKind, MatchType, TranscriptWord


def _content(*words, step=0.5):
    return AudioContent(words=[
        TranscriptWord(word=w, start_time=i * step, end_time=i * step + step * 0.8)
        for i, w in enumerate(words)
    ])


class TestExtractSnippet:
    """Tests for transcript snippets."""

    def test_context_window(self):
        transcript = "aaaaaaaaaa quick bbbbbbbbbb"
        assert extract_snippet(transcript, "quick", context=5) == "aaaa quick bbbb"

    def test_window_clamped_to_transcript(self):
        assert extract_snippet("The quick brown fox", "QUICK") == "The quick brown fox"

    def test_missing_needle(self):
        assert extract_snippet("hello", "bye") is None
        assert extract_snippet("hello", "") is None


class TestAudioMetadata:
    """Tests for transcript statistics."""

    def test_statistics(self):
        words = [
            TranscriptWord(word="a", start_time=0.0, end_time=0.5),
            TranscriptWord(word="b", start_time=0.6, end_time=1.0),
            TranscriptWord(word="A", start_time=2.0, end_time=2.5),
        ]
        meta = audio_metadata(words)
        assert meta["duration"] == 2.5
        assert meta["word_count"] == 3
        assert meta["speech_rate"] == pytest.approx(72.0)
        assert meta["unique_words"] == 2
        assert meta["vocabulary_diversity"] == pytest.approx(2 / 3)
        assert meta["average_word_duration"] == pytest.approx(1.4 / 3)
        assert meta["pause_count"] == 1

    def test_empty_transcript(self):
        meta = audio_metadata([])
        assert meta["word_count"] == 0
        assert meta["speech_rate"] == 0.0

    def test_zero_duration(self):
        """Words without timings do not divide by zero."""
        meta = audio_metadata([TranscriptWord(word="hi")])
        assert meta["speech_rate"] == 0.0


class TestMatchAudio:
    """Tests for transcript matching."""

    def _record(self, record_factory, **fields):
        return record_factory("audio-x", "cat-hr", [{"id": "s1", "annotationType": "audio_segment", **fields}])

    def test_text_match(self, record_factory, directory, settings):
        """A stored span found in the transcript scores 0.95."""
        record = self._record(record_factory, text="Quick Brown", startTime=1.0, endTime=2.0)
        matches = match_audio(_content("The", "quick", "brown", "fox", "jumps"), [record], directory, settings)

        assert len(matches) == 1
        match = matches[0]
        assert match.confidence == pytest.approx(0.95)
        assert match.match_type == MatchType.EXACT
        assert match.evidence_kind == EvidenceKind.AUDIO_SEGMENT
        assert match.source == "audio_transcript_match"
        assert match.snippet == "The quick brown fox jumps"
        assert match.category == "HR"
        assert (match.start_time, match.end_time) == (1.0, 2.0)

    def test_keyword_match(self, record_factory, directory, settings):
        record = self._record(record_factory, text="not spoken", keywordText="fox")
        match = match_audio(_content("the", "fox"), [record], directory, settings)[0]
        assert match.confidence == pytest.approx(0.9)
        assert match.match_type == MatchType.KEYWORD
        assert match.evidence_kind == EvidenceKind.AUDIO_KEYWORD
        assert match.text == "fox"

    def test_text_preferred_over_keyword(self, record_factory, directory, settings):
        record = self._record(record_factory, text="the fox", keywordText="fox")
        match = match_audio(_content("the", "fox"), [record], directory, settings)[0]
        assert match.source == "audio_transcript_match"

    def test_no_match(self, record_factory, directory, settings):
        record = self._record(record_factory, text="goodbye")
        assert match_audio(_content("hello"), [record], directory, settings) == []

    def test_empty_transcript(self, record_factory, directory, settings):
        record = self._record(record_factory, text="hello")
        assert match_audio(AudioContent(), [record], directory, settings) == []
