"""
Audio segment matcher.

Searches the word-level transcript of an audio file for the text (or
keyword) of stored `audio_segment` patterns.

Start and end times of a candidate are copied from the stored pattern, they
are not re-aligned against the candidate transcript.
"""

from typing import Optional

from autocat.corpus import CategoryDirectory
from autocat.logging_config import get_logger
from autocat.models import (
    AnnotationRecord,
    AudioContent,
    AudioSegmentPattern,
    EvidenceKind,
    FileType,
    MatchCandidate,
    MatchType,
    TranscriptWord,
)
from autocat.settings import MatchingSettings
from .corpus_scan import scan_corpus

logger = get_logger(__name__)


def extract_snippet(transcript: str, needle: str, context: int = 50) -> Optional[str]:
    """Text around the first case-insensitive occurrence of needle, or None."""
    if not needle:
        return None
    start = transcript.lower().find(needle.lower())
    if start < 0:
        return None
    end = start + len(needle)
    return transcript[max(0, start - context):min(len(transcript), end + context)]


def audio_metadata(words: list[TranscriptWord], pause_gap_seconds: float = 0.5) -> dict:
    """Summary statistics of a word-level transcript."""
    word_count = len(words)
    if word_count == 0:
        return {
            "duration": 0.0,
            "word_count": 0,
            "speech_rate": 0.0,
            "unique_words": 0,
            "vocabulary_diversity": 0.0,
            "average_word_duration": 0.0,
            "pause_count": 0,
        }

    duration = words[-1].end_time
    unique_words = len({w.word.lower() for w in words})
    total_word_time = sum(w.end_time - w.start_time for w in words)
    pause_count = sum(
        1
        for previous, current in zip(words, words[1:])
        if current.start_time - previous.end_time > pause_gap_seconds
    )

    return {
        "duration": duration,
        "word_count": word_count,
        "speech_rate": word_count / (duration / 60.0) if duration > 0 else 0.0,  # words per minute
        "unique_words": unique_words,
        "vocabulary_diversity": unique_words / word_count,
        "average_word_duration": total_word_time / word_count,
        "pause_count": pause_count,
    }


def match_audio_pattern(
    transcript: str,
    pattern: AudioSegmentPattern,
    category: str,
    settings: MatchingSettings,
) -> Optional[MatchCandidate]:
    """Text occurrence scores higher than a keyword-only occurrence."""
    transcript_lower = transcript.lower()

    if pattern.text and pattern.text.lower() in transcript_lower:
        return MatchCandidate(
            pattern_ref=pattern.id,
            category=category,
            confidence=settings.audio_text_confidence,
            evidence_kind=EvidenceKind.AUDIO_SEGMENT,
            match_type=MatchType.EXACT,
            text=pattern.text,
            source="audio_transcript_match",
            snippet=extract_snippet(transcript, pattern.text, settings.audio_snippet_context),
            start_time=pattern.start_time,
            end_time=pattern.end_time,
        )

    if pattern.keyword_text and pattern.keyword_text.lower() in transcript_lower:
        return MatchCandidate(
            pattern_ref=pattern.id,
            category=category,
            confidence=settings.audio_keyword_confidence,
            evidence_kind=EvidenceKind.AUDIO_KEYWORD,
            match_type=MatchType.KEYWORD,
            text=pattern.keyword_text,
            source="audio_keyword_match",
            snippet=extract_snippet(
                transcript, pattern.keyword_text, settings.audio_snippet_context
            ),
            start_time=pattern.start_time,
            end_time=pattern.end_time,
        )

    return None


def match_audio(
    content: AudioContent,
    corpus: list[AnnotationRecord],
    directory: CategoryDirectory,
    settings: MatchingSettings,
) -> list[MatchCandidate]:
    """Scan every `audio_segment` pattern of the corpus against the transcript."""
    transcript = content.transcript
    if not transcript:
        return []

    def score(pattern: AudioSegmentPattern, category: str) -> Optional[MatchCandidate]:
        return match_audio_pattern(transcript, pattern, category, settings)

    candidates = scan_corpus(
        corpus, FileType.AUDIO, score, directory, settings.max_workers
    )
    logger.info(f"Audio matching found {len(candidates)} segment matches")
    return candidates
