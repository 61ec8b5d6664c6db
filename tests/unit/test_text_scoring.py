"""Unit tests for autocat.matching.text_scoring module."""

import pytest

from autocat.matching.text_scoring import (
    classify_match_type,
    containment_score,
    keyword_confidence,
    word_similarity,
)
from autocat.models import MatchType


class TestContainmentScore:
    """Tests for the length-ratio containment score."""

    def test_substring(self):
        """Score is the shorter length over the longer length."""
        assert containment_score("abc", "abcdef") == pytest.approx(0.5)

    def test_either_direction(self):
        assert containment_score("abcdef", "abc") == pytest.approx(0.5)

    def test_equal(self):
        assert containment_score("total", "total") == 1.0

    def test_empty_never_matches(self):
        """The empty string is not treated as contained in everything."""
        assert containment_score("", "abc") == 0.0
        assert containment_score("abc", "") == 0.0

    def test_disjoint(self):
        assert containment_score("abc", "xyz") == 0.0


class TestWordSimilarity:
    """Tests for positional character similarity."""

    def test_identical(self):
        assert word_similarity("test", "test") == 1.0

    def test_one_character_differs(self):
        assert word_similarity("abcd", "abce") == pytest.approx(0.75)

    def test_length_gap_too_large(self):
        """Lengths differing by more than half the longer word score 0."""
        assert word_similarity("abc", "abcdefgh") == 0.0


class TestKeywordConfidence:
    """Tests for keyword-in-text confidence."""

    def test_verbatim_occurrence(self):
        """Case-insensitive substring scores the exact confidence."""
        assert keyword_confidence("The Invoice Number is 5", "invoice number") == 0.9

    def test_custom_exact_confidence(self):
        assert keyword_confidence("abc total", "TOTAL", exact_confidence=0.75) == 0.75

    def test_no_overlap(self):
        assert keyword_confidence("hello world", "zebra") == 0.0

    def test_partial_word_coverage(self):
        """Half the keyword words matched exactly: 0.5 * 0.6 + 1.0 * 0.4."""
        assert keyword_confidence("invoice total due", "invoice number") == pytest.approx(0.7)

    def test_fuzzy_word_capped(self):
        """A one-letter typo matches fuzzily, capped at 0.8."""
        assert keyword_confidence("please pay this invoise", "invoice") == pytest.approx(0.8)

    def test_short_keyword_words_ignored(self):
        """Keyword words under three characters are not scored."""
        assert keyword_confidence("hello there", "to") == 0.0

    def test_blank_keyword(self):
        assert keyword_confidence("anything", "   ") == 0.0

    def test_bounded(self):
        """Confidence never leaves [0, 1]."""
        for text, keyword in [("a b c", "abc def"), ("invoice", "invoices"), ("x", "x")]:
            assert 0.0 <= keyword_confidence(text, keyword) <= 1.0


class TestClassifyMatchType:
    """Tests for match type classification."""

    def test_exact(self):
        assert classify_match_type("Invoice Number", "invoice", 0.9) == MatchType.EXACT

    def test_partial(self):
        assert classify_match_type("invoice total", "invoice number", 0.7) == MatchType.PARTIAL

    def test_keyword(self):
        assert classify_match_type("invoice total", "invoice number", 0.2) == MatchType.KEYWORD
