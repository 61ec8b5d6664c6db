"""Unit tests for autocat.matching.aggregator module."""

import pytest

from autocat.matching.aggregator import aggregate
from autocat.models import ConfidenceScope, EvidenceKind, MatchCandidate, MatchType, UNCATEGORIZED


def _candidate(category, confidence):
    return MatchCandidate(
        pattern_ref=f"{category}-{confidence}",
        category=category,
        confidence=confidence,
        evidence_kind=EvidenceKind.PDF_KEYWORD,
        match_type=MatchType.EXACT,
    )


class TestAggregate:
    """Tests for majority-vote aggregation."""

    def test_majority_wins_with_global_confidence(self):
        """The most frequent category wins; confidence is the overall max."""
        decision = aggregate([_candidate("A", 0.9), _candidate("A", 0.4), _candidate("B", 0.95)])
        assert decision.category == "A"
        assert decision.confidence == pytest.approx(0.95)
        assert decision.votes == {"A": 2, "B": 1}

    def test_winner_scope(self):
        """WINNER takes the confidence from the winning category only."""
        decision = aggregate(
            [_candidate("A", 0.9), _candidate("A", 0.4), _candidate("B", 0.95)],
            ConfidenceScope.WINNER,
        )
        assert decision.category == "A"
        assert decision.confidence == pytest.approx(0.9)

    def test_empty(self):
        decision = aggregate([])
        assert decision.category == UNCATEGORIZED
        assert decision.confidence == 0.0
        assert decision.votes == {}

    def test_tie_goes_to_first_encountered(self):
        decision = aggregate([
            _candidate("B", 0.5),
            _candidate("A", 0.6),
            _candidate("A", 0.2),
            _candidate("B", 0.9),
        ])
        assert decision.category == "B"

    def test_single_candidate(self):
        decision = aggregate([_candidate("Legal", 0.7)])
        assert decision.category == "Legal"
        assert decision.confidence == pytest.approx(0.7)
