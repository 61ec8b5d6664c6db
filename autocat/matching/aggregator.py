"""
Evidence aggregation: turn one matcher's candidates into a single decision.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from autocat.models import ConfidenceScope, MatchCandidate, UNCATEGORIZED, clamp_confidence


@dataclass
class Decision:
    category: str
    confidence: float
    votes: dict[str, int]


def aggregate(
    candidates: Sequence[MatchCandidate],
    scope: ConfidenceScope = ConfidenceScope.GLOBAL,
) -> Decision:
    """
    Pick the category with the most candidates.

    Ties go to the category encountered first. With the GLOBAL scope the
    reported confidence is the maximum over every candidate, even when that
    candidate belongs to another category; WINNER restricts it to the
    winning category's candidates.
    """
    if not candidates:
        return Decision(category=UNCATEGORIZED, confidence=0.0, votes={})

    # Counter keeps first-insertion order, so most_common breaks ties by first occurrence
    votes = Counter(c.category for c in candidates)
    winner = votes.most_common(1)[0][0]

    if scope == ConfidenceScope.WINNER:
        confidence = max(c.confidence for c in candidates if c.category == winner)
    else:
        confidence = max(c.confidence for c in candidates)

    return Decision(
        category=winner,
        confidence=clamp_confidence(confidence),
        votes=dict(votes),
    )
