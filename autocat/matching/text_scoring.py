"""
Text similarity helpers shared by the keyword-based matchers.
"""

from autocat.models import MatchType

EXACT_KEYWORD_CONFIDENCE = 0.9
MAX_FUZZY_CONFIDENCE = 0.8
MIN_KEYWORD_WORD_LENGTH = 3  # Words shorter than this are ignored
FUZZY_WORD_MIN_LENGTH = 4
FUZZY_ACCEPT = 0.7
FUZZY_SCALE = 0.8


def containment_score(a: str, b: str) -> float:
    """min/max length ratio when one string contains the other, else 0.

    Empty strings never match.
    """
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return min(len(a), len(b)) / max(len(a), len(b))
    return 0.0


def word_similarity(word1: str, word2: str) -> float:
    """Share of positions holding the same character, over the longer word.

    Words whose lengths differ by more than half the longer length score 0.
    """
    if word1 == word2:
        return 1.0
    len1, len2 = len(word1), len(word2)
    longest = max(len1, len2)
    if longest == 0 or abs(len1 - len2) > longest * 0.5:
        return 0.0
    common = sum(1 for c1, c2 in zip(word1, word2) if c1 == c2)
    return common / longest


def _best_word_score(keyword_word: str, text_words: list[str]) -> float:
    best = 0.0
    for word in text_words:
        if word == keyword_word:
            return 1.0
        if word in keyword_word or keyword_word in word:
            best = max(best, containment_score(word, keyword_word))
        elif len(keyword_word) >= FUZZY_WORD_MIN_LENGTH and len(word) >= FUZZY_WORD_MIN_LENGTH:
            similarity = word_similarity(keyword_word, word)
            if similarity > FUZZY_ACCEPT:
                best = max(best, similarity * FUZZY_SCALE)
    return best


def keyword_confidence(
    text: str,
    keyword: str,
    exact_confidence: float = EXACT_KEYWORD_CONFIDENCE,
) -> float:
    """
    Confidence that `keyword` occurs in `text`.

    A verbatim case-insensitive occurrence scores `exact_confidence`.
    Otherwise each keyword word of 3+ characters is scored against the
    text words (exact, containment, or fuzzy positional similarity) and the
    result blends coverage and average word score, capped at 0.8.

    Args:
        text: Document text to search
        keyword: Stored keyword, possibly several words

    Returns:
        Confidence in [0, 1]; 0 when no keyword word matched
    """
    text_lower = text.lower()
    keyword_lower = keyword.lower()
    if not keyword_lower.strip():
        return 0.0

    if keyword_lower in text_lower:
        return exact_confidence

    keyword_words = [w for w in keyword_lower.split() if len(w) >= MIN_KEYWORD_WORD_LENGTH]
    if not keyword_words:
        return 0.0
    text_words = text_lower.split()

    matched = 0
    total_score = 0.0
    for keyword_word in keyword_words:
        score = _best_word_score(keyword_word, text_words)
        if score > 0:
            matched += 1
            total_score += score

    if matched == 0:
        return 0.0

    coverage = matched / len(keyword_words)
    average = total_score / matched
    return min(MAX_FUZZY_CONFIDENCE, coverage * 0.6 + average * 0.4)


def classify_match_type(
    text: str,
    keyword: str,
    confidence: float,
    partial_threshold: float = 0.3,
) -> MatchType:
    """exact when the keyword occurs verbatim, partial above the threshold, else keyword."""
    if keyword and keyword.lower() in text.lower():
        return MatchType.EXACT
    if confidence > partial_threshold:
        return MatchType.PARTIAL
    return MatchType.KEYWORD
