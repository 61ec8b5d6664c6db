"""
JSON key-value matcher.

A JSON document is flattened into (path, value) leaves. Each stored `json`
pattern is then compared against every leaf in four tiers of decreasing
confidence; the highest tier any leaf satisfies wins and the first leaf
satisfying it is reported.
"""

import json
from typing import Any, Iterable, Optional

from autocat.corpus import CategoryDirectory
from autocat.logging_config import get_logger
from autocat.models import (
    AnnotationRecord,
    EvidenceKind,
    FileType,
    JsonContent,
    JsonKeyValuePattern,
    KeyValue,
    MatchCandidate,
    MatchType,
)
from autocat.settings import MatchingSettings
from .corpus_scan import scan_corpus

logger = get_logger(__name__)

# Tiers in priority order
TIER_CONFIDENCE: dict[MatchType, float] = {
    MatchType.EXACT_KEY: 0.95,
    MatchType.EXACT_VALUE: 0.9,
    MatchType.PARTIAL_KEY: 0.8,
    MatchType.PARTIAL_VALUE: 0.7,
}


def flatten(obj: Any, prefix: str = "") -> list[KeyValue]:
    """
    Flatten nested JSON into path/value leaves.

    Object keys are dot-joined and array items use `path[index]`. Empty
    objects and arrays are kept as leaves so their keys stay matchable.

    >>> flatten({"a": {"b": 1}})
    [KeyValue(path='a.b', value=1)]
    """
    if isinstance(obj, dict) and obj:
        leaves = []
        for key, value in obj.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            leaves.extend(flatten(value, path))
        return leaves

    if isinstance(obj, list) and obj:
        leaves = []
        for index, value in enumerate(obj):
            leaves.extend(flatten(value, f"{prefix}[{index}]"))
        return leaves

    return [KeyValue(path=prefix, value=obj)]


def stringify(value: Any) -> str:
    """String form used for comparison: strings verbatim, anything else JSON-encoded."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _contains_either_way(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def _satisfies(tier: MatchType, key: str, value: str, pattern_key: str, pattern_value: str) -> bool:
    if tier == MatchType.EXACT_KEY:
        return key == pattern_key
    if tier == MatchType.EXACT_VALUE:
        return value == pattern_value
    if tier == MatchType.PARTIAL_KEY:
        return _contains_either_way(key, pattern_key)
    return _contains_either_way(value, pattern_value)


def best_key_value_match(
    key_values: Iterable[KeyValue],
    json_key: str,
    json_value: str,
) -> Optional[tuple[MatchType, KeyValue]]:
    """Highest tier satisfied by any leaf and the first leaf satisfying it."""
    pattern_key = json_key.lower()
    pattern_value = json_value.lower()
    leaves = [(kv, kv.path.lower(), stringify(kv.value).lower()) for kv in key_values]

    for tier in TIER_CONFIDENCE:
        for kv, key, value in leaves:
            if _satisfies(tier, key, value, pattern_key, pattern_value):
                return tier, kv
    return None


def match_json_pattern(
    key_values: list[KeyValue],
    pattern: JsonKeyValuePattern,
    category: str,
) -> Optional[MatchCandidate]:
    """Score one key/value pattern against the flattened document."""
    found = best_key_value_match(key_values, pattern.json_key, pattern.json_value)
    if found is None:
        return None

    tier, kv = found
    matched_value = stringify(kv.value)
    return MatchCandidate(
        pattern_ref=pattern.id,
        category=category,
        confidence=TIER_CONFIDENCE[tier],
        evidence_kind=EvidenceKind.JSON_KEY_VALUE,
        match_type=tier,
        text=f"{pattern.json_key}: {pattern.json_value}",
        source=f"json_{tier.value}_match",
        snippet=f'Key: "{kv.path}" = Value: "{matched_value}"',
        matched_key=kv.path,
        matched_value=matched_value,
    )


def match_json(
    content: JsonContent,
    corpus: list[AnnotationRecord],
    directory: CategoryDirectory,
    settings: MatchingSettings,
) -> list[MatchCandidate]:
    """Scan every `json` pattern of the corpus against the flattened document."""
    if not content.key_values:
        return []

    def score(pattern: JsonKeyValuePattern, category: str) -> Optional[MatchCandidate]:
        return match_json_pattern(content.key_values, pattern, category)

    candidates = scan_corpus(
        corpus, FileType.JSON, score, directory, settings.max_workers
    )
    logger.info(
        f"JSON matching found {len(candidates)} matches over {len(content.key_values)} keys"
    )
    return candidates
