"""
Corpus scan: fan a pure scoring function out over every relevant pattern.

The corpus is walked lazily as (pattern, category) pairs, scored on a thread
pool and collected in corpus order. Patterns scoring zero are dropped.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Iterator, Optional, Sequence

from autocat.corpus import CategoryDirectory
from autocat.models import (
    MODALITY_PATTERN_KINDS,
    AnnotationPattern,
    AnnotationRecord,
    FileType,
    MatchCandidate,
    PatternKind,
)

# (pattern, resolved category name) -> candidate or None
ScoreFn = Callable[[AnnotationPattern, str], Optional[MatchCandidate]]


def iter_patterns(
    corpus: Iterable[AnnotationRecord],
    kinds: Sequence[PatternKind],
    unique_ids: bool = False,
) -> Iterator[tuple[AnnotationRecord, AnnotationPattern]]:
    """Yield (record, pattern) for every pattern of the given kinds, in corpus order.

    With unique_ids, a pattern id seen earlier in the corpus is skipped.
    """
    seen: set[str] = set()
    for record in corpus:
        for pattern in record.annotations:
            if pattern.kind not in kinds:
                continue
            if unique_ids:
                if pattern.id in seen:
                    continue
                seen.add(pattern.id)
            yield record, pattern


def scan_corpus(
    corpus: Iterable[AnnotationRecord],
    file_type: FileType,
    score: ScoreFn,
    directory: CategoryDirectory,
    max_workers: int = 8,
    unique_ids: bool = False,
) -> list[MatchCandidate]:
    """
    Score every pattern the modality understands against the candidate content.

    Args:
        corpus: Annotated records
        file_type: Modality of the candidate; selects the pattern kinds
        score: Pure function scoring one pattern; must be thread-safe
        directory: Resolves each record's rule category
        max_workers: Thread pool size
        unique_ids: Score each pattern id once

    Returns:
        Candidates with confidence > 0, in corpus order
    """
    pairs = (
        (pattern, directory.resolve(record.rule.category_id))
        for record, pattern in iter_patterns(corpus, MODALITY_PATTERN_KINDS[file_type], unique_ids)
    )

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        results = list(executor.map(lambda pair: score(*pair), pairs))

    return [c for c in results if c is not None and c.confidence > 0]
