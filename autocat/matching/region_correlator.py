"""
Image region correlator.

Correlates the OCR text boxes and detector output of a candidate image with
the bounding boxes of stored `image` (text) and `visual` patterns:

1. Text patterns match an overlapping OCR box whose text contains (or is
   contained in) the stored text.
2. Visual patterns crop the candidate image to the stored box and decide
   whether a visual element is present: an overlapping detected object or
   logo, else the perceptual features of the crop.
3. When any visual evidence exists, reference images that look like the
   candidate contribute their own visual matches.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from PIL import Image

from autocat.corpus import CategoryDirectory
from autocat.logging_config import get_logger
from autocat.models import (
    AnnotationRecord,
    BoundingBox,
    DetectedRegion,
    EvidenceKind,
    FileType,
    ImageContent,
    ImageTextPattern,
    MatchCandidate,
    MatchType,
    PatternKind,
    ReferenceImage,
    TextBox,
    VisualPattern,
)
from autocat.settings import MatchingSettings
from .corpus_scan import scan_corpus
from .image_features import (
    compare_features,
    extract_features,
    extract_image_features,
    has_visual_element,
    load_image,
)
from .text_scoring import containment_score

logger = get_logger(__name__)

MAX_VISUAL_CONFIDENCE = 0.9


@dataclass
class RegionMatches:
    """Evidence found in one image, split by origin."""

    text_matches: list[MatchCandidate] = field(default_factory=list)
    visual_matches: list[MatchCandidate] = field(default_factory=list)
    similar_matches: list[MatchCandidate] = field(default_factory=list)

    @property
    def all(self) -> list[MatchCandidate]:
        return self.text_matches + self.visual_matches + self.similar_matches


@dataclass
class VisualVerdict:
    text: str
    confidence: float
    match_type: MatchType


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def crop_box(bbox: BoundingBox, width: int, height: int) -> tuple[int, int, int, int]:
    """(x, y, w, h) of a stored box clamped to the image; w or h may be <= 0."""
    x = max(0, _round_half_up(bbox.x1))
    y = max(0, _round_half_up(bbox.y1))
    w = min(_round_half_up(bbox.x2 - bbox.x1), width - x)
    h = min(_round_half_up(bbox.y2 - bbox.y1), height - y)
    return x, y, w, h


# ---------------------------------------------------------------------------
# Text patterns
# ---------------------------------------------------------------------------

def best_text_box(
    text_boxes: Sequence[TextBox],
    bbox: BoundingBox,
    ocr_text: str,
) -> Optional[tuple[TextBox, float]]:
    """Overlapping OCR box whose text best matches ocr_text by length ratio."""
    target = ocr_text.lower()
    best: Optional[tuple[TextBox, float]] = None
    for box in text_boxes:
        if not box.bounding_box.overlaps(bbox):
            continue
        score = containment_score(box.text.lower(), target)
        if score > 0 and (best is None or score > best[1]):
            best = (box, score)
    return best


def match_text_pattern(
    text_boxes: Sequence[TextBox],
    pattern: ImageTextPattern,
    category: str,
    settings: MatchingSettings,
) -> Optional[MatchCandidate]:
    found = best_text_box(text_boxes, pattern.bounding_box, pattern.ocr_text)
    if found is None:
        return None

    box, score = found
    return MatchCandidate(
        pattern_ref=pattern.id,
        category=category,
        confidence=settings.text_match_confidence,
        evidence_kind=EvidenceKind.IMAGE_TEXT,
        match_type=MatchType.EXACT if score >= 1.0 else MatchType.PARTIAL,
        text=pattern.ocr_text,
        source="image_text_match",
        snippet=box.text,
        bounding_box=box.bounding_box,
        annotation_bounding_box=pattern.bounding_box,
    )


# ---------------------------------------------------------------------------
# Visual patterns
# ---------------------------------------------------------------------------

def _first_overlapping(regions: Sequence[DetectedRegion], bbox: BoundingBox) -> Optional[DetectedRegion]:
    for region in regions:
        if region.bounding_box is not None and region.bounding_box.overlaps(bbox):
            return region
    return None


def _fallback_verdict(bbox: BoundingBox, settings: MatchingSettings) -> Optional[VisualVerdict]:
    if bbox.area >= settings.fallback_min_area:
        return VisualVerdict(
            "Visual Element (fallback)", settings.fallback_confidence, MatchType.FALLBACK
        )
    return None


def classify_visual_region(
    image: Optional[Image.Image],
    content: ImageContent,
    bbox: BoundingBox,
    settings: MatchingSettings,
) -> Optional[VisualVerdict]:
    """
    Decide whether the stored box of a visual pattern holds a visual element.

    Args:
        image: Decoded candidate image, or None when its bytes could not be decoded
        content: Candidate content (detector output)
        bbox: Stored bounding box of the pattern
        settings: Thresholds

    Returns:
        Verdict with display text and confidence, or None
    """
    if image is None:
        return _fallback_verdict(bbox, settings)

    x, y, w, h = crop_box(bbox, image.width, image.height)
    if w <= settings.min_crop_side or h <= settings.min_crop_side:
        logger.debug(f"Bounding box too small for analysis: {w}x{h}")
        return None

    try:
        features = extract_image_features(image.crop((x, y, x + w, y + h)), settings.canonical_size)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not analyse region ({x},{y},{w},{h}): {e}")
        return _fallback_verdict(bbox, settings)

    detected = _first_overlapping(content.detected_objects, bbox)
    if detected is not None:
        return VisualVerdict(
            f"Object: {detected.name}",
            min(MAX_VISUAL_CONFIDENCE, 0.5 + detected.score * 0.4),
            MatchType.OBJECT,
        )

    logo = _first_overlapping(content.detected_logos, bbox)
    if logo is not None:
        return VisualVerdict(
            f"Logo: {logo.name}",
            min(MAX_VISUAL_CONFIDENCE, 0.6 + logo.score * 0.3),
            MatchType.LOGO,
        )

    if content.detector_available:
        thresholds = settings.visual_with_detector
        text = "Visual Pattern (feature analysis)"
    else:
        thresholds = settings.visual_features_only
        text = "Visual Pattern (features only)"

    if has_visual_element(features, w * h, thresholds):
        return VisualVerdict(text, thresholds.confidence, MatchType.FEATURES)
    return None


def match_visual_pattern(
    image: Optional[Image.Image],
    content: ImageContent,
    pattern: VisualPattern,
    category: str,
    settings: MatchingSettings,
) -> Optional[MatchCandidate]:
    verdict = classify_visual_region(image, content, pattern.bounding_box, settings)
    if verdict is None:
        return None
    return MatchCandidate(
        pattern_ref=pattern.id,
        category=category,
        confidence=verdict.confidence,
        evidence_kind=EvidenceKind.VISUAL_REGION,
        match_type=verdict.match_type,
        text=verdict.text,
        source="image_visual_match",
        snippet=pattern.label or None,
        bounding_box=pattern.bounding_box,
        annotation_bounding_box=pattern.bounding_box,
    )


def _first_per_label(candidates: list[MatchCandidate], labels: dict[str, str]) -> list[MatchCandidate]:
    kept = []
    seen_labels: set[str] = set()
    for candidate in candidates:
        label = labels.get(candidate.pattern_ref, "")
        if label:
            if label in seen_labels:
                logger.debug(f"Skipping duplicate visual match for label '{label}'")
                continue
            seen_labels.add(label)
        kept.append(candidate)
    return kept


# ---------------------------------------------------------------------------
# Similar images
# ---------------------------------------------------------------------------

def propagate_similar_images(
    image_bytes: bytes,
    visual_matches: list[MatchCandidate],
    reference_images: Sequence[ReferenceImage],
    settings: MatchingSettings,
) -> list[MatchCandidate]:
    """
    Borrow visual matches from reference images that look like the candidate.

    Only matches whose (text, category) is not already present are added,
    with confidence scaled by the whole-image similarity.
    """
    if not visual_matches or not reference_images:
        return []

    target = extract_features(image_bytes, settings.canonical_size)
    present = {(m.text, m.category) for m in visual_matches}
    added = []

    for reference in reference_images:
        if not reference.visual_matches:
            continue
        try:
            reference_features = extract_features(reference.image_bytes, settings.canonical_size)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping reference image {reference.filename or reference.image_id}: {e}")
            continue

        similarity = compare_features(target, reference_features, settings.weights).similarity
        logger.debug(f"Similarity with {reference.filename or reference.image_id}: {similarity:.3f}")
        if similarity < settings.similar_image_threshold:
            continue

        for match in reference.visual_matches:
            if (match.text, match.category) in present:
                continue
            added.append(
                MatchCandidate(
                    pattern_ref=f"similar_{reference.image_id}_{match.pattern_ref}",
                    category=match.category,
                    confidence=min(MAX_VISUAL_CONFIDENCE, match.confidence * similarity),
                    evidence_kind=EvidenceKind.SIMILAR_IMAGE,
                    match_type=MatchType.SIMILAR,
                    text=f"{match.text} (similar to {reference.filename})",
                    source="similar_image_match",
                    bounding_box=match.bounding_box,
                )
            )

    return added


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def match_image(
    content: ImageContent,
    corpus: list[AnnotationRecord],
    directory: CategoryDirectory,
    settings: MatchingSettings,
    reference_images: Sequence[ReferenceImage] = (),
) -> RegionMatches:
    """Correlate every `image` and `visual` pattern of the corpus with the candidate image."""
    image: Optional[Image.Image] = None
    if content.image_bytes:
        try:
            # Decoded once and shared read-only by the worker threads
            image = load_image(content.image_bytes)
        except (OSError, ValueError) as e:
            logger.warning(f"Candidate image pixels unavailable: {e}")

    labels = {
        pattern.id: pattern.label
        for record in corpus
        for pattern in record.annotations
        if pattern.kind == PatternKind.VISUAL
    }

    def score(pattern, category: str) -> Optional[MatchCandidate]:
        if isinstance(pattern, ImageTextPattern):
            return match_text_pattern(content.text_boxes, pattern, category, settings)
        if not content.image_bytes:
            return None
        return match_visual_pattern(image, content, pattern, category, settings)

    candidates = scan_corpus(
        corpus,
        FileType.IMAGE,
        score,
        directory,
        settings.max_workers,
        unique_ids=True,
    )

    result = RegionMatches(
        text_matches=[c for c in candidates if c.evidence_kind == EvidenceKind.IMAGE_TEXT],
        visual_matches=_first_per_label(
            [c for c in candidates if c.evidence_kind == EvidenceKind.VISUAL_REGION], labels
        ),
    )

    if image is not None and content.image_bytes:
        result.similar_matches = propagate_similar_images(
            content.image_bytes, result.visual_matches, reference_images, settings
        )

    logger.info(
        f"Image matching found {len(result.text_matches)} text, "
        f"{len(result.visual_matches)} visual and {len(result.similar_matches)} similar-image matches"
    )
    return result
