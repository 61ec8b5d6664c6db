"""
Matching settings.

Loads thresholds and weights from the [engine], [aggregation], [image],
[pdf] and [audio] sections of autocat.toml.
"""

from dataclasses import dataclass, field

from autocat.config import get
from autocat.models.enums import ConfidenceScope


@dataclass(frozen=True)
class VisualThresholds:
    """Thresholds deciding whether a cropped region holds a visual element."""

    texture: float
    edges: float
    histogram_bin: float
    min_area: float
    confidence: float


@dataclass(frozen=True)
class FeatureWeights:
    hash: float = 0.30
    color: float = 0.20
    edge: float = 0.20
    texture: float = 0.15
    histogram: float = 0.15


@dataclass(frozen=True)
class MatchingSettings:
    """All tunables of the matching engine."""

    max_workers: int = 8
    confidence_scope: ConfidenceScope = ConfidenceScope.GLOBAL

    canonical_size: int = 64
    weights: FeatureWeights = field(default_factory=FeatureWeights)
    similar_image_threshold: float = 0.7
    text_match_confidence: float = 0.8
    min_crop_side: int = 10
    fallback_min_area: float = 1000
    fallback_confidence: float = 0.4
    visual_with_detector: VisualThresholds = field(
        default_factory=lambda: VisualThresholds(50.0, 20.0, 0.1, 500, 0.7)
    )
    visual_features_only: VisualThresholds = field(
        default_factory=lambda: VisualThresholds(30.0, 15.0, 0.05, 300, 0.6)
    )

    pdf_exact_confidence: float = 0.9
    pdf_partial_threshold: float = 0.3
    pdf_accept_threshold: float = 0.1

    audio_text_confidence: float = 0.95
    audio_keyword_confidence: float = 0.9
    audio_snippet_context: int = 50
    audio_pause_gap_seconds: float = 0.5


def _visual(section: str) -> VisualThresholds:
    return VisualThresholds(
        texture=get("image", section, "texture"),
        edges=get("image", section, "edges"),
        histogram_bin=get("image", section, "histogram_bin"),
        min_area=get("image", section, "min_area"),
        confidence=get("image", section, "confidence"),
    )


def load_settings() -> MatchingSettings:
    """Build MatchingSettings from autocat.toml. Missing keys raise RuntimeError."""
    return MatchingSettings(
        max_workers=get("engine", "max_workers"),
        confidence_scope=ConfidenceScope(get("aggregation", "confidence_scope")),
        canonical_size=get("image", "canonical_size"),
        weights=FeatureWeights(
            hash=get("image", "weights", "hash"),
            color=get("image", "weights", "color"),
            edge=get("image", "weights", "edge"),
            texture=get("image", "weights", "texture"),
            histogram=get("image", "weights", "histogram"),
        ),
        similar_image_threshold=get("image", "similar_image_threshold"),
        text_match_confidence=get("image", "text_match_confidence"),
        min_crop_side=get("image", "min_crop_side"),
        fallback_min_area=get("image", "fallback_min_area"),
        fallback_confidence=get("image", "fallback_confidence"),
        visual_with_detector=_visual("visual_with_detector"),
        visual_features_only=_visual("visual_features_only"),
        pdf_exact_confidence=get("pdf", "exact_confidence"),
        pdf_partial_threshold=get("pdf", "partial_threshold"),
        pdf_accept_threshold=get("pdf", "accept_threshold"),
        audio_text_confidence=get("audio", "text_confidence"),
        audio_keyword_confidence=get("audio", "keyword_confidence"),
        audio_snippet_context=get("audio", "snippet_context"),
        audio_pause_gap_seconds=get("audio", "pause_gap_seconds"),
    )
