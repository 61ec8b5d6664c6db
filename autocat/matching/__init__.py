"""
Matching module.

Provides the per-modality matchers and the evidence aggregator:
- Image features (image_features.py) - Perceptual features and image similarity
- Region correlation (region_correlator.py) - OCR boxes, visual regions, similar images
- PDF keywords (pdf_matcher.py) - Fuzzy keyword scoring and page lookup
- JSON key-values (json_matcher.py) - Flattening and tiered key/value matching
- Audio segments (audio_matcher.py) - Transcript search and transcript statistics
- Aggregation (aggregator.py) - Category vote and confidence
"""

from autocat.matching.aggregator import Decision, aggregate
from autocat.matching.audio_matcher import audio_metadata, extract_snippet, match_audio
from autocat.matching.image_features import (
    ImageComparison,
    ImageFeatures,
    compare_features,
    compare_images,
    extract_features,
    find_best_match,
)
from autocat.matching.json_matcher import flatten, match_json
from autocat.matching.pdf_matcher import find_page, match_pdf, split_pages
from autocat.matching.region_correlator import RegionMatches, match_image
from autocat.matching.text_scoring import classify_match_type, keyword_confidence, word_similarity

__all__ = [
    "Decision",
    "aggregate",
    "audio_metadata",
    "extract_snippet",
    "match_audio",
    "ImageComparison",
    "ImageFeatures",
    "compare_features",
    "compare_images",
    "extract_features",
    "find_best_match",
    "flatten",
    "match_json",
    "find_page",
    "match_pdf",
    "split_pages",
    "RegionMatches",
    "match_image",
    "classify_match_type",
    "keyword_confidence",
    "word_similarity",
]
