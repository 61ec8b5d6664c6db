"""
Enum definitions for the categorization engine.
"""

from enum import Enum


class FileType(str, Enum):
    """Modalities the engine can categorize."""
    IMAGE = "image"
    PDF = "pdf"
    JSON = "json"
    AUDIO = "audio"


class PatternKind(str, Enum):
    """Kinds of stored annotation patterns."""
    IMAGE = "image"  # OCR text inside a bounding box
    VISUAL = "visual"  # Visual element inside a bounding box, no text
    PDF = "pdf"  # Keyword found in a PDF
    JSON = "json"  # Key/value pair from a JSON document
    AUDIO_SEGMENT = "audio_segment"  # Transcript span of an audio file


# Pattern kinds each modality scans
MODALITY_PATTERN_KINDS: dict[FileType, tuple[PatternKind, ...]] = {
    FileType.IMAGE: (PatternKind.IMAGE, PatternKind.VISUAL),
    FileType.PDF: (PatternKind.PDF,),
    FileType.JSON: (PatternKind.JSON,),
    FileType.AUDIO: (PatternKind.AUDIO_SEGMENT,),
}


class EvidenceKind(str, Enum):
    """Where a piece of evidence came from."""
    IMAGE_TEXT = "image_text"
    VISUAL_REGION = "visual_region"
    SIMILAR_IMAGE = "similar_image"
    PDF_KEYWORD = "pdf_keyword"
    JSON_KEY_VALUE = "json_key_value"
    AUDIO_SEGMENT = "audio_segment"
    AUDIO_KEYWORD = "audio_keyword"


class MatchType(str, Enum):
    """How closely a candidate matched its stored pattern."""
    EXACT = "exact"
    PARTIAL = "partial"
    KEYWORD = "keyword"
    EXACT_KEY = "exact_key"
    EXACT_VALUE = "exact_value"
    PARTIAL_KEY = "partial_key"
    PARTIAL_VALUE = "partial_value"
    OBJECT = "object"
    LOGO = "logo"
    FEATURES = "features"
    FALLBACK = "fallback"
    SIMILAR = "similar"


class ConfidenceScope(str, Enum):
    """Which candidates the aggregator takes the reported confidence from."""
    GLOBAL = "global"  # Max over every candidate
    WINNER = "winner"  # Max over the winning category's candidates


UNCATEGORIZED = "uncategorized"
UNKNOWN_CATEGORY = "unknown"
