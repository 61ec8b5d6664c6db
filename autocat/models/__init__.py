# Engine data models

from .enums import (
    FileType,
    PatternKind,
    MODALITY_PATTERN_KINDS,
    EvidenceKind,
    MatchType,
    ConfidenceScope,
    UNCATEGORIZED,
    UNKNOWN_CATEGORY,
)
from .bounding_box import BoundingBox, TextBox, DetectedRegion
from .patterns import (
    AnnotationPattern,
    ImageTextPattern,
    VisualPattern,
    PdfKeywordPattern,
    JsonKeyValuePattern,
    AudioSegmentPattern,
    AnnotationRecord,
    Rule,
    Category,
    parse_pattern,
)
from .content import (
    CandidateContent,
    ImageContent,
    PdfContent,
    PdfPage,
    JsonContent,
    KeyValue,
    AudioContent,
    TranscriptWord,
    empty_content,
)
from .results import (
    MatchCandidate,
    ReferenceImage,
    AnalysisRequest,
    AnalysisResult,
    clamp_confidence,
)

__all__ = [
    # Enums
    "FileType",
    "PatternKind",
    "MODALITY_PATTERN_KINDS",
    "EvidenceKind",
    "MatchType",
    "ConfidenceScope",
    "UNCATEGORIZED",
    "UNKNOWN_CATEGORY",
    # Geometry
    "BoundingBox",
    "TextBox",
    "DetectedRegion",
    # Corpus
    "AnnotationPattern",
    "ImageTextPattern",
    "VisualPattern",
    "PdfKeywordPattern",
    "JsonKeyValuePattern",
    "AudioSegmentPattern",
    "AnnotationRecord",
    "Rule",
    "Category",
    "parse_pattern",
    # Content
    "CandidateContent",
    "ImageContent",
    "PdfContent",
    "PdfPage",
    "JsonContent",
    "KeyValue",
    "AudioContent",
    "TranscriptWord",
    "empty_content",
    # Results
    "MatchCandidate",
    "ReferenceImage",
    "AnalysisRequest",
    "AnalysisResult",
    "clamp_confidence",
]
