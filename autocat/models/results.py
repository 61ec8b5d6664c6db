"""
Pydantic models for match evidence and analysis results.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .bounding_box import BoundingBox
from .content import CandidateContent
from .enums import EvidenceKind, FileType, MatchType, UNCATEGORIZED
from .patterns import AnnotationRecord, Category


def clamp_confidence(value: float) -> float:
    """Clamp to [0, 1]; NaN becomes 0."""
    if value != value:
        return 0.0
    return max(0.0, min(1.0, float(value)))


class MatchCandidate(BaseModel):
    """One scored piece of evidence linking the candidate file to a category."""
    pattern_ref: str = Field(description="Annotation id the evidence came from")
    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    evidence_kind: EvidenceKind
    match_type: MatchType
    text: str = ""
    source: str = ""
    snippet: Optional[str] = None
    bounding_box: Optional[BoundingBox] = None
    annotation_bounding_box: Optional[BoundingBox] = None
    page_number: Optional[int] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    matched_key: Optional[str] = None
    matched_value: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp_confidence(v)


class ReferenceImage(BaseModel):
    """A previously analysed image whose visual matches can be propagated."""
    image_id: str
    filename: str = ""
    image_bytes: bytes = Field(repr=False)
    visual_matches: list[MatchCandidate] = Field(default_factory=list)


class AnalysisRequest(BaseModel):
    """In-process engine contract input."""
    file_type: FileType
    content: CandidateContent
    corpus: list[AnnotationRecord] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    reference_images: list[ReferenceImage] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """The engine's sole output."""
    category: str = UNCATEGORIZED
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    matches: list[MatchCandidate] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp_confidence(v)

    @property
    def dest_path(self) -> str:
        """Folder the file would be filed under, e.g. /category/purchase-orders."""
        slug = re.sub(r"\s+", "-", self.category.strip().lower())
        return f"/category/{slug}"
