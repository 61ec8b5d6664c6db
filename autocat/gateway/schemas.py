"""
Pydantic schemas for the categorization HTTP API.

The request mirrors the in-process engine contract: the file travels as
base64 and the corpus and categories as the loosely typed dicts they are
stored as.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from autocat.models import FileType, MatchCandidate


class ReferenceImagePayload(BaseModel):
    """A previously analysed image sent along for similar-image matching."""
    image_id: str
    filename: str = ""
    image_base64: str
    visual_matches: list[MatchCandidate] = Field(default_factory=list)


class CategorizeRequest(BaseModel):
    """POST /api/v1/categorize body."""
    filename: str = Field(min_length=1, description="Original file name, used for type detection")
    content_base64: str = Field(min_length=1, description="File bytes, base64-encoded")
    file_type: Optional[FileType] = None
    mime_type: Optional[str] = None
    corpus: list[dict[str, Any]] = Field(default_factory=list, description="Stored annotation records")
    categories: list[dict[str, Any]] = Field(default_factory=list)
    reference_images: list[ReferenceImagePayload] = Field(default_factory=list)


class CategorizeResponse(BaseModel):
    """POST /api/v1/categorize response."""
    category: str
    confidence: float
    dest_path: str
    matches: list[MatchCandidate]
    raw: dict[str, Any] = Field(default_factory=dict)


class HealthStatus(BaseModel):
    """GET /api/v1/health response."""
    healthy: bool
    service: str
    timestamp: datetime
    version: str
    ocr_available: bool = False
