"""
Pydantic models for the extracted content of a candidate file.

One of these is produced per analysis request by the content extraction
service and shared read-only by every comparison of that request.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from .bounding_box import DetectedRegion, TextBox
from .enums import FileType


class _ContentBase(BaseModel):
    # External calls that failed while extracting this content
    errors: list[str] = Field(default_factory=list)


class ImageContent(_ContentBase):
    """OCR text, text boxes and detector output of an image."""
    file_type: Literal[FileType.IMAGE] = FileType.IMAGE
    ocr_text: str = ""
    text_boxes: list[TextBox] = Field(default_factory=list)
    detected_objects: list[DetectedRegion] = Field(default_factory=list)
    detected_logos: list[DetectedRegion] = Field(default_factory=list)
    detector_available: bool = False
    image_bytes: Optional[bytes] = Field(default=None, repr=False)
    width: int = 0
    height: int = 0


class PdfPage(BaseModel):
    page_number: int = Field(ge=1)
    content: str


class PdfContent(_ContentBase):
    """Extracted text of a PDF and its page split."""
    file_type: Literal[FileType.PDF] = FileType.PDF
    extracted_text: str = ""
    pages: list[PdfPage] = Field(default_factory=list)


class KeyValue(BaseModel):
    """One flattened JSON leaf."""
    path: str
    value: Any = None


class JsonContent(_ContentBase):
    """Flattened key/value pairs of a JSON document."""
    file_type: Literal[FileType.JSON] = FileType.JSON
    key_values: list[KeyValue] = Field(default_factory=list)


class TranscriptWord(BaseModel):
    word: str
    start_time: float = 0.0
    end_time: float = 0.0


class AudioContent(_ContentBase):
    """Word-level transcript of an audio file."""
    file_type: Literal[FileType.AUDIO] = FileType.AUDIO
    words: list[TranscriptWord] = Field(default_factory=list)

    @property
    def transcript(self) -> str:
        return " ".join(w.word for w in self.words)


CandidateContent = Annotated[
    Union[ImageContent, PdfContent, JsonContent, AudioContent],
    Field(discriminator="file_type"),
]


def empty_content(file_type: FileType, error: Optional[str] = None) -> CandidateContent:
    """Empty content for a modality, used when an external call degraded."""
    errors = [error] if error else []
    if file_type == FileType.IMAGE:
        return ImageContent(errors=errors)
    if file_type == FileType.PDF:
        return PdfContent(errors=errors)
    if file_type == FileType.JSON:
        return JsonContent(errors=errors)
    return AudioContent(errors=errors)
