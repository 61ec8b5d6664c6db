"""
Pydantic models for the annotated pattern corpus.

Stored annotations are loosely typed dicts whose meaningful fields depend on
`annotationType`. They are parsed into one variant per kind so matchers can
switch on `kind` instead of probing optional fields.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from autocat.exceptions import MalformedPatternError
from autocat.logging_config import get_logger
from .bounding_box import BoundingBox
from .enums import PatternKind

logger = get_logger(__name__)


class _PatternBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""


class ImageTextPattern(_PatternBase):
    """OCR text captured inside a bounding box of an annotated image."""
    kind: Literal["image"] = "image"
    ocr_text: str = Field(min_length=1)
    bounding_box: BoundingBox
    ocr_confidence: Optional[float] = None


class VisualPattern(_PatternBase):
    """A visual element (logo, stamp, picture) inside a bounding box."""
    kind: Literal["visual"] = "visual"
    bounding_box: BoundingBox


class PdfKeywordPattern(_PatternBase):
    """A keyword highlighted in an annotated PDF."""
    kind: Literal["pdf"] = "pdf"
    keyword_text: str = Field(min_length=1)
    page_number: Optional[int] = None


class JsonKeyValuePattern(_PatternBase):
    """A key/value pair selected in an annotated JSON document."""
    kind: Literal["json"] = "json"
    json_key: str = Field(min_length=1)
    json_value: str = Field(min_length=1)


class AudioSegmentPattern(_PatternBase):
    """A transcript span of an annotated audio file."""
    kind: Literal["audio_segment"] = "audio_segment"
    text: str = ""
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    keyword_text: Optional[str] = None

    @model_validator(mode="after")
    def _require_searchable_text(self) -> "AudioSegmentPattern":
        if not self.text and not self.keyword_text:
            raise ValueError("audio segment needs text or keyword_text")
        return self


AnnotationPattern = Annotated[
    Union[
        ImageTextPattern,
        VisualPattern,
        PdfKeywordPattern,
        JsonKeyValuePattern,
        AudioSegmentPattern,
    ],
    Field(discriminator="kind"),
]


class Rule(BaseModel):
    """Annotation rule linking a record to a category."""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    rule_name: str = ""
    category_id: Optional[str] = None


class AnnotationRecord(BaseModel):
    """One annotated file of the corpus and its patterns."""
    model_config = ConfigDict(frozen=True)

    data_id: str
    rule: Rule = Field(default_factory=Rule)
    annotations: tuple[AnnotationPattern, ...] = ()
    type: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "AnnotationRecord":
        """Build a record from a stored dict, skipping malformed patterns."""
        rule_raw = raw.get("rule") or {}
        rule = Rule(
            id=str(rule_raw.get("id", "")),
            rule_name=str(rule_raw.get("ruleName", rule_raw.get("rule_name", ""))),
            category_id=_optional_str(
                rule_raw.get("categoryId", rule_raw.get("category_id"))
            ),
        )
        data_id = str(raw.get("dataId", raw.get("data_id", raw.get("_id", ""))))

        patterns = []
        for index, annotation in enumerate(raw.get("annotations") or []):
            try:
                patterns.append(parse_pattern(annotation))
            except MalformedPatternError as e:
                logger.warning(
                    f"Skipping malformed pattern #{index} of record {data_id}: {e}"
                )

        return cls(
            data_id=data_id,
            rule=rule,
            annotations=tuple(patterns),
            type=raw.get("type"),
        )


class Category(BaseModel):
    """A category of the external directory."""
    id: str
    name: str
    description: Optional[str] = None


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _bounding_box(raw: dict[str, Any]) -> Optional[BoundingBox]:
    coords = [raw.get(k) for k in ("x1", "y1", "x2", "y2")]
    if any(c is None for c in coords):
        return None
    try:
        x1, y1, x2, y2 = (float(c) for c in coords)
    except (TypeError, ValueError):
        raise MalformedPatternError(f"Non-numeric bounding box: {coords}")
    return BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2)


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    """First non-None value among keys, also looking into raw['metadata']."""
    metadata = raw.get("metadata") or {}
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    for key in keys:
        if metadata.get(key) is not None:
            return metadata[key]
    return None


def parse_pattern(raw: dict[str, Any]) -> AnnotationPattern:
    """
    Convert a stored annotation dict into its tagged variant.

    Accepts the camelCase field names written by the annotation workflow
    (annotationType, ocrText, keywordText, jsonKey, ...).

    Raises:
        MalformedPatternError: unknown kind or missing required fields.
    """
    if not isinstance(raw, dict):
        raise MalformedPatternError(f"Pattern must be an object, got {type(raw).__name__}")

    kind_raw = raw.get("annotationType", raw.get("kind"))
    try:
        kind = PatternKind(kind_raw)
    except ValueError:
        raise MalformedPatternError(f"Unknown annotation type: {kind_raw!r}")

    common = {
        "id": str(raw.get("id", "")),
        "label": str(raw.get("label") or ""),
    }
    if not common["id"]:
        raise MalformedPatternError("Pattern has no id")

    try:
        if kind == PatternKind.IMAGE:
            bbox = _bounding_box(raw)
            if bbox is None:
                raise MalformedPatternError(f"Image pattern {common['id']} has no bounding box")
            return ImageTextPattern(
                **common,
                ocr_text=_text(_pick(raw, "ocrText", "ocr_text")),
                bounding_box=bbox,
                ocr_confidence=_pick(raw, "ocrConfidence", "ocr_confidence"),
            )

        if kind == PatternKind.VISUAL:
            bbox = _bounding_box(raw)
            if bbox is None:
                raise MalformedPatternError(f"Visual pattern {common['id']} has no bounding box")
            return VisualPattern(**common, bounding_box=bbox)

        if kind == PatternKind.PDF:
            return PdfKeywordPattern(
                **common,
                keyword_text=_text(_pick(raw, "keywordText", "keyword_text")),
                page_number=_pick(raw, "pageNumber", "page_number"),
            )

        if kind == PatternKind.JSON:
            return JsonKeyValuePattern(
                **common,
                json_key=_text(_pick(raw, "jsonKey", "json_key")),
                json_value=_text(_pick(raw, "jsonValue", "json_value")),
            )

        return AudioSegmentPattern(
            **common,
            text=_text(_pick(raw, "text")),
            start_time=_pick(raw, "startTime", "start_time"),
            end_time=_pick(raw, "endTime", "end_time"),
            keyword_text=_optional_str(_pick(raw, "keywordText", "keyword_text")),
        )
    except ValidationError as e:
        raise MalformedPatternError(
            f"{kind.value} pattern {common['id']} is missing required fields: "
            f"{', '.join(str(err['loc'][0]) if err['loc'] else '?' for err in e.errors())}"
        ) from e
