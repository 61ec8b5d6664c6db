"""
Bounding box model for annotated and detected image regions.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, Field


class BoundingBox(BaseModel):
    """
    Axis-aligned box in pixel coordinates of the source image.

    (x1, y1) is the top-left corner and (x2, y2) the bottom-right corner.
    """
    x1: float = Field(description="Left edge (px)")
    y1: float = Field(description="Top edge (px)")
    x2: float = Field(description="Right edge (px)")
    y2: float = Field(description="Bottom edge (px)")

    @classmethod
    def from_polygon(cls, vertices: Sequence[Sequence[float]]) -> "BoundingBox":
        """Enclose a polygon given as (x, y) vertices, e.g. a 4-vertex OCR box."""
        xs = [v[0] for v in vertices]
        ys = [v[1] for v in vertices]
        return cls(x1=min(xs), y1=min(ys), x2=max(xs), y2=max(ys))

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    def overlaps(self, other: "BoundingBox") -> bool:
        """True unless the boxes are disjoint on either axis (touching edges overlap)."""
        return not (
            other.x2 < self.x1
            or other.x1 > self.x2
            or other.y2 < self.y1
            or other.y1 > self.y2
        )


class TextBox(BaseModel):
    """A piece of OCR-detected text with its 4-vertex polygon."""
    text: str
    vertices: list[tuple[float, float]] = Field(min_length=4)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_polygon(self.vertices)


class DetectedRegion(BaseModel):
    """An object or logo reported by an external detector."""
    name: str
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    bounding_box: Optional[BoundingBox] = None
