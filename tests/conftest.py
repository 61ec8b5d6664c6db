"""
Shared test fixtures for the autocat test suite.
"""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from autocat.corpus import CategoryDirectory
from autocat.models import AnnotationRecord, Category
from autocat.settings import MatchingSettings


# --- Helpers ---

def image_bytes(image: Image.Image, format: str = "PNG") -> bytes:
    """Encode a PIL image."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return buffer.getvalue()


def solid_image(w=64, h=64, color=(200, 30, 30)) -> Image.Image:
    return Image.new("RGB", (w, h), color)


def checkerboard_image(w=64, h=64, cell=4) -> Image.Image:
    """Black and white checkerboard, high texture and edges."""
    ys, xs = np.indices((h, w))
    board = (((xs // cell) + (ys // cell)) % 2 * 255).astype(np.uint8)
    return Image.fromarray(np.stack([board] * 3, axis=-1), "RGB")


def make_record(data_id: str, category_id, annotations: list[dict]) -> AnnotationRecord:
    """Build a record the way it is stored, with camelCase fields."""
    return AnnotationRecord.from_raw({
        "dataId": data_id,
        "rule": {"id": f"rule-{data_id}", "categoryId": category_id},
        "annotations": annotations,
    })


# --- Fixtures ---

@pytest.fixture
def test_data_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test data."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def settings() -> MatchingSettings:
    """Default thresholds with a small thread pool."""
    return MatchingSettings(max_workers=2)


@pytest.fixture
def categories() -> list[Category]:
    return [
        Category(id="cat-finance", name="Finance"),
        Category(id="cat-legal", name="Legal"),
        Category(id="cat-hr", name="HR"),
    ]


@pytest.fixture
def directory(categories) -> CategoryDirectory:
    return CategoryDirectory(categories)


@pytest.fixture
def sample_raw_corpus() -> list[dict]:
    """Stored annotation records covering every pattern kind."""
    return [
        {
            "dataId": "pdf-1",
            "rule": {"id": "r1", "categoryId": "cat-finance"},
            "annotations": [
                {"id": "a1", "annotationType": "pdf", "keywordText": "Invoice Number", "label": "invoice"},
            ],
        },
        {
            "dataId": "json-1",
            "rule": {"id": "r2", "categoryId": "cat-legal"},
            "annotations": [
                {"id": "a2", "annotationType": "json", "jsonKey": "contract.party", "jsonValue": "Acme Corp"},
            ],
        },
        {
            "dataId": "audio-1",
            "rule": {"id": "r3", "categoryId": "cat-hr"},
            "annotations": [
                {
                    "id": "a3",
                    "annotationType": "audio_segment",
                    "text": "quick brown",
                    "metadata": {"startTime": 1.0, "endTime": 2.0},
                },
            ],
        },
        {
            "dataId": "image-1",
            "rule": {"id": "r4", "categoryId": "cat-finance"},
            "annotations": [
                {
                    "id": "a4",
                    "annotationType": "image",
                    "ocrText": "TOTAL",
                    "x1": 10, "y1": 10, "x2": 60, "y2": 30,
                },
                {
                    "id": "a5",
                    "annotationType": "visual",
                    "label": "logo",
                    "x1": 0, "y1": 0, "x2": 40, "y2": 40,
                },
            ],
        },
    ]


@pytest.fixture
def encode_image():
    """Factory encoding a PIL image to PNG bytes."""
    return image_bytes


@pytest.fixture
def solid_png() -> bytes:
    return image_bytes(solid_image())


@pytest.fixture
def checkerboard_png() -> bytes:
    return image_bytes(checkerboard_image())


@pytest.fixture
def record_factory():
    """Factory building AnnotationRecords from stored-format annotations."""
    return make_record
