"""
Perceptual feature extraction and pairwise image comparison.

Every image is decoded, stripped of alpha and fitted onto a fixed square
grid (64x64 by default) before five summaries are computed: a brightness
"hash", the average colour, edge density, texture complexity and a
normalized grayscale histogram. Two feature vectors are compared term by
term and the terms are blended with fixed weights.

All functions are pure and safe to call from worker threads.
"""

import io
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from PIL import Image, ImageOps

from autocat.settings import FeatureWeights, VisualThresholds

CANONICAL_SIZE = 64
HISTOGRAM_BINS = 256
MAX_HASH_DISTANCE = 65535.0  # 16-bit range
MAX_COLOR_DISTANCE = 441.67  # sqrt(3 * 255^2)


@dataclass(frozen=True)
class AverageColor:
    r: float
    g: float
    b: float


@dataclass
class ImageFeatures:
    """Perceptual feature vector of one image."""

    hash: float  # Mean brightness, a scalar summary rather than a bit hash
    average_color: AverageColor
    edge_density: float
    texture_complexity: float
    histogram: np.ndarray = field(repr=False)  # 256 frequencies summing to 1

    def to_dict(self) -> dict:
        return {
            "hash": self.hash,
            "average_color": {
                "r": self.average_color.r,
                "g": self.average_color.g,
                "b": self.average_color.b,
            },
            "edge_density": self.edge_density,
            "texture_complexity": self.texture_complexity,
        }


@dataclass
class ImageComparison:
    """Result of comparing two feature vectors."""

    similarity: float
    feature_distance: float  # |hashA - hashB|
    color_distance: float
    edge_similarity: float
    texture_similarity: float
    hash_similarity: float
    color_similarity: float
    histogram_similarity: float


# ---------------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------------

def load_image(image_bytes: bytes) -> Image.Image:
    """Decode an image buffer into an RGB PIL image (alpha dropped).

    Raises:
        PIL.UnidentifiedImageError / OSError if the buffer is not an image.
    """
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image.convert("RGB")


def canonical_pixels(image: Image.Image, size: int = CANONICAL_SIZE) -> np.ndarray:
    """Fit the image onto a size x size grid and return float RGB pixels (h, w, 3)."""
    rgb = image if image.mode == "RGB" else image.convert("RGB")
    fitted = ImageOps.fit(rgb, (size, size), method=Image.Resampling.LANCZOS)
    return np.asarray(fitted, dtype=np.float64)


# ---------------------------------------------------------------------------
# Feature terms
# ---------------------------------------------------------------------------

def _brightness(pixels: np.ndarray) -> np.ndarray:
    return pixels.sum(axis=2) / 3.0


def brightness_hash(pixels: np.ndarray) -> float:
    return float(_brightness(pixels).mean())


def average_color(pixels: np.ndarray) -> AverageColor:
    r, g, b = pixels.reshape(-1, 3).mean(axis=0)
    return AverageColor(r=float(r), g=float(g), b=float(b))


def edge_density(pixels: np.ndarray) -> float:
    """Mean red-channel central-difference gradient magnitude.

    Only interior pixels contribute but the sum is divided by the full pixel
    count, border pixels included.
    """
    h, w = pixels.shape[:2]
    if h < 3 or w < 3:
        return 0.0
    red = pixels[:, :, 0]
    gx = np.abs(red[1:-1, 2:] - red[1:-1, :-2])
    gy = np.abs(red[2:, 1:-1] - red[:-2, 1:-1])
    return float(np.sqrt(gx * gx + gy * gy).sum() / (w * h))


def texture_complexity(pixels: np.ndarray) -> float:
    """Mean absolute brightness difference between each interior pixel and its 8 neighbours."""
    h, w = pixels.shape[:2]
    if h < 3 or w < 3:
        return 0.0
    brightness = _brightness(pixels)
    center = brightness[1:-1, 1:-1]
    total = np.zeros_like(center)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            neighbor = brightness[1 + dy:h - 1 + dy, 1 + dx:w - 1 + dx]
            total += np.abs(center - neighbor)
    return float((total / 8.0).sum() / (w * h))


def grayscale_histogram(pixels: np.ndarray) -> np.ndarray:
    """256-bin histogram of round(mean(R, G, B)) as frequencies."""
    count = pixels.shape[0] * pixels.shape[1]
    if count == 0:
        return np.zeros(HISTOGRAM_BINS)
    gray = np.floor(_brightness(pixels) + 0.5).astype(np.int64).clip(0, HISTOGRAM_BINS - 1)
    counts = np.bincount(gray.ravel(), minlength=HISTOGRAM_BINS)
    return counts / float(count)


def features_from_pixels(pixels: np.ndarray) -> ImageFeatures:
    return ImageFeatures(
        hash=brightness_hash(pixels),
        average_color=average_color(pixels),
        edge_density=edge_density(pixels),
        texture_complexity=texture_complexity(pixels),
        histogram=grayscale_histogram(pixels),
    )


def extract_image_features(image: Image.Image, size: int = CANONICAL_SIZE) -> ImageFeatures:
    """Feature vector of an already decoded image (e.g. a cropped region)."""
    return features_from_pixels(canonical_pixels(image, size))


def extract_features(image_bytes: bytes, size: int = CANONICAL_SIZE) -> ImageFeatures:
    """Feature vector of an encoded image buffer."""
    return extract_image_features(load_image(image_bytes), size)


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def _clamp01(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def _ratio_similarity(a: float, b: float) -> float:
    return 1.0 - abs(a - b) / max(a, b, 1.0)


def color_distance(a: AverageColor, b: AverageColor) -> float:
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return math.sqrt(dr * dr + dg * dg + db * db)


def histogram_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Intersection over union of two frequency histograms; 0 when both are empty."""
    union = float(np.maximum(a, b).sum())
    if union <= 0:
        return 0.0
    return float(np.minimum(a, b).sum()) / union


def compare_features(
    a: ImageFeatures,
    b: ImageFeatures,
    weights: FeatureWeights = FeatureWeights(),
) -> ImageComparison:
    """Weighted similarity of two feature vectors, clamped to [0, 1].

    Every term is symmetric so compare_features(a, b) == compare_features(b, a).
    """
    hash_distance = abs(a.hash - b.hash)
    hash_sim = 1.0 - hash_distance / MAX_HASH_DISTANCE

    color_dist = color_distance(a.average_color, b.average_color)
    color_sim = 1.0 - color_dist / MAX_COLOR_DISTANCE

    edge_sim = _ratio_similarity(a.edge_density, b.edge_density)
    texture_sim = _ratio_similarity(a.texture_complexity, b.texture_complexity)
    hist_sim = histogram_similarity(a.histogram, b.histogram)

    similarity = (
        hash_sim * weights.hash
        + color_sim * weights.color
        + edge_sim * weights.edge
        + texture_sim * weights.texture
        + hist_sim * weights.histogram
    )

    return ImageComparison(
        similarity=_clamp01(similarity),
        feature_distance=hash_distance,
        color_distance=color_dist,
        edge_similarity=_clamp01(edge_sim),
        texture_similarity=_clamp01(texture_sim),
        hash_similarity=_clamp01(hash_sim),
        color_similarity=_clamp01(color_sim),
        histogram_similarity=_clamp01(hist_sim),
    )


def compare_images(
    image_a: bytes,
    image_b: bytes,
    weights: FeatureWeights = FeatureWeights(),
) -> ImageComparison:
    """Decode, extract and compare two image buffers."""
    return compare_features(extract_features(image_a), extract_features(image_b), weights)


def find_best_match(
    target: bytes,
    candidates: Sequence[bytes],
    threshold: float = 0.7,
) -> Optional[tuple[int, float]]:
    """
    Find the candidate image most similar to the target.

    Args:
        target: Encoded image to match
        candidates: Encoded images to search
        threshold: Minimum similarity for a candidate to qualify

    Returns:
        (index, similarity) of the best qualifying candidate, or None
    """
    target_features = extract_features(target)
    best: Optional[tuple[int, float]] = None
    for index, candidate in enumerate(candidates):
        result = compare_features(target_features, extract_features(candidate))
        if result.similarity >= threshold and (best is None or result.similarity > best[1]):
            best = (index, result.similarity)
    return best


def has_visual_element(
    features: ImageFeatures,
    area: float,
    thresholds: VisualThresholds,
) -> bool:
    """Whether a region's features indicate a meaningful visual element."""
    if area < thresholds.min_area:
        return False
    return (
        features.texture_complexity > thresholds.texture
        or features.edge_density > thresholds.edges
        or bool((features.histogram > thresholds.histogram_bin).any())
    )
