"""
Pixel similarity between a card and a template portrait.

Every strategy splits the work into ``prepare`` (downsample one image to a
small float array) and ``compare`` (distance between two prepared arrays), so
template features can be computed once per library instead of once per card.
Scores are ``1 - mean RGB distance / 441``, clamped to [0, 1], and symmetric.
"""

from typing import Dict, Optional

import cv2
import numpy as np

from ..core import constants as C
from ..core.types import ImageBuffer
from ..utils.error_handler import ConfigurationError


def center_crop(image: ImageBuffer, ratio: float = C.CENTER_CROP_RATIO) -> np.ndarray:
    """Return the centered ``ratio`` x ``ratio`` region of the RGB channels."""
    width, height = image.width, image.height
    crop_w, crop_h = max(1, int(width * ratio)), max(1, int(height * ratio))
    x0, y0 = (width - crop_w) // 2, (height - crop_h) // 2
    return image.rgb[y0:y0 + crop_h, x0:x0 + crop_w]


def downsample(rgb: np.ndarray, size: int) -> np.ndarray:
    resized = cv2.resize(np.ascontiguousarray(rgb), (size, size), interpolation=cv2.INTER_AREA)
    return resized.astype(np.float64)


def _pixel_distances(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.sqrt(np.sum((a - b) ** 2, axis=-1))


def _to_similarity(normalized_distance: float) -> float:
    return float(min(1.0, max(0.0, 1.0 - normalized_distance)))


class SimilarityStrategy:
    """Base class for card/template pixel comparison."""

    name = "base"

    def prepare(self, image: ImageBuffer) -> np.ndarray:
        raise NotImplementedError

    def compare(self, a: np.ndarray, b: np.ndarray) -> float:
        raise NotImplementedError

    def similarity(self, card: ImageBuffer, template: ImageBuffer) -> float:
        if 0 in (card.width, card.height, template.width, template.height):
            return 0.0
        return self.compare(self.prepare(card), self.prepare(template))


class CenterCropStrategy(SimilarityStrategy):
    """Center 60% crop, 24x24 downsample, every second pixel in both axes.

    Cropping discards the rarity-colored border so only the character art is
    compared.
    """

    name = "center_crop"

    def prepare(self, image: ImageBuffer) -> np.ndarray:
        small = downsample(center_crop(image), C.COMPARE_SIZE)
        return small[::C.COMPARE_SAMPLE_STEP, ::C.COMPARE_SAMPLE_STEP]

    def compare(self, a: np.ndarray, b: np.ndarray) -> float:
        distances = _pixel_distances(a, b)
        return _to_similarity(float(distances.sum()) / (C.MAX_RGB_DISTANCE * distances.size))


class WholeImageStrategy(SimilarityStrategy):
    """Whole image at 100x100, every pixel."""

    name = "whole_image"

    def prepare(self, image: ImageBuffer) -> np.ndarray:
        return downsample(image.rgb, C.WHOLE_IMAGE_COMPARE_SIZE)

    def compare(self, a: np.ndarray, b: np.ndarray) -> float:
        distances = _pixel_distances(a, b)
        return _to_similarity(float(distances.sum()) / (C.MAX_RGB_DISTANCE * distances.size))


class CenterWeightedStrategy(SimilarityStrategy):
    """Whole image, with pixel weights falling off linearly from the center.

    Border pixels still count, at a quarter of the center weight.
    """

    name = "center_weighted"
    min_weight = 0.25

    def __init__(self, size: int = C.CENTER_WEIGHTED_COMPARE_SIZE):
        self.size = size
        coords = (np.arange(size) + 0.5) / size - 0.5
        xx, yy = np.meshgrid(coords, coords)
        radius = np.sqrt(xx ** 2 + yy ** 2) / np.sqrt(0.5)
        self.weights = 1.0 - (1.0 - self.min_weight) * radius

    def prepare(self, image: ImageBuffer) -> np.ndarray:
        return downsample(image.rgb, self.size)

    def compare(self, a: np.ndarray, b: np.ndarray) -> float:
        distances = _pixel_distances(a, b)
        weighted = float((distances * self.weights).sum())
        return _to_similarity(weighted / (C.MAX_RGB_DISTANCE * float(self.weights.sum())))


STRATEGIES: Dict[str, SimilarityStrategy] = {
    s.name: s for s in (CenterCropStrategy(), WholeImageStrategy(), CenterWeightedStrategy())
}


def get_strategy(name: Optional[str] = None) -> SimilarityStrategy:
    """Look up a strategy by name; ``None`` gives the center-crop default."""
    key = name or CenterCropStrategy.name
    try:
        return STRATEGIES[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown similarity strategy: {key}",
            details={"strategy": key, "available": sorted(STRATEGIES)}
        )


def similarity(card: ImageBuffer, template: ImageBuffer, strategy: Optional[SimilarityStrategy] = None) -> float:
    """Similarity in [0, 1] between a card and a template portrait."""
    return (strategy or STRATEGIES[CenterCropStrategy.name]).similarity(card, template)
