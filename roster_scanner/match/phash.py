"""
Average-brightness perceptual hash for cheap template pre-filtering.
"""

import sys

import cv2
import numpy as np

from ..core.constants import HASH_GRID_SIZE
from ..core.types import ImageBuffer, PerceptualHash

# Distance reported for hashes computed on different grids
INCOMPARABLE_DISTANCE = sys.maxsize


def perceptual_hash(image: ImageBuffer, grid_size: int = HASH_GRID_SIZE) -> PerceptualHash:
    """Hash an image by thresholding a grayscale grid against its mean.

    Bit ``i`` (row-major over the grid) is set when cell ``i`` is brighter
    than the mean brightness.
    """
    if image.width == 0 or image.height == 0:
        return PerceptualHash(0, grid_size)

    gray = cv2.cvtColor(np.ascontiguousarray(image.pixels), cv2.COLOR_RGBA2GRAY)
    small = cv2.resize(gray, (grid_size, grid_size), interpolation=cv2.INTER_AREA).astype(np.float64)
    bits = (small > small.mean()).flatten()

    value = 0
    for i, bit in enumerate(bits):
        if bit:
            value |= 1 << i
    return PerceptualHash(value, grid_size)


def hamming_distance(h1: PerceptualHash, h2: PerceptualHash) -> int:
    """Number of differing bits, or ``INCOMPARABLE_DISTANCE`` across grid sizes."""
    if h1.grid_size != h2.grid_size:
        return INCOMPARABLE_DISTANCE
    return bin(h1.value ^ h2.value).count("1")


def fast_similarity(h1: PerceptualHash, h2: PerceptualHash) -> float:
    distance = hamming_distance(h1, h2)
    if distance == INCOMPARABLE_DISTANCE:
        return 0.0
    return 1.0 - distance / h1.bit_count
