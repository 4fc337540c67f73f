"""
Match module for template similarity, perceptual hashing and best-match search.
"""

from .matcher import MATCH_MODES, TemplateMatcher
from .phash import INCOMPARABLE_DISTANCE, fast_similarity, hamming_distance, perceptual_hash
from .similarity import (
    STRATEGIES,
    CenterCropStrategy,
    CenterWeightedStrategy,
    SimilarityStrategy,
    WholeImageStrategy,
    get_strategy,
    similarity,
)

__all__ = [
    "MATCH_MODES",
    "TemplateMatcher",
    "INCOMPARABLE_DISTANCE",
    "fast_similarity",
    "hamming_distance",
    "perceptual_hash",
    "STRATEGIES",
    "SimilarityStrategy",
    "CenterCropStrategy",
    "CenterWeightedStrategy",
    "WholeImageStrategy",
    "get_strategy",
    "similarity",
]
