"""
Best-match search of a card against a template library.

Three search modes are supported and selected once per matcher:

- ``pixel``: compare against every template in canonical id order with the
  configured similarity strategy, stopping at the first score above the
  early-exit threshold.
- ``hash``: rank templates by perceptual-hash similarity only.
- ``hybrid``: keep the templates whose hashes are nearest to the card's, then
  run the ``pixel`` search over just those.
"""

import threading
import weakref
from typing import TYPE_CHECKING, Dict, List, Optional

import numpy as np

from ..core import constants as C
from ..core.types import ImageBuffer, MatchCandidate
from ..utils.log import LoggerMixin
from ..utils.validation import validate_enum_value, validate_numeric_range
from .phash import fast_similarity, hamming_distance, perceptual_hash
from .similarity import SimilarityStrategy, get_strategy

if TYPE_CHECKING:
    from ..reference.library import TemplateLibrary

MATCH_MODES = ["pixel", "hash", "hybrid"]


class TemplateMatcher(LoggerMixin):
    """Finds the template most similar to a card."""

    def __init__(
        self,
        strategy: Optional[SimilarityStrategy] = None,
        mode: str = "pixel",
        early_exit_similarity: float = C.EARLY_EXIT_SIMILARITY,
        max_comparisons: int = 0,
        prefilter_top_k: int = C.PREFILTER_TOP_K,
    ):
        self.strategy = strategy or get_strategy()
        self.mode = validate_enum_value(mode, MATCH_MODES, field_name="match mode")
        self.early_exit_similarity = early_exit_similarity
        self.max_comparisons = validate_numeric_range(max_comparisons, min_value=0, field_name="max_comparisons")
        self.prefilter_top_k = validate_numeric_range(prefilter_top_k, min_value=1, field_name="prefilter_top_k")

        self._lock = threading.Lock()
        self._features: "weakref.WeakKeyDictionary[TemplateLibrary, Dict[str, np.ndarray]]" = (
            weakref.WeakKeyDictionary()
        )

    @classmethod
    def from_settings(cls, settings) -> "TemplateMatcher":
        return cls(
            strategy=get_strategy(settings.MATCH_STRATEGY),
            mode=settings.MATCH_MODE,
            max_comparisons=settings.MAX_TEMPLATE_COMPARISONS,
        )

    def similarity(self, card: ImageBuffer, template: ImageBuffer) -> float:
        return self.strategy.similarity(card, template)

    def _template_features(self, library: "TemplateLibrary") -> Dict[str, np.ndarray]:
        """Prepared template arrays for this strategy, computed once per library."""
        with self._lock:
            cached = self._features.get(library)
        if cached is not None:
            return cached

        features = {cid: self.strategy.prepare(image) for cid, image in library.items()}
        with self._lock:
            return self._features.setdefault(library, features)

    def candidate_ids(self, card: ImageBuffer, library: "TemplateLibrary") -> List[str]:
        """Template ids to compare against, in canonical order."""
        ids = list(library.ids)
        if self.mode == "hybrid" and len(ids) > self.prefilter_top_k:
            card_hash = perceptual_hash(card)
            ranked = sorted(ids, key=lambda cid: (hamming_distance(card_hash, library.hashes[cid]), cid))
            ids = sorted(ranked[:self.prefilter_top_k])
        if self.max_comparisons:
            ids = ids[:self.max_comparisons]
        return ids

    def match_best(self, card: ImageBuffer, library: "TemplateLibrary") -> MatchCandidate:
        """Best template match for a card; the unknown sentinel when nothing is comparable."""
        if len(library) == 0 or card.width == 0 or card.height == 0:
            return MatchCandidate.unknown()

        if self.mode == "hash":
            return self._match_by_hash(card, library)

        card_features = self.strategy.prepare(card)
        features = self._template_features(library)

        best_id, best_similarity, compared = None, -1.0, 0
        for cid in self.candidate_ids(card, library):
            score = self.strategy.compare(card_features, features[cid])
            compared += 1
            if score > best_similarity:
                best_id, best_similarity = cid, score
            if score > self.early_exit_similarity:
                break

        if best_id is None:
            return MatchCandidate.unknown()

        self.logger.debug(
            "Template match",
            character_id=best_id,
            similarity=round(best_similarity, 4),
            compared=compared,
            library_size=len(library),
            mode=self.mode,
        )
        return MatchCandidate(best_id, best_similarity, best_similarity)

    def _match_by_hash(self, card: ImageBuffer, library: "TemplateLibrary") -> MatchCandidate:
        card_hash = perceptual_hash(card)
        best_id, best_similarity = None, -1.0
        ids = library.ids[:self.max_comparisons] if self.max_comparisons else library.ids
        for cid in ids:
            score = fast_similarity(card_hash, library.hashes[cid])
            if score > best_similarity:
                best_id, best_similarity = cid, score

        if best_id is None:
            return MatchCandidate.unknown()
        return MatchCandidate(best_id, best_similarity, best_similarity)
