"""
Recognition orchestration: per-card template matching and metadata detection
merged with screenshot-level text matches.

Merge policy per card, in slicer order:

1. A template match at or above the template trust floor is used as is.
2. Otherwise the most confident unclaimed text match at or above the text
   trust floor is used. Text matches naming a character that a reliable
   template match already identified are never used, and each text match is
   given to at most one card.
3. Otherwise the card is reported as unknown.

Template and unknown results carry the pixel detector's metadata. A card filled
from text takes its rarity from the roster and its rank and badge level from
the text line, since the template that would back the pixel read is missing.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, List, Optional, Sequence, Tuple

from ..capture.slicer import RosterSlicer, roster_slicer
from ..core.constants import TEMPLATE_TRUST_FLOOR, TEXT_TRUST_FLOOR
from ..core.types import (
    CardMetadata,
    CardRecognitionResult,
    Character,
    ImageBuffer,
    MatchCandidate,
    RecognitionSource,
    SlicerConfig,
    TextMatch,
)
from ..detect.metadata import CardMetadataDetector, metadata_detector
from ..match.matcher import TemplateMatcher
from ..ocr.engine import ProgressCallback, TesseractTextRecognizer
from ..ocr.text_match import TextMatcher
from ..reference.library import TemplateLibrary, template_cache
from ..reference.roster import DEFAULT_ROSTER
from ..utils.config import settings
from ..utils.log import LoggerMixin

CardEvaluation = Tuple[MatchCandidate, CardMetadata]


class RecognitionOrchestrator(LoggerMixin):
    """Turns card images (or a whole screenshot) into recognition results."""

    def __init__(
        self,
        roster: Optional[Sequence[Character]] = None,
        matcher: Optional[TemplateMatcher] = None,
        detector: Optional[CardMetadataDetector] = None,
        slicer: Optional[RosterSlicer] = None,
        template_trust_floor: float = TEMPLATE_TRUST_FLOOR,
        text_trust_floor: float = TEXT_TRUST_FLOOR,
        workers: Optional[int] = None,
    ):
        self.roster = list(roster if roster is not None else DEFAULT_ROSTER)
        self.matcher = matcher or TemplateMatcher.from_settings(settings)
        self.detector = detector or metadata_detector
        self.slicer = slicer or roster_slicer
        self.text_matcher = TextMatcher(self.roster)
        self._rarities = {c.id: c.rarity for c in self.roster}
        self.template_trust_floor = template_trust_floor
        self.text_trust_floor = text_trust_floor
        self.workers = workers if workers is not None else settings.MATCH_WORKERS

    def evaluate_card(self, card: ImageBuffer, library: TemplateLibrary) -> CardEvaluation:
        return self.matcher.match_best(card, library), self.detector.detect(card)

    def evaluate_cards(self, cards: Sequence[ImageBuffer], library: TemplateLibrary) -> List[CardEvaluation]:
        """Evaluate cards in parallel; output order follows input order."""
        if self.workers <= 1 or len(cards) <= 1:
            return [self.evaluate_card(card, library) for card in cards]
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(lambda card: self.evaluate_card(card, library), cards))

    def is_reliable(self, template: MatchCandidate) -> bool:
        return not template.is_unknown and template.similarity >= self.template_trust_floor

    def combine(
        self,
        evaluations: Sequence[CardEvaluation],
        text_matches: Sequence[TextMatch] = (),
    ) -> List[CardRecognitionResult]:
        """Merge template and text signals into one result per card."""
        claimed = {t.character_id for t, _ in evaluations if self.is_reliable(t)}
        text_pool = [
            m for m in sorted(text_matches, key=lambda m: m.confidence, reverse=True)
            if m.confidence >= self.text_trust_floor and m.character_id not in claimed
        ]

        results = []
        for index, (template, metadata) in enumerate(evaluations):
            if self.is_reliable(template):
                results.append(CardRecognitionResult(
                    index=index,
                    character_id=template.character_id,
                    similarity=template.similarity,
                    confidence=template.confidence,
                    source=RecognitionSource.TEMPLATE,
                    metadata=metadata,
                ))
            elif text_pool:
                text = text_pool.pop(0)
                results.append(CardRecognitionResult(
                    index=index,
                    character_id=text.character_id,
                    similarity=0.0,
                    confidence=text.confidence,
                    source=RecognitionSource.TEXT,
                    metadata=self._text_metadata(text, metadata),
                ))
            else:
                results.append(CardRecognitionResult.unknown(index, metadata))
        return results

    def _text_metadata(self, text: TextMatch, detected: CardMetadata) -> CardMetadata:
        rarity = self._rarities.get(text.character_id, detected.rarity)
        return CardMetadata(rarity, rank=text.rank, badge_level=text.badge_level)

    def recognize_cards(
        self,
        cards: Sequence[ImageBuffer],
        library: Optional[TemplateLibrary] = None,
        text: Optional[str] = None,
    ) -> List[CardRecognitionResult]:
        """Recognize already-sliced cards, with optional recognized text for the screenshot."""
        library = library if library is not None else template_cache.get()
        context = self.log_start("Card recognition", cards=len(cards), templates=len(library))

        results = self.combine(self.evaluate_cards(cards, library), self.text_matcher.match(text))

        self._log_summary(context, results)
        return results

    def recognize_screenshot(
        self,
        screenshot: ImageBuffer,
        library: Optional[TemplateLibrary] = None,
        text: Optional[str] = None,
        config: Optional[SlicerConfig] = None,
    ) -> List[CardRecognitionResult]:
        cards = self.slicer.slice(screenshot, config or settings.slicer_config())
        return self.recognize_cards(cards, library, text)

    def start_text_recognition(
        self,
        screenshot: ImageBuffer,
        recognizer: Optional[TesseractTextRecognizer] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> "asyncio.Task[Optional[str]]":
        """Launch text recognition as a task the caller may cancel."""
        recognizer = recognizer or TesseractTextRecognizer()
        return asyncio.ensure_future(recognizer.recognize(screenshot, progress))

    async def recognize_screenshot_async(
        self,
        screenshot: ImageBuffer,
        library: Optional[TemplateLibrary] = None,
        text_task: Optional[Awaitable[Optional[str]]] = None,
        config: Optional[SlicerConfig] = None,
    ) -> List[CardRecognitionResult]:
        """Recognize a screenshot while text recognition runs alongside.

        A cancelled or failed text task leaves the batch without text matches.
        """
        library = library if library is not None else template_cache.get()
        text_future = asyncio.ensure_future(text_task) if text_task is not None else None

        try:
            cards = self.slicer.slice(screenshot, config or settings.slicer_config())
            context = self.log_start("Card recognition", cards=len(cards), templates=len(library))
            evaluations = await asyncio.to_thread(self.evaluate_cards, cards, library)
        except BaseException:
            # the text task must not outlive a failed or cancelled batch
            if text_future is not None and not text_future.done():
                text_future.cancel()
            raise
        text = await self._await_text(text_future)

        results = self.combine(evaluations, self.text_matcher.match(text))
        self._log_summary(context, results)
        return results

    async def _await_text(self, text_future: "Optional[asyncio.Future[Optional[str]]]") -> Optional[str]:
        if text_future is None:
            return None

        await asyncio.wait({text_future})
        if text_future.cancelled():
            self.logger.warning("Text recognition cancelled, continuing without text matches")
            return None

        error = text_future.exception()
        if error is not None:
            self.logger.error(
                "Text recognition failed, continuing without text matches",
                error=str(error),
                error_type=type(error).__name__,
            )
            return None
        return text_future.result()

    def _log_summary(self, context, results: Sequence[CardRecognitionResult]) -> None:
        self.log_success(
            context,
            template_matches=sum(1 for r in results if r.source is RecognitionSource.TEMPLATE),
            text_matches=sum(1 for r in results if r.source is RecognitionSource.TEXT),
            unknown=sum(1 for r in results if r.is_unknown),
        )
