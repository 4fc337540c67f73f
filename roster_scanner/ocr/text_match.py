"""Fuzzy matching of recognized text against known character names."""

import re
from typing import Dict, List, Optional, Sequence

from ..core.constants import BADGE_MIN, NAME_CONTAINMENT_RATIO, RANK_MIN
from ..core.types import Character, TextMatch
from ..utils.log import LoggerMixin
from .regexes import parse_badge, parse_rank

_SEPARATORS = re.compile(r'[-_\s]+')


def normalize(text: str) -> str:
    """Lower-case and drop dashes, underscores and whitespace."""
    return _SEPARATORS.sub('', text).lower()


def matched_characters(name: str, line: str) -> int:
    """Count the characters of ``name`` that occur anywhere in ``line``.

    Both arguments are expected to be normalized. Repeated letters in the
    name are counted each time.
    """
    return sum(1 for ch in name if ch in line)


def contains_name(line: str, name: str, ratio: float = NAME_CONTAINMENT_RATIO) -> bool:
    """Substring containment, or a loose bag-of-characters overlap."""
    if not name:
        return False
    if name in line:
        return True
    threshold = max(1, int(len(name) * ratio))
    return matched_characters(name, line) >= threshold


def name_confidence(line: str, name: str) -> float:
    if not name:
        return 0.0
    if name in line:
        return 1.0
    return matched_characters(name, line) / len(name)


class TextMatcher(LoggerMixin):
    """Finds roster characters mentioned in a block of recognized text."""

    def __init__(self, roster: Sequence[Character], containment_ratio: float = NAME_CONTAINMENT_RATIO):
        self.roster = list(roster)
        self.containment_ratio = containment_ratio
        self._names: Dict[str, str] = {c.id: normalize(c.name) for c in self.roster}

    def match(self, text: Optional[str]) -> List[TextMatch]:
        """
        Match every non-empty line against the roster.

        Returns:
            One ``TextMatch`` per character id (first occurrence wins), sorted
            by confidence descending
        """
        if not text or not text.strip():
            return []

        results: List[TextMatch] = []
        seen = set()
        lines = [line.strip() for line in text.splitlines()]

        for line in filter(None, lines):
            normalized = normalize(line)
            for character in self.roster:
                if character.id in seen:
                    continue
                name = self._names[character.id]
                if not contains_name(normalized, name, self.containment_ratio):
                    continue

                rank = parse_rank(line)
                badge = parse_badge(line, character.rarity.max_badge)
                results.append(TextMatch(
                    character_id=character.id,
                    character_name=character.name,
                    confidence=name_confidence(normalized, name),
                    rank=rank if rank is not None else RANK_MIN,
                    badge_level=badge if badge is not None else BADGE_MIN,
                    line=line,
                ))
                seen.add(character.id)

        results.sort(key=lambda m: m.confidence, reverse=True)

        self.logger.info(
            "Text matching completed",
            lines=sum(1 for line in lines if line),
            matches=len(results),
            characters=[m.character_id for m in results],
        )
        return results
