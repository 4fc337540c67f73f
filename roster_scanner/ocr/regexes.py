"""Regex patterns for rank and badge extraction from recognized text."""

import re
from typing import Optional

from ..core.constants import BADGE_MIN, RANK_MAX, RANK_MIN
from ..core.types import clamp

# Keyword followed by one or two digits, e.g. "Rank 10", "R10", "Lvl 7"
RANK_PATTERN = re.compile(r'\b(?:rank|level|lvl|r)\s*(\d{1,2})(?!\d)', re.IGNORECASE)

# "Badge 25", "B25"
BADGE_PATTERN = re.compile(r'\b(?:badge|b)\s*(\d{1,2})(?!\d)', re.IGNORECASE)

# Any standalone one- or two-digit number
NUMBER_PATTERN = re.compile(r'(?<!\d)(\d{1,2})(?!\d)')


def _first_number(pattern: re.Pattern, text: str) -> Optional[int]:
    match = pattern.search(text) or NUMBER_PATTERN.search(text)
    if match:
        return int(match.group(1))
    return None


def parse_rank(text: str) -> Optional[int]:
    """
    Extract a rank from a line of text, clamped to [1, 15].

    A keyword-prefixed number wins; otherwise the first standalone number is
    used.

    Examples:
        >>> parse_rank("Batman Rank 10")
        10
        >>> parse_rank("Superman R22")
        15
        >>> parse_rank("Cyborg") is None
        True
    """
    value = _first_number(RANK_PATTERN, text)
    if value is None:
        return None
    return clamp(value, RANK_MIN, RANK_MAX)


def parse_badge(text: str, max_badge: int) -> Optional[int]:
    """
    Extract a badge level from a line of text, clamped to [1, max_badge].

    Examples:
        >>> parse_badge("Aquaman Rank 3 Badge 25", 30)
        25
        >>> parse_badge("Aquaman B45", 30)
        30
    """
    value = _first_number(BADGE_PATTERN, text)
    if value is None:
        return None
    return clamp(value, BADGE_MIN, max_badge)
