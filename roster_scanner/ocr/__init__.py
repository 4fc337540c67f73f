"""OCR package: text recognition and roster name matching."""

from .engine import TesseractTextRecognizer, preprocess_for_ocr
from .regexes import BADGE_PATTERN, RANK_PATTERN, parse_badge, parse_rank
from .text_match import TextMatcher, contains_name, name_confidence, normalize

__all__ = [
    "TesseractTextRecognizer",
    "preprocess_for_ocr",
    "RANK_PATTERN",
    "BADGE_PATTERN",
    "parse_rank",
    "parse_badge",
    "TextMatcher",
    "contains_name",
    "name_confidence",
    "normalize",
]
