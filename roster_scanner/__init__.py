"""Roster Scanner - Recognize characters and card metadata in roster screenshots."""

__version__ = "1.0.0"
__author__ = "Roster Scanner Team"
__description__ = "Slices roster screenshots into cards and identifies each card by template matching, pixel metadata and OCR text"

from .capture.decode import decode_image, load_image
from .capture.slicer import roster_slicer
from .core.types import CardMetadata, CardRecognitionResult, Character, ImageBuffer, Rarity
from .detect.metadata import metadata_detector
from .match.matcher import TemplateMatcher
from .ocr.text_match import TextMatcher
from .pipeline.orchestrator import RecognitionOrchestrator
from .reference.library import TemplateLibrary, template_cache
from .reference.roster import load_roster
from .utils.config import settings

# Core functionality imports
from .utils.log import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__description__",
    # Core components
    "configure_logging",
    "get_logger",
    "settings",
    "decode_image",
    "load_image",
    "roster_slicer",
    "metadata_detector",
    "TemplateMatcher",
    "TextMatcher",
    "RecognitionOrchestrator",
    "TemplateLibrary",
    "template_cache",
    "load_roster",
    "ImageBuffer",
    "Character",
    "Rarity",
    "CardMetadata",
    "CardRecognitionResult",
]
