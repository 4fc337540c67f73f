"""Utilities package."""

from .config import Settings, resolve_tesseract_path, settings
from .log import LoggerMixin, configure_logging, get_logger

__all__ = [
    "Settings",
    "settings",
    "resolve_tesseract_path",
    "get_logger",
    "LoggerMixin",
    "configure_logging",
]
