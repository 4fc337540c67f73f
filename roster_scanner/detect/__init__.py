"""Card metadata detection."""

from .metadata import CardMetadataDetector, metadata_detector

__all__ = ["CardMetadataDetector", "metadata_detector"]
