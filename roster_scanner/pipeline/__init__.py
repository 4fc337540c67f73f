"""Recognition pipeline."""

from .orchestrator import RecognitionOrchestrator

__all__ = ["RecognitionOrchestrator"]
