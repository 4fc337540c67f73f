"""Tesseract-backed text recognition for roster screenshots."""

import asyncio
from typing import Callable, Optional

import numpy as np
import pytesseract

from ..core.constants import (
    OCR_CONTRAST,
    OCR_PROGRESS_CEILING,
    OCR_PROGRESS_INTERVAL_S,
    OCR_PROGRESS_START,
    OCR_PROGRESS_STEP,
)
from ..core.types import ImageBuffer
from ..utils.config import resolve_tesseract_path, settings
from ..utils.error_handler import ErrorContext, TextRecognitionUnavailableError, handle_error
from ..utils.log import LoggerMixin

ProgressCallback = Callable[[int], None]


def preprocess_for_ocr(image: ImageBuffer, contrast: float = OCR_CONTRAST) -> np.ndarray:
    """Grayscale by channel mean, then stretch contrast around mid-gray."""
    gray = image.rgb.astype(np.float32).mean(axis=2)
    adjusted = (gray - 128.0) * contrast + 128.0
    return np.clip(adjusted, 0, 255).astype(np.uint8)


class TesseractTextRecognizer(LoggerMixin):
    """Runs Tesseract off the event loop and reports progress.

    Progress goes 0 before preprocessing, 10 once the engine starts, then
    steps by 10 every ``progress_interval_s`` while it runs (never past 90),
    and 100 when text comes back.

    Every failure mode (engine missing, engine error, timeout, empty output)
    yields ``None`` so a screenshot without text simply has no text matches.
    """

    def __init__(
        self,
        tesseract_cmd: Optional[str] = None,
        timeout_s: Optional[float] = None,
        config: str = "--psm 6",
        progress_interval_s: float = OCR_PROGRESS_INTERVAL_S,
    ):
        self.tesseract_cmd = tesseract_cmd
        self.progress_interval_s = progress_interval_s
        self.timeout_s = timeout_s if timeout_s is not None else settings.OCR_TIMEOUT_SECONDS
        self.config = config

    def _resolve_command(self) -> str:
        if self.tesseract_cmd:
            return self.tesseract_cmd
        try:
            return resolve_tesseract_path()
        except FileNotFoundError as e:
            raise TextRecognitionUnavailableError("Tesseract executable not found", details={"error": str(e)})

    def _run_tesseract(self, gray: np.ndarray, command: str) -> str:
        pytesseract.pytesseract.tesseract_cmd = command
        return pytesseract.image_to_string(gray, config=self.config, timeout=self.timeout_s)

    async def _run_with_progress(self, gray: np.ndarray, command: str, report: ProgressCallback) -> str:
        job = asyncio.ensure_future(asyncio.to_thread(self._run_tesseract, gray, command))
        percent = OCR_PROGRESS_START
        try:
            while True:
                done, _ = await asyncio.wait({job}, timeout=self.progress_interval_s)
                if done:
                    return job.result()
                if percent < OCR_PROGRESS_CEILING:
                    percent = min(OCR_PROGRESS_CEILING, percent + OCR_PROGRESS_STEP)
                    report(percent)
        finally:
            if not job.done():
                job.cancel()

    async def recognize(self, image: ImageBuffer, progress: Optional[ProgressCallback] = None) -> Optional[str]:
        """Recognize text in a screenshot; ``None`` when no usable text comes back."""
        report = progress or (lambda _pct: None)
        context = ErrorContext(
            operation="text recognition",
            module=__name__,
            function="recognize",
            input_data={"size": f"{image.width}x{image.height}"},
        )

        report(0)
        try:
            command = self._resolve_command()
            gray = preprocess_for_ocr(image)
            report(OCR_PROGRESS_START)

            try:
                text = await asyncio.wait_for(
                    self._run_with_progress(gray, command, report),
                    timeout=self.timeout_s,
                )
            except asyncio.TimeoutError:
                raise TextRecognitionUnavailableError("Text recognition timed out", details={"timeout_s": self.timeout_s})
            except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, RuntimeError, OSError) as e:
                raise TextRecognitionUnavailableError("Text recognition failed", details={"error": str(e)})
        except TextRecognitionUnavailableError as e:
            return handle_error(e, context, self.logger, reraise=False, default_return=None)

        report(100)

        if not text or not text.strip():
            self.logger.warning("Text recognition returned no text", size=f"{image.width}x{image.height}")
            return None

        preview = text[:200] + ("..." if len(text) > 200 else "")
        self.logger.info("Text recognized", characters=len(text), preview=preview)
        return text
