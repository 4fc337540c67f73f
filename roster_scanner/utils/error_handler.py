"""
Scanner exceptions and the helpers that log them without stopping a batch.

A missing template, an undecodable payload or an absent OCR engine only ever
costs the affected asset or signal. Per-asset code raises one of the
``RosterScannerError`` subclasses below and the batch-level caller turns it
into a logged, defaulted result via ``handle_error`` or ``safe_execute``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


class RosterScannerError(Exception):
    """Root of every error the scanner raises on purpose.

    ``details`` carries structured fields (ids, urls, sizes) that end up on the
    log entry next to the message.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def describe(self) -> str:
        return f"{self.message} | Details: {self.details}" if self.details else self.message

    def __str__(self) -> str:
        return self.describe()


class ConfigurationError(RosterScannerError):
    """A setting, grid geometry or roster entry is unusable."""


class DecodeError(RosterScannerError):
    """Bytes or a data URL that do not decode to an image."""


class TemplateUnavailableError(RosterScannerError):
    """A portrait template is missing locally or the fetch failed."""


class TextRecognitionUnavailableError(RosterScannerError):
    """Tesseract is absent, crashed or timed out."""


@dataclass
class ErrorContext:
    """Where a failure happened, for the log entry."""
    operation: str
    module: str
    function: str
    input_data: Optional[Dict[str, Any]] = None

    @property
    def location(self) -> str:
        return f"{self.module}.{self.function}"

    def fields(self, error: Exception) -> Dict[str, Any]:
        return {
            "error_type": type(error).__name__,
            "operation": self.operation,
            "error_module": self.module,
            "error_function": self.function,
            "input_data": self.input_data,
        }


def handle_error(
    error: Exception,
    context: ErrorContext,
    logger: Any,
    reraise: bool = True,
    default_return: Any = None
) -> Any:
    """Log ``error`` with its context, then re-raise it or hand back ``default_return``.

    Works with both stdlib loggers (context goes into ``extra``) and structlog
    loggers (context goes in as keyword fields).
    """
    reason = error.describe() if isinstance(error, RosterScannerError) else str(error)
    message = f"Error in {context.location} during {context.operation}: {reason}"
    fields = context.fields(error)

    if isinstance(logger, logging.Logger):
        logger.error(message, extra=fields)
    else:
        logger.error(message, **fields)

    if reraise:
        raise error
    return default_return


def safe_execute(
    func: Callable[..., Any],
    *args,
    context: ErrorContext,
    logger: Any,
    default_return: Any = None,
    **kwargs
) -> Any:
    """Call ``func`` and swap a ``RosterScannerError`` for ``default_return``.

    Other exceptions are bugs and propagate untouched.
    """
    try:
        return func(*args, **kwargs)
    except RosterScannerError as e:
        return handle_error(e, context, logger, reraise=False, default_return=default_return)
