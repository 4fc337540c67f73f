"""Structured logging for the scanner, built on structlog over stdlib logging."""

import logging
import sys
import time
from typing import Any, Dict, Optional

import structlog

from .config import settings


def _renderer(fmt: str):
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None):
    """Route structlog through stdlib logging on stderr.

    ``level`` and ``fmt`` default to ``LOG_LEVEL`` and ``LOG_FORMAT``; unknown
    levels fall back to INFO and unknown formats to JSON. Stdout stays free
    for command output.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    fmt = (fmt or settings.LOG_FORMAT).lower()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(fmt),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)


def _elapsed_ms(context: Dict[str, Any]) -> Dict[str, int]:
    if "start_time" not in context:
        return {}
    return {"duration_ms": int((time.time() - context["start_time"]) * 1000)}


def _fields(context: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in context.items() if k not in ("event", "start_time")}


class LoggerMixin:
    """Gives a component a logger named after its class, plus timed operation logs.

    ``log_start`` returns a context dict that ``log_success`` / ``log_error``
    consume; the fields passed to ``log_start`` are repeated on the closing
    entry together with ``duration_ms``.
    """

    @property
    def logger(self) -> structlog.BoundLogger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

    def log_start(self, event: str, **kwargs: Any) -> Dict[str, Any]:
        context = {"event": event, "start_time": time.time(), **kwargs}
        self.logger.debug(f"{event} started", **_fields(context))
        return context

    def log_success(self, context: Dict[str, Any], **kwargs: Any):
        self.logger.info(
            f"{context.get('event', 'operation')} completed",
            **_fields(context),
            **kwargs,
            **_elapsed_ms(context),
        )

    def log_error(self, context: Dict[str, Any], error: Exception, **kwargs: Any):
        self.logger.error(
            f"{context.get('event', 'operation')} failed",
            **_fields(context),
            error=str(error),
            error_type=type(error).__name__,
            **kwargs,
            **_elapsed_ms(context),
        )
