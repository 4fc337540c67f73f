"""Runtime settings, read from the environment and an optional ``.env`` file."""

import shutil
from pathlib import Path
from typing import Optional

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings

TESSERACT_FALLBACKS = (
    "/opt/homebrew/bin/tesseract",
    "/usr/local/bin/tesseract",
    "/usr/bin/tesseract",
)


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Template assets
    TEMPLATE_DIR: str = "assets"
    TEMPLATE_BASE_URL: Optional[str] = None
    ROSTER_PATH: Optional[str] = None

    # Roster grid geometry
    SLICER_COLUMNS: int = 7
    SLICER_ROWS: int = 4
    SIDEBAR_RATIO: float = 0.18
    CARD_ASPECT_RATIO: float = 1.0
    PADDING_PX: int = 5

    # Template matching
    MATCH_STRATEGY: str = "center_crop"
    MATCH_MODE: str = "pixel"
    MAX_TEMPLATE_COMPARISONS: int = 0
    MATCH_WORKERS: int = 4

    # Text recognition
    TESSERACT_PATH: Optional[str] = None
    OCR_TIMEOUT_SECONDS: float = 30.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator(
        'LOG_LEVEL', 'LOG_FORMAT', 'TEMPLATE_DIR',
        'TEMPLATE_BASE_URL', 'ROSTER_PATH', 'TESSERACT_PATH',
        mode='before',
    )
    @classmethod
    def blank_means_default(cls, v, info: ValidationInfo):
        """A blank value behaves as if the variable were unset."""
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v

    @field_validator('LOG_FORMAT', 'MATCH_STRATEGY', 'MATCH_MODE', mode='before')
    @classmethod
    def normalize_choice(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def slicer_config(self):
        """Grid geometry as a validated ``SlicerConfig``."""
        from ..core.types import SlicerConfig

        return SlicerConfig(
            columns=self.SLICER_COLUMNS,
            rows=self.SLICER_ROWS,
            sidebar_ratio=self.SIDEBAR_RATIO,
            card_aspect_ratio=self.CARD_ASPECT_RATIO,
            padding_px=self.PADDING_PX,
        )


settings = Settings()


def resolve_tesseract_path() -> str:
    """Locate the tesseract binary.

    Order: ``TESSERACT_PATH`` when it points at a real file, then ``PATH``,
    then the usual Homebrew and distro install locations.
    """
    configured = settings.TESSERACT_PATH
    if configured and Path(configured).exists():
        return configured

    on_path = shutil.which("tesseract")
    if on_path:
        return on_path

    found = next((p for p in TESSERACT_FALLBACKS if Path(p).exists()), None)
    if found is None:
        raise FileNotFoundError(
            "Tesseract not found; install it or point TESSERACT_PATH at the binary"
        )
    return found
