from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict

import numpy as np

from ..utils.validation import validate_numeric_range
from .constants import (
    BADGE_MIN,
    HASH_GRID_SIZE,
    MAX_BADGE_EPIC,
    MAX_BADGE_LEGENDARY,
    RANK_MAX,
    RANK_MIN,
    UNKNOWN_CHARACTER_ID,
)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class Rarity(str, Enum):
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def max_badge(self) -> int:
        return MAX_BADGE_EPIC if self is Rarity.EPIC else MAX_BADGE_LEGENDARY


class RecognitionSource(str, Enum):
    TEMPLATE = "template"
    TEXT = "text"
    NONE = "none"


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """Read-only RGBA pixel grid of shape (height, width, 4).

    The pixels are copied on construction, so later writes to the source
    array never reach the buffer.
    """

    pixels: np.ndarray

    def __post_init__(self):
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected an (h, w, 4) RGBA array, got shape {arr.shape}")
        owned = np.array(arr, dtype=np.uint8, copy=True, order="C")
        owned.flags.writeable = False
        object.__setattr__(self, "pixels", owned)

    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "ImageBuffer":
        """Wrap an (h, w, 3) RGB array, adding an opaque alpha channel."""
        rgb = np.asarray(rgb, dtype=np.uint8)
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        return cls(np.concatenate([rgb, alpha], axis=2))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    def crop(self, x: int, y: int, width: int, height: int) -> "ImageBuffer":
        """Copy out a sub-rectangle; the result does not alias this buffer."""
        return ImageBuffer(self.pixels[y:y + height, x:x + width])


@dataclass(frozen=True)
class Character:
    id: str
    name: str
    rarity: Rarity


@dataclass(frozen=True)
class CardMetadata:
    rarity: Rarity
    rank: int = RANK_MIN
    badge_level: int = BADGE_MIN

    def __post_init__(self):
        object.__setattr__(self, "rank", clamp(int(self.rank), RANK_MIN, RANK_MAX))
        object.__setattr__(
            self, "badge_level", clamp(int(self.badge_level), BADGE_MIN, self.rarity.max_badge)
        )


@dataclass(frozen=True)
class PerceptualHash:
    value: int
    grid_size: int = HASH_GRID_SIZE

    @property
    def bit_count(self) -> int:
        return self.grid_size * self.grid_size

    def hex(self) -> str:
        return format(self.value, f"0{self.bit_count // 4}X")

    @classmethod
    def from_hex(cls, text: str, grid_size: int = HASH_GRID_SIZE) -> "PerceptualHash":
        """Parse the output of ``hex()``; raises ``ValueError`` on bad or oversized input."""
        value = int(text, 16)
        if value >> (grid_size * grid_size):
            raise ValueError(f"hash {text!r} has more than {grid_size * grid_size} bits")
        return cls(value, grid_size)


@dataclass(frozen=True)
class MatchCandidate:
    character_id: str
    similarity: float
    confidence: float

    @classmethod
    def unknown(cls) -> "MatchCandidate":
        return cls(UNKNOWN_CHARACTER_ID, 0.0, 0.0)

    @property
    def is_unknown(self) -> bool:
        return self.character_id == UNKNOWN_CHARACTER_ID


@dataclass(frozen=True)
class TextMatch:
    """A roster character found in recognized text, with the tiers read off the same line."""

    character_id: str
    character_name: str
    confidence: float
    rank: int = RANK_MIN
    badge_level: int = BADGE_MIN
    line: str = ""


@dataclass(frozen=True)
class CardRecognitionResult:
    index: int
    character_id: str
    similarity: float
    confidence: float
    source: RecognitionSource
    metadata: CardMetadata

    @classmethod
    def unknown(cls, index: int, metadata: CardMetadata) -> "CardRecognitionResult":
        return cls(index, UNKNOWN_CHARACTER_ID, 0.0, 0.0, RecognitionSource.NONE, metadata)

    @property
    def is_unknown(self) -> bool:
        return self.character_id == UNKNOWN_CHARACTER_ID

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["metadata"]["rarity"] = self.metadata.rarity.value
        return data


@dataclass(frozen=True)
class CardBox:
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class SlicerConfig:
    columns: int
    rows: int
    sidebar_ratio: float
    card_aspect_ratio: float
    padding_px: int

    def __post_init__(self):
        validate_numeric_range(self.columns, min_value=1, field_name="columns", integer=True)
        validate_numeric_range(self.rows, min_value=1, field_name="rows", integer=True)
        validate_numeric_range(
            self.sidebar_ratio, min_value=0.0, max_value=1.0,
            exclusive_max=True, field_name="sidebar_ratio",
        )
        validate_numeric_range(
            self.card_aspect_ratio, min_value=0.0, exclusive_min=True,
            field_name="card_aspect_ratio",
        )
        validate_numeric_range(self.padding_px, min_value=0, field_name="padding_px", integer=True)
