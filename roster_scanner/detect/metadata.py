"""
Card metadata detection from fixed-region color statistics.

Each heuristic samples a small, fixed part of the card (border strips, the
star band along the bottom edge, the badge icon in the top-left corner) so
cost scales with the sampled pixels rather than the card area. Results are
coarse bucket estimates: rank picks a tier from star color and a rough
position inside it, badge returns the midpoint of the detected color tier.
"""

import numpy as np

from ..core import constants as C
from ..core.types import CardMetadata, ImageBuffer, Rarity, clamp
from ..utils.log import LoggerMixin


def _channels(pixels: np.ndarray):
    """Split an (..., >=3) uint8 array into signed int R, G, B planes."""
    px = pixels.astype(np.int32)
    return px[..., 0], px[..., 1], px[..., 2]


def _tier_offset(color_pixels: int, width: int, band_height: int) -> int:
    denominator = (width * band_height) // 2
    if denominator <= 0:
        return 0
    return clamp((color_pixels * C.STARS_PER_TIER) // denominator, 0, C.STARS_PER_TIER - 1)


class CardMetadataDetector(LoggerMixin):
    """Classifies rarity, rank and badge level of a single card."""

    def detect(self, card: ImageBuffer) -> CardMetadata:
        rarity = self.detect_rarity(card)
        rank = self.detect_rank(card)
        badge_level = self.detect_badge_level(card, rarity)

        metadata = CardMetadata(rarity=rarity, rank=rank, badge_level=badge_level)
        self.logger.debug(
            "Metadata detected",
            rarity=metadata.rarity.value,
            rank=metadata.rank,
            badge_level=metadata.badge_level,
        )
        return metadata

    def detect_rarity(self, card: ImageBuffer) -> Rarity:
        """Yellow/gold border strips mean Epic, anything else Legendary."""
        width, height = card.width, card.height
        xs = np.arange(width // 4, (3 * width) // 4, C.RARITY_SAMPLE_STEP)
        if xs.size == 0 or height == 0:
            return Rarity.LEGENDARY

        top_y = min(C.RARITY_SAMPLE_INSET, height - 1)
        bottom_y = clamp(height - C.RARITY_SAMPLE_INSET, 0, height - 1)
        samples = np.concatenate([card.rgb[top_y, xs], card.rgb[bottom_y, xs]])
        r, g, b = _channels(samples)

        yellow = (r > C.YELLOW_MIN_R) & (g > C.YELLOW_MIN_G) & (b < C.YELLOW_MAX_B)
        yellow_ratio = float(yellow.mean())
        avg_r, avg_g = float(r.mean()), float(g.mean())

        if yellow_ratio > C.EPIC_YELLOW_RATIO or (avg_r > C.EPIC_AVG_MIN_R and avg_g > C.EPIC_AVG_MIN_G):
            return Rarity.EPIC
        return Rarity.LEGENDARY

    def detect_rank(self, card: ImageBuffer) -> int:
        """Estimate rank from the color and amount of star pixels in the bottom band.

        Gold stars map to 1-5, red to 6-10, platinum to 11-15.
        """
        width, height = card.width, card.height
        band_top = int(height * C.STAR_BAND_TOP)
        band_height = height - band_top
        left, right = (C.STAR_BAND_X[0] * width) // 6, (C.STAR_BAND_X[1] * width) // 6

        r, g, b = _channels(card.rgb[band_top:height, left:right])
        bright = (r + g + b) // 3 > C.STAR_MIN_BRIGHTNESS

        gold = bright & (r > C.GOLD_STAR_MIN_R) & (g > C.GOLD_STAR_MIN_G) & (b < C.GOLD_STAR_MAX_B)
        red = bright & ~gold & (r > C.RED_STAR_MIN_R) & (g < C.RED_STAR_MAX_G) & (b < C.RED_STAR_MAX_B)
        platinum = (
            bright & ~gold & ~red
            & (r > C.PLATINUM_STAR_MIN) & (g > C.PLATINUM_STAR_MIN) & (b > C.PLATINUM_STAR_MIN)
        )

        bright_count = int(bright.sum())
        gold_count, red_count, platinum_count = int(gold.sum()), int(red.sum()), int(platinum.sum())

        if platinum_count > gold_count and platinum_count > red_count:
            rank = C.PLATINUM_TIER_START + _tier_offset(platinum_count, width, band_height)
        elif red_count > gold_count:
            rank = C.RED_TIER_START + _tier_offset(red_count, width, band_height)
        elif gold_count > 0:
            rank = C.GOLD_TIER_START + _tier_offset(gold_count, width, band_height)
        else:
            area = width * band_height
            rank = clamp((bright_count * C.RANK_MAX) // area, C.RANK_MIN, C.RANK_MAX) if area > 0 else C.RANK_MIN

        return clamp(rank, C.RANK_MIN, C.RANK_MAX)

    def detect_badge_level(self, card: ImageBuffer, rarity: Rarity) -> int:
        """Map the badge icon color to the midpoint of its tier."""
        width, height = card.width, card.height
        y1, y2, x1, x2 = C.ROI_BADGE
        region = card.rgb[
            int(height * y1):int(height * y2):C.BADGE_SAMPLE_STEP,
            int(width * x1):int(width * x2):C.BADGE_SAMPLE_STEP,
        ]
        r, g, b = _channels(region)

        blue = (b > C.BLUE_BADGE_MIN_B) & (r < C.BLUE_BADGE_MAX_R) & (g < C.BLUE_BADGE_MAX_G)
        purple = ~blue & (r > C.PURPLE_BADGE_MIN_R) & (b > C.PURPLE_BADGE_MIN_B) & (g < C.PURPLE_BADGE_MAX_G)
        red = ~blue & ~purple & (r > C.RED_BADGE_MIN_R) & (g < C.RED_BADGE_MAX_G) & (b < C.RED_BADGE_MAX_B)

        max_badge = rarity.max_badge
        if int(red.sum()) > C.BADGE_MIN_PIXELS:
            return C.RED_BADGE_TIER_START + (max_badge - C.RED_BADGE_TIER_START) // 2
        if int(purple.sum()) > C.BADGE_MIN_PIXELS:
            return C.PURPLE_BADGE_LEVEL
        if int(blue.sum()) > C.BADGE_MIN_PIXELS:
            return C.BLUE_BADGE_LEVEL
        return C.NO_BADGE_LEVEL


# Global singleton
metadata_detector = CardMetadataDetector()
