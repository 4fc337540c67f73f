from typing import Final, Tuple

# Tier bounds
RANK_MIN: Final[int] = 1
RANK_MAX: Final[int] = 15
BADGE_MIN: Final[int] = 1
MAX_BADGE_EPIC: Final[int] = 30
MAX_BADGE_LEGENDARY: Final[int] = 40

UNKNOWN_CHARACTER_ID: Final[str] = ""

# Rarity: border strip sampling
RARITY_SAMPLE_INSET: Final[int] = 5
RARITY_SAMPLE_STEP: Final[int] = 10
YELLOW_MIN_R: Final[int] = 180
YELLOW_MIN_G: Final[int] = 140
YELLOW_MAX_B: Final[int] = 100
EPIC_YELLOW_RATIO: Final[float] = 0.5
EPIC_AVG_MIN_R: Final[float] = 180.0
EPIC_AVG_MIN_G: Final[float] = 140.0

# Rank: star band at the bottom edge
STAR_BAND_TOP: Final[float] = 0.85
STAR_BAND_X: Final[Tuple[int, int]] = (1, 5)  # sixths of the width
STAR_MIN_BRIGHTNESS: Final[int] = 150
GOLD_STAR_MIN_R: Final[int] = 200
GOLD_STAR_MIN_G: Final[int] = 180
GOLD_STAR_MAX_B: Final[int] = 100
RED_STAR_MIN_R: Final[int] = 200
RED_STAR_MAX_G: Final[int] = 100
RED_STAR_MAX_B: Final[int] = 100
PLATINUM_STAR_MIN: Final[int] = 180
STARS_PER_TIER: Final[int] = 5
GOLD_TIER_START: Final[int] = 1
RED_TIER_START: Final[int] = 6
PLATINUM_TIER_START: Final[int] = 11

# Badge icon ROI (normalized y1,y2,x1,x2)
ROI_BADGE = (0.10, 0.25, 0.05, 0.20)
BADGE_SAMPLE_STEP: Final[int] = 2
BADGE_MIN_PIXELS: Final[int] = 5
BLUE_BADGE_MIN_B: Final[int] = 150
BLUE_BADGE_MAX_R: Final[int] = 100
BLUE_BADGE_MAX_G: Final[int] = 150
PURPLE_BADGE_MIN_R: Final[int] = 120
PURPLE_BADGE_MIN_B: Final[int] = 120
PURPLE_BADGE_MAX_G: Final[int] = 100
RED_BADGE_MIN_R: Final[int] = 150
RED_BADGE_MAX_G: Final[int] = 80
RED_BADGE_MAX_B: Final[int] = 80
RED_BADGE_TIER_START: Final[int] = 21
PURPLE_BADGE_LEVEL: Final[int] = 15
BLUE_BADGE_LEVEL: Final[int] = 5
NO_BADGE_LEVEL: Final[int] = 1

# Template similarity
CENTER_CROP_RATIO: Final[float] = 0.6
COMPARE_SIZE: Final[int] = 24
COMPARE_SAMPLE_STEP: Final[int] = 2
WHOLE_IMAGE_COMPARE_SIZE: Final[int] = 100
CENTER_WEIGHTED_COMPARE_SIZE: Final[int] = 48
MAX_RGB_DISTANCE: Final[float] = 441.0
EARLY_EXIT_SIMILARITY: Final[float] = 0.90

# Perceptual hash
HASH_GRID_SIZE: Final[int] = 8
PREFILTER_TOP_K: Final[int] = 5

# Text matching
NAME_CONTAINMENT_RATIO: Final[float] = 0.7
OCR_CONTRAST: Final[float] = 1.5
OCR_PROGRESS_START: Final[int] = 10
OCR_PROGRESS_STEP: Final[int] = 10
OCR_PROGRESS_CEILING: Final[int] = 90
OCR_PROGRESS_INTERVAL_S: Final[float] = 0.5

# Trust floors
TEMPLATE_TRUST_FLOOR: Final[float] = 0.60
TEXT_TRUST_FLOOR: Final[float] = 0.60

# Asset path convention
TEMPLATE_PATH_PATTERN: Final[str] = "portraits/{character_id}.png"
