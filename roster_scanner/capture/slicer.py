"""Roster grid slicing into individual character cards."""

from typing import List

from ..core.types import CardBox, ImageBuffer, SlicerConfig
from ..utils.log import LoggerMixin


class RosterSlicer(LoggerMixin):
    """Partitions a roster screenshot into card images in row-major order.

    The grid sits to the right of a sidebar occupying ``sidebar_ratio`` of the
    screenshot width. Cards share one width derived from the column count and
    padding; their height follows from ``card_aspect_ratio`` (width / height).
    """

    def card_boxes(self, width: int, height: int, config: SlicerConfig) -> List[CardBox]:
        """Compute every grid cell that fits inside a ``width`` x ``height`` screenshot."""
        sidebar_width = int(width * config.sidebar_ratio)
        content_width = width - sidebar_width
        padding = config.padding_px

        card_width = (content_width - padding * (config.columns + 1)) // config.columns
        card_height = int(card_width / config.card_aspect_ratio)

        if card_width <= 0 or card_height <= 0:
            self.logger.warning(
                "Card size is not positive, nothing to slice",
                card_width=card_width,
                card_height=card_height,
                screenshot=f"{width}x{height}",
            )
            return []

        start_x = sidebar_width + padding
        start_y = padding

        boxes = []
        for row in range(config.rows):
            for col in range(config.columns):
                x = start_x + col * (card_width + padding)
                y = start_y + row * (card_height + padding)

                if x + card_width > width or y + card_height > height:
                    self.logger.debug("Card out of bounds, skipping", row=row, col=col, x=x, y=y)
                    continue

                boxes.append(CardBox(row, col, x, y, card_width, card_height))

        return boxes

    def slice(self, screenshot: ImageBuffer, config: SlicerConfig) -> List[ImageBuffer]:
        """Crop every in-bounds card out of the screenshot."""
        boxes = self.card_boxes(screenshot.width, screenshot.height, config)
        cards = [screenshot.crop(b.x, b.y, b.width, b.height) for b in boxes]

        self.logger.info(
            "Roster sliced",
            screenshot=f"{screenshot.width}x{screenshot.height}",
            grid=f"{config.columns}x{config.rows}",
            card_size=f"{boxes[0].width}x{boxes[0].height}" if boxes else None,
            cards=len(cards),
            skipped=config.columns * config.rows - len(cards),
        )
        return cards


# Global singleton
roster_slicer = RosterSlicer()
