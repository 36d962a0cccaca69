"""
Module: layout.visualizer

Purpose:
    Debug visualization for flow layouts. Draws every page with its
    column outlines and one labelled box per render item at its estimated
    height, to eyeball where fragments were cut and which columns are
    over budget.

Key Functions:
    - render_debug_pages(): FlowResult -> list of PIL images
    - save_debug_pages(): Write images as PNGs

Dependencies:
    - PIL: Image drawing
    - layout.models: FlowResult and render items

Used By:
    - scripts/preview_layout.py: --debug-dir output
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from PIL import Image, ImageDraw, ImageFont

from .config import LayoutType
from .models import (
    ChoiceRange,
    FlowResult,
    ItemKind,
    PassagePart,
    QuestionRange,
    QuestionStemPart,
    RenderItem,
)

logger = logging.getLogger(__name__)

# Visualization constants
COLORS = {
    ItemKind.PASSAGE_PART: (0, 160, 0, 90),       # Green
    ItemKind.QUESTION_STEM_PART: (0, 0, 255, 90),  # Blue
    ItemKind.CHOICE_RANGE: (255, 165, 0, 110),     # Orange
    ItemKind.QUESTION_RANGE: (140, 0, 200, 90),    # Purple
}
OVERFLOW_COLOR = (255, 0, 0, 255)
COLUMN_COLOR = (120, 120, 120, 255)
PAGE_BG_COLOR = (255, 255, 255, 255)
LABEL_TEXT_COLOR = (0, 0, 0, 255)
MARGIN_PX = 20
BOX_LINE_WIDTH = 2
FONT_SIZE = 12


def _item_label(item: RenderItem) -> str:
    if isinstance(item, PassagePart):
        return f"passage {item.group_id} #{item.part_index + 1}"
    if isinstance(item, QuestionStemPart):
        return f"Q{item.number} stem{'' if item.is_first_part else ' (cont.)'}"
    if isinstance(item, ChoiceRange):
        return f"{item.question_id} choices {item.start_index + 1}-{item.end_index + 1}"
    if isinstance(item, QuestionRange):
        return f"{item.group_id} questions {item.start_index + 1}-{item.end_index + 1}"
    return str(item.kind)


def _load_font() -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("Arial.ttf", FONT_SIZE)
    except (IOError, OSError):
        return ImageFont.load_default()


def render_debug_pages(
    result: FlowResult,
    container_height: float,
    column_width: int = 320,
) -> List[Image.Image]:
    """
    Draw a debug image per page.

    Args:
        result: Layout to draw
        container_height: Column/page height the layout was produced for
        column_width: Width of each drawn column in pixels

    Returns:
        One RGB image per page

    Example:
        >>> images = render_debug_pages(result, 950)
        >>> images[0].save("page_1.png")
    """
    column_count = 2 if result.layout is LayoutType.DOUBLE else 1
    height = int(container_height)
    width = column_count * column_width + (column_count + 1) * MARGIN_PX
    font = _load_font()
    images: List[Image.Image] = []

    for page in result.pages:
        # Items may run past the container; leave room to show it
        overflow = max(
            (sum(i.est_height for i in items) for _, items in page.columns()),
            default=0,
        )
        canvas_height = max(height, int(overflow)) + 2 * MARGIN_PX
        image = Image.new("RGBA", (width, canvas_height), PAGE_BG_COLOR)
        overlay = Image.new("RGBA", image.size, (255, 255, 255, 0))
        draw = ImageDraw.Draw(overlay)

        for col_index, (_, items) in enumerate(page.columns()):
            left = MARGIN_PX + col_index * (column_width + MARGIN_PX)
            right = left + column_width
            draw.rectangle(
                [left, MARGIN_PX, right, MARGIN_PX + height],
                outline=COLUMN_COLOR,
                width=BOX_LINE_WIDTH,
            )
            _draw_column_items(draw, items, left, right, height, font)

        images.append(Image.alpha_composite(image, overlay).convert("RGB"))

    logger.debug(f"Rendered {len(images)} debug pages")
    return images


def _draw_column_items(
    draw: ImageDraw.ImageDraw,
    items: Sequence[RenderItem],
    left: int,
    right: int,
    container_height: int,
    font: ImageFont.ImageFont,
) -> None:
    y = 0.0
    for item in items:
        top = MARGIN_PX + y
        bottom = top + item.est_height
        overflowing = y + item.est_height > container_height
        draw.rectangle(
            [left + 2, top, right - 2, max(top, bottom - 1)],
            fill=COLORS[item.kind],
            outline=OVERFLOW_COLOR if overflowing else None,
            width=BOX_LINE_WIDTH,
        )
        draw.text(
            (left + 6, top + 2),
            f"{_item_label(item)} ({item.est_height:.0f}px)",
            fill=LABEL_TEXT_COLOR,
            font=font,
        )
        y += item.est_height


def save_debug_pages(images: Sequence[Image.Image], out_dir: Path) -> List[Path]:
    """Save debug images as page_001.png, page_002.png, ..."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths: List[Path] = []
    for index, image in enumerate(images, start=1):
        path = out_dir / f"page_{index:03d}.png"
        image.save(path)
        paths.append(path)
    logger.info(f"Saved {len(paths)} debug pages to {out_dir}")
    return paths
