"""
Module: layout.composer

Purpose:
    Build the scramble tables of one request: index label, scramble text
    and image per row. One font size is chosen for the whole table by
    fitting the longest scramble, and alternating-line highlighting is
    decided for the whole request with a dry run.

Key Functions:
    - scramble_image_size(): Image envelope for a request
    - compose_table(): One table at a fixed highlighting decision
    - compose_request(): Dry run + committed run for a request

Dependencies:
    - layout.text_fit: Font size search and line splitting
    - layout.turns: Turn padding and width probes
    - puzzles.base: Image rendering (through PuzzleType)

Used By:
    - output.assembler: Per-request scramble documents
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence

from scramble_sheets.core.models.geometry import ImageSize
from scramble_sheets.core.models.request import ScrambleRequest
from scramble_sheets.puzzles.base import PuzzleType

from .config import NON_BREAKING_SPACE, SheetConfig
from .fonts import MONO, SANS
from .models import ComposedSheet, FittedText, ImageSlot, LineFragment, SheetRow, SheetTable
from .text_fit import fit_font_size, split_into_lines
from .turns import WIDEST_CHARACTER, one_line_probe, pad_turns_uniformly, widest_probe

logger = logging.getLogger(__name__)

EXTRA_PREFIX = "E"
EXTRA_HEADER = "Extra scrambles"
LABEL_EXTRA_WIDTH = 5
PLACEHOLDER_PREFIX = "Error drawing scramble: "


def _max_image_height(request: ScrambleRequest, config: SheetConfig) -> int:
    available = config.available_height
    if request.extra_scrambles:
        available -= config.extra_header_height
    per_page = min(config.max_scrambles_per_page, len(request.all_scrambles))
    return int(available / per_page - 2 * config.scramble_image_padding)


def scramble_image_size(request: ScrambleRequest, config: SheetConfig) -> ImageSize:
    """
    Preferred image size for every row of ``request``.

    Images never take more than half the table width unless the puzzle
    asks for a fixed column width.
    """
    max_height = _max_image_height(request, config)
    max_width = int(config.table_width / 2)
    if request.puzzle.fixed_image_width is not None:
        max_width = request.puzzle.fixed_image_width
    size = request.puzzle.preferred_image_size(max_width, max_height)
    logger.debug(f"Image size for {request.title!r}: {size.width}x{size.height} (max {max_width}x{max_height})")
    return size


def label_width(prefix: str, count: int, config: SheetConfig) -> float:
    """Width of the index column, sized for the widest possible label."""
    chars = len(prefix) + 1 + int(math.log10(count))
    return SANS.width(WIDEST_CHARACTER * chars + ".", config.label_font_size) + LABEL_EXTRA_WIDTH


def _fit_scramble_font(
    scrambles: Sequence[str],
    width: float,
    height: float,
    config: SheetConfig,
) -> tuple[float, bool]:
    """Font size for the whole table and whether rows are single lines."""
    longest = max(scrambles, key=len)
    longest_padded = max((pad_turns_uniformly(s, WIDEST_CHARACTER) for s in scrambles), key=len)
    probe, try_one_line = widest_probe(longest_padded)

    fitted = fit_font_size(
        probe, MONO, width, height, config.max_scramble_font_size,
        allow_line_breaks=True, leading=config.row_leading,
        padding=config.text_padding_horizontal,
    )
    if try_one_line:
        one_line = fit_font_size(
            one_line_probe(longest), MONO, width, height, config.max_scramble_font_size,
            allow_line_breaks=False, leading=config.row_leading,
            padding=config.text_padding_horizontal,
        )
        if one_line.font_size >= config.min_one_line_font_size:
            return one_line.font_size, True
    return fitted.font_size, False


def _render_image(puzzle: PuzzleType, scramble: str, color_scheme: Dict[str, str], size: ImageSize, padding: int) -> ImageSlot:
    try:
        source = puzzle.render(scramble, color_scheme)
    except Exception as e:
        logger.warning(f"Error drawing {puzzle.short_name} scramble {scramble!r}: {e}")
        return ImageSlot(size=size, padding=padding, error=f"{PLACEHOLDER_PREFIX}{e}")
    return ImageSlot(size=size, padding=padding, source=source)


def compose_table(
    scrambles: Sequence[str],
    puzzle: PuzzleType,
    color_scheme: Dict[str, str],
    image_size: ImageSize,
    config: SheetConfig,
    *,
    prefix: str = "",
    force_highlighting: bool = False,
    render_images: bool = True,
    envelope_height: Optional[int] = None,
) -> SheetTable:
    """
    Lay out one scramble table.

    Args:
        scrambles: Scrambles in print order (non-empty)
        puzzle: Puzzle used to draw the images
        color_scheme: Scheme passed to the puzzle renderer
        image_size: Image size shared by every row
        config: Sheet configuration
        prefix: Label prefix ("E" for extra scrambles)
        force_highlighting: Highlight every row regardless of its length
        render_images: False for the dry run
        envelope_height: Row height budget when the puzzle has no image

    Returns:
        SheetTable; ``highlighting`` is True when forced or when any row
        reached the highlighting threshold
    """
    if not scrambles:
        raise ValueError("compose_table needs at least one scramble")

    pad = config.scramble_image_padding
    col_label = label_width(prefix, len(scrambles), config)
    col_image = image_size.width + 2 * pad
    col_text = config.table_width - col_label - col_image

    image_height = image_size.height if not image_size.is_empty else (envelope_height or 0)
    area_width = col_text - 2 * config.scramble_padding_horizontal
    area_height = image_height - 2 * pad - config.scramble_padding_top - config.scramble_padding_bottom
    font_size, one_line = _fit_scramble_font(scrambles, area_width, area_height, config)

    highlight = force_highlighting
    rows: List[SheetRow] = []
    for i, scramble in enumerate(scrambles, start=1):
        text = scramble if one_line else pad_turns_uniformly(scramble, NON_BREAKING_SPACE)
        lines = split_into_lines(text, MONO, font_size, col_text, config.text_padding_horizontal)
        if len(lines) >= config.min_lines_to_alternate_highlighting:
            highlight = True
        fragments = tuple(
            LineFragment(line.content, highlighted=highlight and n % 2 == 0)
            for n, line in enumerate(lines, start=1)
        )
        fitted = FittedText(font_size=font_size, lines=fragments)

        image = None
        if render_images and not image_size.is_empty:
            image = _render_image(puzzle, scramble, color_scheme, image_size, pad)

        text_height = fitted.height(config.row_leading) + config.scramble_padding_top + config.scramble_padding_bottom
        height = max(text_height, image_height + 2 * pad, config.label_font_size * 1.5)
        rows.append(SheetRow(label=f"{prefix}{i}.", scramble=scramble, text=fitted, height=height, image=image))

    return SheetTable(
        rows=tuple(rows),
        label_width=col_label,
        text_width=col_text,
        image_width=col_image,
        font_size=font_size,
        one_line=one_line,
        highlighting=highlight,
        prefix=prefix,
    )


def compose_request(request: ScrambleRequest, config: Optional[SheetConfig] = None) -> ComposedSheet:
    """
    Compose the primary (and extra) table of a request.

    A dry run without images decides whether any row needs highlighting;
    if one does, the committed run highlights every row of both tables.
    """
    config = config or SheetConfig()
    image_size = scramble_image_size(request, config)
    envelope = _max_image_height(request, config)

    def run(force: bool, render: bool) -> tuple[SheetTable, Optional[SheetTable]]:
        primary = compose_table(
            request.scrambles, request.puzzle, request.color_scheme, image_size, config,
            force_highlighting=force, render_images=render, envelope_height=envelope,
        )
        extra = None
        if request.extra_scrambles:
            extra = compose_table(
                request.extra_scrambles, request.puzzle, request.color_scheme, image_size, config,
                prefix=EXTRA_PREFIX, force_highlighting=force, render_images=render,
                envelope_height=envelope,
            )
        return primary, extra

    primary, extra = run(force=False, render=False)
    force = primary.highlighting or (extra is not None and extra.highlighting)
    if force:
        logger.debug(f"Highlighting forced for every row of {request.title!r}")

    primary, extra = run(force=force, render=True)
    logger.info(
        f"Composed {request.title!r}: {len(primary.rows)} rows at {primary.font_size:.1f}pt"
        f"{f', {len(extra.rows)} extra' if extra else ''}"
    )
    return ComposedSheet(title=request.title, primary=primary, image_size=image_size, extra=extra)
