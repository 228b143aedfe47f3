"""
Module: layout.fmc

Purpose:
    Fixed-geometry fewest-moves sheets. Every band of the page is derived
    from the page bounds by fixed proportions; the result is a list of
    drawing primitives (segments, text, images) in PDF coordinates
    (origin bottom-left), drawn by output.renderer.

Key Classes:
    - FmcSheetLayout: Primitives of one page
    - Segment / TextLine / TextBlock / ImagePlacement: Primitives

Key Functions:
    - fmc_solution_sheet(): Solution sheet, with or without a scramble
    - fmc_cutout_sheet(): Page of repeated scramble strips to cut out
    - populate_rect(): Equal vertical slots of fitted text

Bands (solution sheet, top to bottom):
    title | rules            | competitor info
          |                  | grading
          | moves legend     | scramble image (or "separate sheet" note)
    scramble line (scramble sheets only)
    solution lines
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from scramble_sheets.core.models.geometry import ImageSize, Rect
from scramble_sheets.core.models.request import ScrambleRequest
from scramble_sheets.i18n import DEFAULT_LOCALE, translate

from .config import FmcConfig
from .fonts import SANS, SANS_BOLD, FontMetrics
from .models import ImageSlot
from .text_fit import fit_font_size, shrink_to_fit

logger = logging.getLogger(__name__)

Translate = Callable[[str, Optional[str], Optional[Mapping[str, object]]], str]

ALIGN_LEFT = "left"
ALIGN_CENTER = "center"
ALIGN_RIGHT = "right"
ALIGN_JUSTIFY = "justify"

SHORT_FILL = ": ____"
LONG_FILL = ": __________________"
WCA_ID_LINE = "WCA ID: __ __ __ __  __ __ __ __  __ __"
POPULATE_MAX_FONT_SIZE = 15
TEXT_MARGIN = 5
FMC_MARGIN = 10

LEGEND_HEIGHT = 160
LEGEND_ROWS = 8
LEGEND_CELL_WIDTH = 25
LEGEND_COLUMNS = 7
LEGEND_MAX_FONT_SIZE = 10
LEGEND_CELL_PADDING = 2
FACES = ("F", "R", "U", "B", "L", "D")
DIRECTION_MODIFIERS = ("", "'", "2")

TITLE_OFFSET = 30
TITLE_FONT_SIZE = 25
RULES_FONT_SIZE = 15
RULES_LEADING = 1.5

CUTOUT_FONT_SIZE = 20
CUTOUT_IMAGE_SPACING = 5
CUTOUT_IMAGE_PADDING = 8
CUTOUT_DASH = (3, 3)


@dataclass(frozen=True)
class Segment:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    dash: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class TextLine:
    """Single line drawn at a baseline; ``x`` is the anchor for ``align``."""

    x: float
    y: float
    text: str
    font_size: float
    align: str = ALIGN_LEFT
    font: str = SANS.name


@dataclass(frozen=True)
class TextBlock:
    """Pre-wrapped lines drawn top-down inside ``rect``."""

    rect: Rect
    paragraphs: tuple[tuple[str, ...], ...]
    font_size: float
    align: str = ALIGN_LEFT
    leading: float = 1.0
    font: str = SANS.name

    @property
    def lines(self) -> List[str]:
        return [line for paragraph in self.paragraphs for line in paragraph]


@dataclass(frozen=True)
class ImagePlacement:
    x: float
    y: float
    slot: ImageSlot


@dataclass(frozen=True)
class FmcSheetLayout:
    """Drawing primitives of one page."""

    page_width: float
    page_height: float
    segments: tuple[Segment, ...] = ()
    text_lines: tuple[TextLine, ...] = ()
    text_blocks: tuple[TextBlock, ...] = ()
    images: tuple[ImagePlacement, ...] = ()


def _freeze(paragraphs: List[List[str]]) -> tuple[tuple[str, ...], ...]:
    return tuple(tuple(lines) for lines in paragraphs)


def populate_rect(
    rect: Rect,
    items: Sequence[Tuple[str, str]],
    font_size: float,
    metrics: FontMetrics = SANS,
) -> List[TextBlock]:
    """
    Split ``rect`` into equal slots, top to bottom, one per item.

    Each item is fitted into a band ``font_size`` high at the top of its
    slot, starting from the populate ceiling. Empty items only take space.
    """
    if not items:
        return []
    slot = rect.height / len(items)
    blocks: List[TextBlock] = []
    for i, (text, align) in enumerate(items):
        if not text:
            continue
        slot_top = rect.top - i * slot
        band = Rect(rect.left, slot_top - font_size, rect.right, slot_top)
        size, paragraphs = shrink_to_fit(text, metrics, band.width, band.height, POPULATE_MAX_FONT_SIZE)
        blocks.append(TextBlock(rect=band, paragraphs=_freeze(paragraphs), font_size=size, align=align, font=metrics.name))
    return blocks


def render_slot(request: ScrambleRequest, scramble: str, size: ImageSize) -> ImageSlot:
    """Render ``scramble`` for a sheet; failures become a placeholder."""
    try:
        source = request.puzzle.render(scramble, request.color_scheme)
    except Exception as e:
        logger.warning(f"Error drawing scramble for {request.title!r}: {e}")
        return ImageSlot(size=size, padding=0, error=f"Error drawing scramble: {e}")
    return ImageSlot(size=size, padding=0, source=source)


@dataclass(frozen=True)
class _Bands:
    bottom: int
    left: int
    right: int
    top: int
    solution_border_top: int
    scramble_border_top: int
    competitor_info_bottom: int
    grade_bottom: int
    competitor_info_left: int

    @property
    def rules_right(self) -> int:
        return self.competitor_info_left


def _bands(page_width: float, page_height: float, with_scramble: bool) -> _Bands:
    bottom = 30
    left = 35
    right = int(page_width - left)
    top = int(page_height - bottom)
    height = top - bottom
    width = right - left

    solution_border_top = bottom + int(height * 0.5)
    competitor_info_bottom = top - int(height * (0.15 if with_scramble else 0.27))
    return _Bands(
        bottom=bottom,
        left=left,
        right=right,
        top=top,
        solution_border_top=solution_border_top,
        scramble_border_top=solution_border_top + 40,
        competitor_info_bottom=competitor_info_bottom,
        grade_bottom=competitor_info_bottom - 50,
        competitor_info_left=right - int(width * 0.45),
    )


def _borders(b: _Bands, with_scramble: bool, width: float) -> List[Segment]:
    segments = [
        Segment(b.left, b.top, b.left, b.bottom, width),
        Segment(b.left, b.bottom, b.right, b.bottom, width),
        Segment(b.right, b.bottom, b.right, b.top, width),
    ]
    if with_scramble:
        segments.append(Segment(b.left, b.solution_border_top, b.right, b.solution_border_top, width))
    rules_bottom_end = b.rules_right if with_scramble else b.right
    segments += [
        Segment(b.left, b.scramble_border_top, rules_bottom_end, b.scramble_border_top, width),
        Segment(b.rules_right, b.scramble_border_top, b.rules_right, b.grade_bottom, width),
        Segment(b.competitor_info_left, b.grade_bottom, b.right, b.grade_bottom, width),
        Segment(b.competitor_info_left, b.competitor_info_bottom, b.right, b.competitor_info_bottom, width),
        Segment(b.competitor_info_left, b.grade_bottom, b.competitor_info_left, b.top, width),
    ]
    return segments


def solution_lines(b: _Bands, with_scramble: bool, config: FmcConfig) -> List[Segment]:
    """One short line per allowed move, in rows spread over the solution band."""
    available_width = b.right - b.left
    available_height = b.scramble_border_top - b.bottom
    rows = config.solution_rows
    per_row = config.lines_per_row
    excess = available_width - per_row * config.line_length
    base = b.solution_border_top if with_scramble else b.scramble_border_top

    segments: List[Segment] = []
    for y in range(rows):
        for x in range(per_row):
            if len(segments) >= config.max_moves:
                return segments
            x_pos = b.left + x * config.line_length + (x + 1) * excess // (per_row + 1)
            y_pos = base - (y + 1) * available_height // (rows + 1)
            segments.append(Segment(x_pos, y_pos, x_pos + config.line_length, y_pos, config.solution_line_width))
    return segments


def _moves_legend(b: _Bands, locale: Optional[str], tr: Translate) -> List[TextLine]:
    """Notation legend: face moves and rotations in each direction."""
    table_width = b.competitor_info_left - b.left - 2 * FMC_MARGIN
    cell_height = LEGEND_HEIGHT / LEGEND_ROWS
    first_width = table_width - (LEGEND_COLUMNS - 1) * LEGEND_CELL_WIDTH

    move_types = (tr("fmc.faceMoves", locale, None), tr("fmc.rotations", locale, None))
    directions = (
        tr("fmc.clockwise", locale, None),
        tr("fmc.counterClockwise", locale, None),
        tr("fmc.double", locale, None),
    )

    def cells(kind: int, modifier: str) -> List[str]:
        if kind == 0:
            return [face + modifier for face in FACES]
        return [f"[{face.lower()}{modifier}]" for face in FACES]

    size = LEGEND_MAX_FONT_SIZE
    for text in move_types:
        size = min(size, fit_font_size(text, SANS_BOLD, first_width, cell_height, size, allow_line_breaks=False).font_size)
    for text in directions:
        size = min(size, fit_font_size(text, SANS, first_width, cell_height, size, allow_line_breaks=False).font_size)

    max_first = max(SANS.width(text, size) for text in move_types + directions)
    max_last = max(
        SANS.width(cells(kind, modifier)[-1], LEGEND_MAX_FONT_SIZE)
        for kind in range(len(move_types))
        for modifier in DIRECTION_MODIFIERS
    )

    x0 = b.left + FMC_MARGIN + (LEGEND_CELL_WIDTH - max_last) / 2 - (first_width - max_first) / 2
    table_top = b.scramble_border_top + LEGEND_HEIGHT + FMC_MARGIN

    def baseline(row: int, font_size: float) -> float:
        return table_top - row * cell_height - cell_height / 2 - font_size * 0.3

    lines: List[TextLine] = []
    row = 0
    first_right = x0 + first_width - LEGEND_CELL_PADDING
    for kind, move_type in enumerate(move_types):
        lines.append(TextLine(first_right, baseline(row, size), move_type, size, ALIGN_RIGHT, SANS_BOLD.name))
        row += 1
        for direction, modifier in zip(directions, DIRECTION_MODIFIERS):
            lines.append(TextLine(first_right, baseline(row, size), direction, size, ALIGN_RIGHT))
            for k, move in enumerate(cells(kind, modifier)):
                center = x0 + first_width + k * LEGEND_CELL_WIDTH + LEGEND_CELL_WIDTH / 2
                lines.append(TextLine(center, baseline(row, LEGEND_MAX_FONT_SIZE), move, LEGEND_MAX_FONT_SIZE, ALIGN_CENTER))
            row += 1
    return lines


def _scramble_count_line(request: ScrambleRequest, index: int, locale: Optional[str], tr: Translate) -> Optional[str]:
    if len(request.scrambles) <= 1 and request.total_attempt <= 1:
        return None
    if request.total_attempt > 1:
        # Round split across the schedule: number by attempt
        index = max(request.attempt - 1, index)
        count = request.total_attempt
    else:
        count = len(request.scrambles)
    return tr("fmc.scrambleXofY", locale, {"scrambleIndex": index + 1, "scrambleCount": count})


def fmc_solution_sheet(
    global_title: Optional[str],
    request: Optional[ScrambleRequest] = None,
    index: int = -1,
    locale: Optional[str] = DEFAULT_LOCALE,
    config: Optional[FmcConfig] = None,
    tr: Translate = translate,
) -> FmcSheetLayout:
    """
    Lay out one fewest-moves solution sheet.

    Args:
        global_title: Competition name printed on scramble sheets
        request: FMC request; None for the generic sheet
        index: Scramble index within ``request``; -1 for the generic sheet
        locale: Language tag for sheet text
        config: Sheet constants
        tr: Translation lookup

    Returns:
        Drawing primitives for the page
    """
    config = config or FmcConfig()
    with_scramble = request is not None and index >= 0
    b = _bands(config.page_width, config.page_height, with_scramble)

    segments = _borders(b, with_scramble, config.border_width)
    segments += solution_lines(b, with_scramble, config)
    text_lines: List[TextLine] = []
    blocks: List[TextBlock] = []
    images: List[ImagePlacement] = []

    if with_scramble:
        scramble = request.scrambles[index]
        scramble_text = f"{tr('fmc.scramble', locale, None)}: {scramble}"
        available = b.right - b.left - 2 * TEXT_MARGIN
        size = 20
        while True:
            size -= 1
            if size <= 1 or SANS.width(scramble_text, size) <= available:
                break
        y = 3 + b.solution_border_top + (b.scramble_border_top - b.solution_border_top - size) // 2
        text_lines.append(TextLine(b.left + TEXT_MARGIN, y, scramble_text, size))

        area_width = b.right - b.rules_right
        area_height = b.grade_bottom - b.scramble_border_top
        dim = request.puzzle.preferred_image_size(area_width - 2, area_height - 2)
        if not dim.is_empty:
            images.append(ImagePlacement(
                x=b.rules_right + (area_width - dim.width) // 2,
                y=b.scramble_border_top + (area_height - dim.height) // 2,
                slot=render_slot(request, scramble, dim),
            ))

    info_rect = Rect(b.competitor_info_left + TEXT_MARGIN, b.competitor_info_bottom, b.right - TEXT_MARGIN, b.top)
    grade_rect = Rect(b.competitor_info_left + TEXT_MARGIN, b.grade_bottom, b.right - TEXT_MARGIN, b.competitor_info_bottom)
    note_rect = Rect(b.competitor_info_left + TEXT_MARGIN, b.scramble_border_top, b.right - TEXT_MARGIN, b.grade_bottom)

    items: List[Tuple[str, str]] = []
    if with_scramble:
        items.append((global_title or "", ALIGN_CENTER))
        items.append((request.title, ALIGN_CENTER))
        count_line = _scramble_count_line(request, index, locale, tr)
        if count_line:
            items.append((count_line, ALIGN_CENTER))
    else:
        items.append((tr("fmc.competition", locale, None) + LONG_FILL, ALIGN_LEFT))
        items.append((tr("fmc.round", locale, None) + SHORT_FILL, ALIGN_LEFT))
        items.append((tr("fmc.attempt", locale, None) + SHORT_FILL, ALIGN_LEFT))

    # Scramble sheets leave a blank slot around each field for writing
    spacer = [("", ALIGN_LEFT)] if with_scramble else []
    items += spacer
    items.append((tr("fmc.competitor", locale, None) + LONG_FILL, ALIGN_LEFT))
    items += spacer
    items.append((WCA_ID_LINE, ALIGN_LEFT))
    items += spacer
    items.append((tr("fmc.registrantId", locale, None) + SHORT_FILL, ALIGN_LEFT))
    items += spacer
    blocks += populate_rect(info_rect, items, 15)

    graded = (
        tr("fmc.graded", locale, None) + LONG_FILL + " "
        + tr("fmc.result", locale, None) + SHORT_FILL
    )
    blocks += populate_rect(grade_rect, [(tr("fmc.warning", locale, None), ALIGN_CENTER), (graded, ALIGN_CENTER)], 11)

    if not with_scramble:
        note = tr("fmc.scrambleOnSeparateSheet", locale, None)
        blocks += populate_rect(note_rect, [("", ALIGN_CENTER), (note, ALIGN_CENTER)], 11)
        text_lines += _moves_legend(b, locale, tr)

    title_rect = Rect(b.left, b.top - TITLE_OFFSET, b.competitor_info_left, b.top - TITLE_OFFSET + TITLE_FONT_SIZE)
    size, paragraphs = shrink_to_fit(tr("fmc.event", locale, None), SANS, title_rect.width, title_rect.height, TITLE_FONT_SIZE)
    blocks.append(TextBlock(rect=title_rect, paragraphs=_freeze(paragraphs), font_size=size, align=ALIGN_CENTER))

    rules = [
        tr("fmc.rule1", locale, None),
        tr("fmc.rule2", locale, None),
        tr("fmc.rule3", locale, None),
        tr("fmc.rule4", locale, {"maxMoves": config.max_moves}),
        tr("fmc.rule5", locale, None),
        tr("fmc.rule6", locale, None),
    ]
    rules_top = b.competitor_info_bottom + (65 if with_scramble else 153)
    rules_rect = Rect(
        b.left + FMC_MARGIN,
        b.scramble_border_top + LEGEND_HEIGHT + FMC_MARGIN,
        b.competitor_info_left - FMC_MARGIN,
        rules_top + FMC_MARGIN,
    )
    rules_text = "\n".join(f"• {rule}" for rule in rules)
    size, paragraphs = shrink_to_fit(rules_text, SANS, rules_rect.width, rules_rect.height, RULES_FONT_SIZE, RULES_LEADING)
    blocks.append(TextBlock(rect=rules_rect, paragraphs=_freeze(paragraphs), font_size=size, align=ALIGN_JUSTIFY, leading=RULES_LEADING))

    return FmcSheetLayout(
        page_width=config.page_width,
        page_height=config.page_height,
        segments=tuple(segments),
        text_lines=tuple(text_lines),
        text_blocks=tuple(blocks),
        images=tuple(images),
    )


def cutout_title(global_title: Optional[str], request: ScrambleRequest, index: int) -> str:
    title = f"{global_title} - {request.title}" if global_title else request.title
    if len(request.scrambles) > 1:
        title += f" - Scramble {index + 1} of {len(request.scrambles)}"
    return title


def fmc_cutout_sheet(
    global_title: Optional[str],
    request: ScrambleRequest,
    index: int,
    config: Optional[FmcConfig] = None,
) -> FmcSheetLayout:
    """
    Page of identical strips (title, scramble, image) separated by dashed lines.
    """
    config = config or FmcConfig()
    bottom = 10
    left = 20
    right = int(config.page_width - left)
    top = int(config.page_height - bottom)
    height = top - bottom
    width = right - left

    strips = config.cutout_strips
    strip_height = height // strips
    dim = request.puzzle.preferred_image_size(int(width * 0.45), strip_height - 2 * CUTOUT_IMAGE_PADDING)
    scramble = request.scrambles[index]
    slot = render_slot(request, scramble, dim) if not dim.is_empty else None

    items = [
        ("", ALIGN_LEFT),
        (cutout_title(global_title, request, index), ALIGN_LEFT),
        (scramble, ALIGN_LEFT),
        ("", ALIGN_LEFT),
    ]

    blocks: List[TextBlock] = []
    images: List[ImagePlacement] = []
    segments: List[Segment] = []
    for i in range(strips):
        strip_top = top - i * strip_height
        strip_bottom = top - (i + 1) * strip_height
        rect = Rect(left, strip_bottom, right - dim.width - CUTOUT_IMAGE_SPACING, strip_top)
        blocks += populate_rect(rect, items, CUTOUT_FONT_SIZE)
        if slot is not None:
            images.append(ImagePlacement(x=right - dim.width, y=strip_bottom + (strip_height - dim.height) / 2, slot=slot))
        segments.append(Segment(left, strip_top, right, strip_top, 1.0, CUTOUT_DASH))
    segments.append(Segment(left, top - strips * strip_height, right, top - strips * strip_height, 1.0, CUTOUT_DASH))

    return FmcSheetLayout(
        page_width=config.page_width,
        page_height=config.page_height,
        segments=tuple(segments),
        text_blocks=tuple(blocks),
        images=tuple(images),
    )

