"""
Module: layout.config

Purpose:
    Page geometry and typography settings for scramble sheets.
    All measurements are PDF points (1/72 inch).

Key Classes:
    - SheetConfig: Immutable scramble-table page configuration
    - FmcConfig: Immutable fewest-moves sheet configuration

Dependencies:
    - dataclasses (std)
    - reportlab.lib.pagesizes: LETTER page size

Used By:
    - layout.composer: Table geometry
    - layout.fmc: Solution sheet geometry
    - output.renderer / output.assembler: Page setup and stamping
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.pagesizes import LETTER

PAGE_WIDTH_PT, PAGE_HEIGHT_PT = LETTER

NON_BREAKING_SPACE = "\u00a0"


@dataclass(frozen=True)
class SheetConfig:
    """
    Scramble-table page configuration (immutable).

    Attributes:
        page_width / page_height: US Letter by default
        margin_*: Document margins, the table is laid out between them
        art_box_inset_x / art_box_inset_y: Header stamping box inset
        table_side_allowance: Width kept free beside the table
        max_scrambles_per_page: Rows a page is sized for
        scramble_image_padding: Padding around each scramble image
        max_scramble_font_size: Ceiling for the scramble text search
        min_one_line_font_size: One-line layout is used only at or above this size
        min_lines_to_alternate_highlighting: Line count that turns on highlighting
        highlight_color: RGB 0-255 of highlighted lines
        scramble_padding_top / scramble_padding_bottom / scramble_padding_horizontal:
            Scramble cell padding
        text_padding_horizontal: Reserved on each side by the line splitter
        row_leading: Leading multiplier used when drawing scramble lines
        extra_header_height: Height of the "Extra scrambles" header

    Example:
        >>> config = SheetConfig()
        >>> config.table_width
        512.0
    """

    page_width: float = PAGE_WIDTH_PT
    page_height: float = PAGE_HEIGHT_PT

    margin_left: float = 0
    margin_right: float = 0
    margin_top: float = 75
    margin_bottom: float = 75

    art_box_inset_x: float = 36
    art_box_inset_y: float = 54

    table_side_allowance: float = 100
    max_scrambles_per_page: int = 7
    scramble_image_padding: int = 2
    max_scramble_font_size: float = 20
    min_one_line_font_size: float = 12
    min_lines_to_alternate_highlighting: int = 4
    highlight_color: Tuple[int, int, int] = (230, 230, 230)
    scramble_padding_top: int = 3
    scramble_padding_bottom: int = 6
    scramble_padding_horizontal: int = 1
    text_padding_horizontal: int = 1
    row_leading: float = 1.1
    extra_header_height: float = 20

    label_font_size: float = 12
    header_font_size: float = 12

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0 or self.page_height <= 0:
            raise ValueError(f"page size must be positive: {self.page_width}x{self.page_height}")
        if self.table_width <= 0:
            raise ValueError(f"table width must be positive: {self.table_width}")
        if self.available_height <= 0:
            raise ValueError(f"available height must be positive: {self.available_height}")
        if self.max_scrambles_per_page < 1:
            raise ValueError(f"max_scrambles_per_page must be >= 1: {self.max_scrambles_per_page}")
        if not (1 <= self.min_one_line_font_size <= self.max_scramble_font_size):
            raise ValueError(
                f"min_one_line_font_size must be within [1, {self.max_scramble_font_size}]: "
                f"{self.min_one_line_font_size}"
            )

    @property
    def side_margins(self) -> float:
        return self.table_side_allowance + self.margin_left + self.margin_right

    @property
    def table_width(self) -> float:
        return self.page_width - self.side_margins

    @property
    def table_left(self) -> float:
        """Tables are centred between the document margins."""
        content = self.page_width - self.margin_left - self.margin_right
        return self.margin_left + (content - self.table_width) / 2

    @property
    def available_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def highlight_rgb(self) -> Tuple[float, float, float]:
        r, g, b = self.highlight_color
        return (r / 255, g / 255, b / 255)


@dataclass(frozen=True)
class FmcConfig:
    """
    Fewest-moves sheet configuration (immutable).

    Attributes:
        max_moves: Solution lines drawn (and the rule text limit)
        lines_per_row: Solution lines per row
        line_length: Length of one solution line
        border_width / solution_line_width: Stroke widths
        cutout_strips: Scramble strips per cutout page
    """

    page_width: float = PAGE_WIDTH_PT
    page_height: float = PAGE_HEIGHT_PT
    max_moves: int = 80
    lines_per_row: int = 10
    line_length: int = 25
    border_width: float = 0.5
    solution_line_width: float = 0.2
    cutout_strips: int = 8

    def __post_init__(self) -> None:
        if self.max_moves < 1:
            raise ValueError(f"max_moves must be positive: {self.max_moves}")
        if self.lines_per_row < 1:
            raise ValueError(f"lines_per_row must be positive: {self.lines_per_row}")
        if self.cutout_strips < 1:
            raise ValueError(f"cutout_strips must be positive: {self.cutout_strips}")

    @property
    def solution_rows(self) -> int:
        return -(-self.max_moves // self.lines_per_row)
