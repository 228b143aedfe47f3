"""
Module: layout.models

Purpose:
    Data models for scramble sheet layout.
    Immutable dataclasses for fitted text, table rows, and page plans.

Key Classes:
    - LineFragment: One pre-broken line of scramble text
    - FittedText: Font size plus the fragments fitted at that size
    - ImageSlot: Scramble image (or error placeholder) for one row
    - SheetRow: Label, text and image of one scramble
    - SheetTable: Rows sharing one font size and highlighting decision
    - RowPlacement: Row (or header) positioned on a page
    - PagePlan: Complete page layout

Used By:
    - layout.text_fit: Produces FittedText
    - layout.composer: Produces SheetTable
    - layout.paginator: Produces PagePlan
    - output.renderer: Draws everything
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from scramble_sheets.core.models.geometry import ImageSize
from scramble_sheets.puzzles.base import ScrambleImageSource


@dataclass(frozen=True)
class LineFragment:
    """
    A line of text ending in a forced break.

    ``content`` already carries the non-breaking space padding, so every
    fragment of a paragraph has the same rendered width.
    """

    content: str
    highlighted: bool = False


@dataclass(frozen=True)
class FittedText:
    """
    Result of fitting text into a rectangle.

    Attributes:
        font_size: Chosen size, between 1.0 and the caller's ceiling
        lines: Fragments produced at ``font_size``
    """

    font_size: float
    lines: tuple[LineFragment, ...]

    def __post_init__(self) -> None:
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive: {self.font_size}")

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def text(self) -> str:
        return "\n".join(line.content for line in self.lines)

    def height(self, leading: float) -> float:
        return self.line_count * self.font_size * leading


@dataclass(frozen=True)
class ImageSlot:
    """
    Image cell of a scramble row.

    Exactly one of ``source`` and ``error`` is set; ``error`` holds the
    placeholder text drawn when rendering failed.
    """

    size: ImageSize
    padding: int
    source: Optional[ScrambleImageSource] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class SheetRow:
    """
    One scramble row: index label, fitted text, image cell.

    ``image`` is None when the puzzle has no image (empty size) or during
    the dry run.
    """

    label: str
    scramble: str
    text: FittedText
    height: float
    image: Optional[ImageSlot] = None


@dataclass(frozen=True)
class SheetTable:
    """
    A three-column scramble table.

    Attributes:
        rows: Rows in print order
        label_width / text_width / image_width: Column widths
        font_size: Scramble font size shared by every row
        one_line: Whether scrambles were laid out on a single line
        highlighting: Alternating line highlighting applied to every row
        prefix: Label prefix ("" for primary, "E" for extra scrambles)
    """

    rows: tuple[SheetRow, ...]
    label_width: float
    text_width: float
    image_width: float
    font_size: float
    one_line: bool
    highlighting: bool
    prefix: str = ""

    @property
    def width(self) -> float:
        return self.label_width + self.text_width + self.image_width

    @property
    def height(self) -> float:
        return sum(row.height for row in self.rows)


@dataclass(frozen=True)
class RowPlacement:
    """
    A row or header positioned on a page.

    Attributes:
        top: Y offset from page top (points)
        height: Vertical space taken
        row: The table row, None for a header
        table: The table the row belongs to (column widths)
        header: Header text when ``row`` is None
    """

    top: float
    height: float
    table: SheetTable
    row: Optional[SheetRow] = None
    header: Optional[str] = None

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single page.

    Example:
        >>> page = PagePlan(index=0, placements=(p1, p2), height_used=500)
        >>> page.placement_count
        2
    """

    index: int
    placements: tuple[RowPlacement, ...]
    height_used: float

    @property
    def placement_count(self) -> int:
        return len(self.placements)

    @property
    def is_empty(self) -> bool:
        return not self.placements


@dataclass(frozen=True)
class ComposedSheet:
    """
    Tables for one request: primary scrambles and, if any, the extras.

    Both tables share the image size and the highlighting decision.
    """

    title: str
    primary: SheetTable
    image_size: ImageSize
    extra: Optional[SheetTable] = None

    @property
    def highlighting(self) -> bool:
        return self.primary.highlighting
