"""
Module: output.renderer

Purpose:
    Draw layout plans to PDF with ReportLab.
    Scramble tables become bordered three-column rows; fewest-moves
    layouts are drawn primitive by primitive. Vector scramble images are
    collected while drawing and placed afterwards by output.images.

Key Classes:
    - DocumentInfo: Title / producer / creation date metadata

Key Functions:
    - render_scramble_document(): ComposedSheet pages -> PDF bytes
    - render_fmc_document(): FmcSheetLayouts -> PDF bytes

Dependencies:
    - reportlab: PDF drawing
    - output.images: SVG conversion, image placement, metadata

Used By:
    - output.assembler: Per-request documents
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from PIL import Image
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from scramble_sheets.errors import ImageRenderError
from scramble_sheets.layout.composer import PLACEHOLDER_PREFIX
from scramble_sheets.layout.config import SheetConfig
from scramble_sheets.layout.fmc import (
    ALIGN_CENTER,
    ALIGN_JUSTIFY,
    ALIGN_RIGHT,
    FmcSheetLayout,
    TextBlock,
    TextLine,
)
from scramble_sheets.layout.fonts import MONO, SANS
from scramble_sheets.layout.models import ComposedSheet, ImageSlot, PagePlan, RowPlacement

from .images import PendingImage, SvgConverter, finalize_pdf, pil_to_reader

logger = logging.getLogger(__name__)

CELL_BORDER_WIDTH = 0.5
CELL_PADDING = 2
IMAGE_BACKGROUND_GRAY = 192 / 255
PLACEHOLDER_FONT_SIZE = 8
ASCENT_RATIO = 0.8
MIDDLE_RATIO = 0.35


@dataclass(frozen=True)
class DocumentInfo:
    """PDF metadata written into every generated document."""

    title: Optional[str]
    producer: str
    creation_date: Optional[datetime] = None

    def as_metadata(self) -> dict:
        date = (self.creation_date or datetime.now()).strftime("D:%Y%m%d%H%M%S")
        return {
            "title": self.title or "",
            "producer": self.producer,
            "creator": self.producer,
            "creationDate": date,
            "modDate": date,
        }


class _PdfWriter:
    """ReportLab canvas plus the vector images waiting for placement."""

    def __init__(self, page_width: float, page_height: float):
        self.page_width = page_width
        self.page_height = page_height
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=(page_width, page_height))
        self.page_index = 0
        self.pending: List[PendingImage] = []
        self.converter = SvgConverter()

    def next_page(self) -> None:
        self.canvas.showPage()
        self.page_index += 1

    def finish(self, info: DocumentInfo, art_box_inset: Optional[tuple[float, float]] = None) -> bytes:
        self.canvas.save()
        return finalize_pdf(self.buffer.getvalue(), self.pending, info.as_metadata(), art_box_inset)

    def draw_image(self, slot: ImageSlot, x: float, y: float) -> None:
        """Draw ``slot`` with its lower-left corner at (x, y)."""
        width, height = slot.size.width, slot.size.height
        error = slot.error
        if error is None and isinstance(slot.source, str):
            try:
                pdf = self.converter.convert(slot.source)
            except ImageRenderError as e:
                logger.warning(f"Scramble image conversion failed: {e}")
                error = f"{PLACEHOLDER_PREFIX}{e}"
            else:
                self.pending.append(PendingImage(self.page_index, x, y, width, height, pdf))
        elif error is None and isinstance(slot.source, Image.Image):
            self.canvas.drawImage(pil_to_reader(slot.source), x, y, width=width, height=height, preserveAspectRatio=True)

        if error is not None:
            self._draw_placeholder(error, x, y, width, height)

    def _draw_placeholder(self, text: str, x: float, y: float, width: float, height: float) -> None:
        c = self.canvas
        c.saveState()
        c.setFillColorRGB(0, 0, 0)
        c.setFont(SANS.name, PLACEHOLDER_FONT_SIZE)
        lines = simpleSplit(text, SANS.name, PLACEHOLDER_FONT_SIZE, max(width, 1))
        baseline = y + height - PLACEHOLDER_FONT_SIZE
        for line in lines:
            if baseline < y:
                break
            c.drawString(x, baseline, line)
            baseline -= PLACEHOLDER_FONT_SIZE * 1.2
        c.restoreState()


# ----------------------------------------------------------------------
# Scramble tables
# ----------------------------------------------------------------------


def render_scramble_document(
    sheet: ComposedSheet,
    pages: Sequence[PagePlan],
    config: SheetConfig,
    info: DocumentInfo,
) -> bytes:
    """
    Render the paginated tables of one request.

    Args:
        sheet: Composed tables
        pages: Output of layout.paginator.paginate
        config: Page geometry
        info: Document metadata

    Returns:
        PDF bytes with the art box set on every page
    """
    writer = _PdfWriter(config.page_width, config.page_height)
    for n, page in enumerate(pages):
        if n:
            writer.next_page()
        for placement in page.placements:
            if placement.row is None:
                _draw_header(writer, placement, config)
            else:
                _draw_row(writer, placement, config)

    pdf = writer.finish(info, (config.art_box_inset_x, config.art_box_inset_y))
    logger.info(f"Rendered {len(pages)} pages for {sheet.title!r}")
    return pdf


def _cell(c: canvas.Canvas, x: float, y: float, width: float, height: float, fill: Optional[float] = None) -> None:
    c.saveState()
    c.setLineWidth(CELL_BORDER_WIDTH)
    if fill is not None:
        c.setFillGray(fill)
    c.rect(x, y, width, height, stroke=1, fill=1 if fill is not None else 0)
    c.restoreState()


def _draw_header(writer: _PdfWriter, placement: RowPlacement, config: SheetConfig) -> None:
    c = writer.canvas
    x = config.table_left
    top = config.page_height - placement.top
    bottom = top - placement.height
    _cell(c, x, bottom, placement.table.width, placement.height)
    c.setFont(SANS.name, config.header_font_size)
    middle = (top + bottom + 3) / 2
    c.drawString(x + CELL_PADDING, middle - config.header_font_size * MIDDLE_RATIO, placement.header or "")


def _draw_row(writer: _PdfWriter, placement: RowPlacement, config: SheetConfig) -> None:
    c = writer.canvas
    table = placement.table
    row = placement.row
    top = config.page_height - placement.top
    bottom = top - placement.height
    height = placement.height

    # Index label
    x = config.table_left
    _cell(c, x, bottom, table.label_width, height)
    c.setFont(SANS.name, config.label_font_size)
    c.drawString(x + CELL_PADDING, (top + bottom) / 2 - config.label_font_size * MIDDLE_RATIO, row.label)

    # Scramble text, shifted up: top padding is negative, bottom positive
    x += table.label_width
    _cell(c, x, bottom, table.text_width, height)
    size = row.text.font_size
    line_height = size * config.row_leading
    area_middle = ((top + config.scramble_padding_top) + (bottom + config.scramble_padding_bottom)) / 2
    block_top = area_middle + row.text.line_count * line_height / 2
    text_x = x + config.scramble_padding_horizontal
    for i, line in enumerate(row.text.lines):
        baseline = block_top - i * line_height - size * ASCENT_RATIO
        if line.highlighted:
            c.saveState()
            c.setFillColorRGB(*config.highlight_rgb)
            c.rect(text_x, baseline - size * 0.25, MONO.width(line.content, size), line_height, stroke=0, fill=1)
            c.restoreState()
        c.setFont(MONO.name, size)
        c.drawString(text_x, baseline, line.content)

    # Image
    x += table.text_width
    slot = row.image
    if slot is None:
        _cell(c, x, bottom, table.image_width, height)
        return
    _cell(c, x, bottom, table.image_width, height, fill=IMAGE_BACKGROUND_GRAY)
    image_y = bottom + (height - slot.size.height) / 2
    writer.draw_image(slot, x + slot.padding, image_y)


# ----------------------------------------------------------------------
# Fewest moves sheets
# ----------------------------------------------------------------------


def render_fmc_document(
    layouts: Sequence[FmcSheetLayout],
    info: DocumentInfo,
    art_box_inset: Optional[tuple[float, float]] = None,
) -> bytes:
    """Render one page per fewest-moves layout."""
    if not layouts:
        raise ValueError("render_fmc_document needs at least one page")
    writer = _PdfWriter(layouts[0].page_width, layouts[0].page_height)
    for n, layout in enumerate(layouts):
        if n:
            writer.next_page()
        _draw_fmc_page(writer, layout)
    return writer.finish(info, art_box_inset)


def _draw_fmc_page(writer: _PdfWriter, layout: FmcSheetLayout) -> None:
    c = writer.canvas
    for segment in layout.segments:
        c.setLineWidth(segment.width)
        c.setDash(list(segment.dash) if segment.dash else [])
        c.line(segment.x1, segment.y1, segment.x2, segment.y2)
    c.setDash([])

    for line in layout.text_lines:
        _draw_text_line(c, line)
    for block in layout.text_blocks:
        _draw_text_block(c, block)
    for image in layout.images:
        writer.draw_image(image.slot, image.x, image.y)


def _draw_text_line(c: canvas.Canvas, line: TextLine) -> None:
    c.setFont(line.font, line.font_size)
    if line.align == ALIGN_CENTER:
        c.drawCentredString(line.x, line.y, line.text)
    elif line.align == ALIGN_RIGHT:
        c.drawRightString(line.x, line.y, line.text)
    else:
        c.drawString(line.x, line.y, line.text)


def _draw_text_block(c: canvas.Canvas, block: TextBlock) -> None:
    rect = block.rect
    size = block.font_size
    c.setFont(block.font, size)
    n = 0
    for paragraph in block.paragraphs:
        for i, text in enumerate(paragraph):
            n += 1
            baseline = rect.top - n * size * block.leading
            last_in_paragraph = i == len(paragraph) - 1
            if block.align == ALIGN_CENTER:
                c.drawCentredString(rect.center_x, baseline, text)
            elif block.align == ALIGN_RIGHT:
                c.drawRightString(rect.right, baseline, text)
            elif block.align == ALIGN_JUSTIFY and not last_in_paragraph and " " in text.strip():
                _draw_justified(c, block, text, baseline)
            else:
                c.drawString(rect.left, baseline, text)


def _draw_justified(c: canvas.Canvas, block: TextBlock, text: str, baseline: float) -> None:
    text = text.strip()
    gap = block.rect.width - c.stringWidth(text, block.font, block.font_size)
    obj = c.beginText(block.rect.left, baseline)
    obj.setFont(block.font, block.font_size)
    obj.setWordSpace(max(gap, 0) / text.count(" "))
    obj.textOut(text)
    c.drawText(obj)
