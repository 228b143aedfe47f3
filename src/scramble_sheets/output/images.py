"""
Module: output.images

Purpose:
    Scramble image conversion and placement.

    Puzzles return SVG text (or a PIL image). SVG is converted to a
    one-page vector PDF with PyMuPDF and stamped onto the finished page,
    so images stay vector graphics at any zoom. Raster images are drawn
    by reportlab directly.

Key Classes:
    - PendingImage: Vector image waiting to be placed on a page

Key Functions:
    - svg_to_pdf_bytes(): SVG text -> single page PDF
    - pil_to_reader(): PIL image -> reportlab ImageReader
    - finalize_pdf(): Place pending images and set page boxes

Dependencies:
    - fitz (PyMuPDF): SVG conversion, page composition
    - reportlab.lib.utils.ImageReader: raster drawing
    - PIL: raster images
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import fitz
from PIL import Image
from reportlab.lib.utils import ImageReader

from scramble_sheets.errors import ImageRenderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingImage:
    """
    Vector image to place after reportlab finished the page.

    Coordinates are reportlab's (origin bottom-left, points).
    """

    page_index: int
    x: float
    y: float
    width: float
    height: float
    pdf: bytes


def svg_to_pdf_bytes(svg: str) -> bytes:
    """
    Convert SVG text to a one-page PDF.

    Raises:
        ImageRenderError: If PyMuPDF cannot read the SVG
    """
    try:
        with fitz.open(stream=svg.encode("utf-8"), filetype="svg") as doc:
            return doc.convert_to_pdf()
    except (RuntimeError, ValueError) as e:
        raise ImageRenderError(f"Invalid SVG: {e}") from e


class SvgConverter:
    """Memoizing SVG -> PDF conversion; sheets repeat the same image."""

    def __init__(self) -> None:
        self._cache: Dict[str, bytes] = {}

    def convert(self, svg: str) -> bytes:
        if svg not in self._cache:
            self._cache[svg] = svg_to_pdf_bytes(svg)
        else:
            logger.debug("SVG conversion cache hit")
        return self._cache[svg]


def pil_to_reader(img: Image.Image) -> ImageReader:
    """Convert PIL image to ReportLab ImageReader."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def finalize_pdf(
    pdf_bytes: bytes,
    images: Sequence[PendingImage],
    metadata: Optional[Dict[str, str]] = None,
    art_box_inset: Optional[tuple[float, float]] = None,
) -> bytes:
    """
    Place pending vector images, write metadata and set the art box.

    Args:
        pdf_bytes: Document written by reportlab
        images: Vector images to place
        metadata: PyMuPDF metadata dict (title, producer, creationDate...)
        art_box_inset: (horizontal, vertical) inset of the art box

    Returns:
        Finished PDF bytes
    """
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        for image in images:
            page = doc[image.page_index]
            page_height = page.rect.height
            rect = fitz.Rect(
                image.x,
                page_height - image.y - image.height,
                image.x + image.width,
                page_height - image.y,
            )
            with fitz.open(stream=image.pdf, filetype="pdf") as src:
                page.show_pdf_page(rect, src, 0, keep_proportion=False)

        if art_box_inset is not None:
            dx, dy = art_box_inset
            for page in doc:
                r = page.mediabox
                page.set_artbox(fitz.Rect(r.x0 + dx, r.y0 + dy, r.x1 - dx, r.y1 - dy))

        if metadata:
            doc.set_metadata(metadata)

        return doc.tobytes(garbage=3, deflate=True)
