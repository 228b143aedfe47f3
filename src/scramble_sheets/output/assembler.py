"""
Module: output.assembler

Purpose:
    Build finished PDF documents from requests.

    - One document per request: scramble tables stamped with date, titles,
      page numbers and the generator footer, or fewest-moves solution
      sheets (already self-labelled, never stamped).
    - Multi-blind requests become one sheet per attempt, concatenated.
    - The all-scrambles bundle repeats each request ``copies`` times and
      carries a puzzle -> title outline.

Key Functions:
    - build_request_pdf(): One request -> PDF bytes
    - build_cutout_pdf(): Fewest-moves cutout strips
    - build_generic_solution_pdf(): Blank fewest-moves solution sheet
    - stamp_headers(): Header/footer stamping of finished pages
    - merge_pdfs() / encrypt_pdf(): Page-level PDF operations
    - requests_to_pdf(): All-scrambles bundle with outline

Dependencies:
    - fitz (PyMuPDF): stamping, merging, outline, encryption
    - layout: composition and fewest-moves geometry
    - output.renderer: ReportLab drawing
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import fitz

from scramble_sheets import generator_name
from scramble_sheets.core.models.request import ScrambleRequest
from scramble_sheets.i18n import DEFAULT_LOCALE
from scramble_sheets.layout.composer import compose_request
from scramble_sheets.layout.config import FmcConfig, SheetConfig
from scramble_sheets.layout.fmc import fmc_cutout_sheet, fmc_solution_sheet
from scramble_sheets.layout.paginator import paginate

from .renderer import DocumentInfo, render_fmc_document, render_scramble_document

logger = logging.getLogger(__name__)

HEADER_FONT = "helv"
HEADER_FONT_SIZE = 12
GLOBAL_TITLE_OFFSET = 60
TITLE_OFFSET = 45
FOOTER_OFFSET = 40
DATE_FORMAT = "%Y-%m-%d"
SPLIT_ATTEMPT_EVENT = "333bf"


def _info(global_title: Optional[str], creation_date: Optional[datetime]) -> DocumentInfo:
    return DocumentInfo(title=global_title, producer=generator_name(), creation_date=creation_date)


def attempt_requests(request: ScrambleRequest) -> List[ScrambleRequest]:
    """
    Split a multi-blind request into one request per attempt.

    Each multi-blind "scramble" is a newline separated list of cube
    scrambles; every attempt gets its own titled sheet.
    """
    attempts = []
    for nth, scramble in enumerate(request.scrambles, start=1):
        number = request.attempt if request.attempt > 1 else nth
        attempts.append(request.with_metadata(
            title=f"{request.title} Attempt {number}",
            scrambles=tuple(scramble.split("\n")),
            extra_scrambles=(),
            fmc=False,
            event=SPLIT_ATTEMPT_EVENT,
        ))
    return attempts


def build_request_pdf(
    request: ScrambleRequest,
    global_title: Optional[str],
    creation_date: datetime,
    *,
    locale: str = DEFAULT_LOCALE,
    password: Optional[str] = None,
    config: Optional[SheetConfig] = None,
    fmc_config: Optional[FmcConfig] = None,
) -> bytes:
    """
    Build the document for one request.

    ``request.copies`` is ignored here; copies only apply to the
    all-scrambles bundle.

    Args:
        request: Parsed request
        global_title: Competition name
        creation_date: Date stamped on the pages
        locale: Language of fewest-moves sheets
        password: Encrypt the result (print-only permission) when set
        config / fmc_config: Geometry overrides

    Returns:
        PDF bytes
    """
    config = config or SheetConfig()

    if request.is_multi_blind:
        parts = [
            build_request_pdf(attempt, global_title, creation_date, locale=locale, config=config, fmc_config=fmc_config)
            for attempt in attempt_requests(request)
        ]
        logger.info(f"Built {len(parts)} attempt sheets for {request.title!r}")
        pdf = merge_pdfs(parts)
        return encrypt_pdf(pdf, password) if password else pdf

    info = _info(global_title, creation_date)
    inset = (config.art_box_inset_x, config.art_box_inset_y)

    if request.fmc:
        layouts = [
            fmc_solution_sheet(global_title, request, i, locale, fmc_config)
            for i in range(len(request.scrambles))
        ]
        pdf = render_fmc_document(layouts, info, inset)
        return encrypt_pdf(pdf, password) if password else pdf

    composed = compose_request(request, config)
    pages = paginate(composed, config)
    pdf = render_scramble_document(composed, pages, config, info)
    pdf = stamp_headers(pdf, global_title, request.title, creation_date, config, password=password)
    return pdf


def build_cutout_pdf(
    request: ScrambleRequest,
    global_title: Optional[str],
    creation_date: datetime,
    config: Optional[SheetConfig] = None,
    fmc_config: Optional[FmcConfig] = None,
) -> bytes:
    """One cutout page per scramble of a fewest-moves request."""
    config = config or SheetConfig()
    layouts = [fmc_cutout_sheet(global_title, request, i, fmc_config) for i in range(len(request.scrambles))]
    return render_fmc_document(layouts, _info(global_title, creation_date), (config.art_box_inset_x, config.art_box_inset_y))


def build_generic_solution_pdf(
    global_title: Optional[str],
    creation_date: datetime,
    locale: str = DEFAULT_LOCALE,
    config: Optional[SheetConfig] = None,
    fmc_config: Optional[FmcConfig] = None,
) -> bytes:
    """Solution sheet without a scramble, with blanks for round and attempt."""
    config = config or SheetConfig()
    layout = fmc_solution_sheet(global_title, None, -1, locale, fmc_config)
    return render_fmc_document([layout], _info(global_title, creation_date), (config.art_box_inset_x, config.art_box_inset_y))


def _insert_aligned(page: fitz.Page, text: str, x: float, y: float, align: str) -> None:
    """Insert ``text`` with baseline ``y`` (PDF coordinates, bottom-up)."""
    width = fitz.get_text_length(text, fontname=HEADER_FONT, fontsize=HEADER_FONT_SIZE)
    if align == "center":
        x -= width / 2
    elif align == "right":
        x -= width
    point = fitz.Point(x, page.rect.height - y)
    page.insert_text(point, text, fontname=HEADER_FONT, fontsize=HEADER_FONT_SIZE)


def stamp_headers(
    pdf_bytes: bytes,
    global_title: Optional[str],
    title: str,
    creation_date: datetime,
    config: Optional[SheetConfig] = None,
    password: Optional[str] = None,
) -> bytes:
    """
    Stamp every page with date, titles, "n/N" marker and footer.

    The date and page marker sit on the art box corners; titles are
    centred near the top edge and the footer near the bottom edge.
    """
    config = config or SheetConfig()
    date_text = creation_date.strftime(DATE_FORMAT)
    footer = f"Generated by {generator_name()}"

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        count = doc.page_count
        for n, page in enumerate(doc, start=1):
            width = page.rect.width
            height = page.rect.height
            art_left = config.art_box_inset_x
            art_right = width - config.art_box_inset_x
            art_top = height - config.art_box_inset_y

            _insert_aligned(page, date_text, art_left, art_top, "left")
            if global_title:
                _insert_aligned(page, global_title, width / 2, height - GLOBAL_TITLE_OFFSET, "center")
            _insert_aligned(page, title, width / 2, height - TITLE_OFFSET, "center")
            if count > 1:
                _insert_aligned(page, f"{n}/{count}", art_right, art_top, "right")
            _insert_aligned(page, footer, width / 2, FOOTER_OFFSET, "center")

        return _to_bytes(doc, password)


def _to_bytes(doc: fitz.Document, password: Optional[str]) -> bytes:
    if password:
        return doc.tobytes(
            garbage=3,
            deflate=True,
            encryption=fitz.PDF_ENCRYPT_AES_128,
            owner_pw=password,
            user_pw=password,
            permissions=fitz.PDF_PERM_PRINT,
        )
    return doc.tobytes(garbage=3, deflate=True)


def encrypt_pdf(pdf_bytes: bytes, password: str) -> bytes:
    """Encrypt with ``password`` as user and owner password, printing allowed."""
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return _to_bytes(doc, password)


def merge_pdfs(parts: Sequence[bytes]) -> bytes:
    """Concatenate documents page by page."""
    with fitz.open() as merged:
        for part in parts:
            with fitz.open(stream=part, filetype="pdf") as src:
                merged.insert_pdf(src)
        return merged.tobytes(garbage=3, deflate=True)


def requests_to_pdf(
    requests: Sequence[ScrambleRequest],
    global_title: Optional[str],
    creation_date: datetime,
    password: Optional[str] = None,
    config: Optional[SheetConfig] = None,
) -> bytes:
    """
    All-scrambles bundle.

    Each request's document is repeated ``copies`` times. The outline has
    one entry per puzzle (first page of its first request) with one child
    per request title.

    Raises:
        ValueError: If ``requests`` is empty
    """
    if not requests:
        raise ValueError("requests_to_pdf needs at least one request")

    groups: Dict[str, Tuple[str, int, List[Tuple[str, int]]]] = {}
    with fitz.open() as total:
        for request in requests:
            first_page = total.page_count + 1
            short_name = request.puzzle.short_name
            if short_name not in groups:
                groups[short_name] = (request.puzzle.long_name, first_page, [])
            groups[short_name][2].append((request.title, first_page))

            pdf = build_request_pdf(request, global_title, creation_date, config=config)
            with fitz.open(stream=pdf, filetype="pdf") as src:
                for _ in range(request.copies):
                    total.insert_pdf(src)

        toc = []
        for long_name, first_page, entries in groups.values():
            toc.append([1, long_name, first_page])
            toc.extend([2, title, page] for title, page in entries)
        total.set_toc(toc)
        total.set_metadata(_info(global_title, creation_date).as_metadata())

        logger.info(f"Bundled {len(requests)} requests into {total.page_count} pages")
        return _to_bytes(total, password)
