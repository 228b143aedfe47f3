"""
Module: layout.paginator

Purpose:
    Arrange the rows of a composed sheet onto pages.
    Rows are never split; a row that does not fit starts a new page.
    The "Extra scrambles" header always stays with the first extra row.

Key Functions:
    - paginate(): ComposedSheet -> page plans

Used By:
    - output.renderer: Draws one PagePlan per PDF page
"""

from __future__ import annotations

import logging
from typing import List

from .composer import EXTRA_HEADER
from .config import SheetConfig
from .models import ComposedSheet, PagePlan, RowPlacement

logger = logging.getLogger(__name__)


def paginate(sheet: ComposedSheet, config: SheetConfig) -> List[PagePlan]:
    """
    Place the primary rows, then the extra header and rows, top to bottom.

    Args:
        sheet: Composed tables of one request
        config: Page geometry

    Returns:
        Page plans, at least one
    """
    pages: List[PagePlan] = []
    current: List[RowPlacement] = []
    page_top = config.margin_top
    page_bottom = config.page_height - config.margin_bottom
    y = page_top

    def new_page() -> None:
        nonlocal current, y
        pages.append(PagePlan(index=len(pages), placements=tuple(current), height_used=y - page_top))
        current = []
        y = page_top

    def place(group: List[RowPlacement]) -> None:
        nonlocal y
        needed = sum(p.height for p in group)
        if y + needed > page_bottom:
            if current:
                new_page()
            else:
                logger.warning(f"Row of {sheet.title!r} overflows page {len(pages)}: {needed:.0f}pt needed")
        for placement in group:
            current.append(RowPlacement(
                top=y, height=placement.height, table=placement.table,
                row=placement.row, header=placement.header,
            ))
            y += placement.height

    for row in sheet.primary.rows:
        place([RowPlacement(top=0, height=row.height, table=sheet.primary, row=row)])

    if sheet.extra is not None:
        extra_rows = list(sheet.extra.rows)
        header = RowPlacement(top=0, height=config.extra_header_height, table=sheet.extra, header=EXTRA_HEADER)
        first = extra_rows[0]
        place([header, RowPlacement(top=0, height=first.height, table=sheet.extra, row=first)])
        for row in extra_rows[1:]:
            place([RowPlacement(top=0, height=row.height, table=sheet.extra, row=row)])

    if current or not pages:
        new_page()

    logger.debug(f"Paginated {sheet.title!r} onto {len(pages)} pages")
    return pages
