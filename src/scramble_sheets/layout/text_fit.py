"""
Module: layout.text_fit

Purpose:
    Fit text into a rectangle: choose the largest font size (within 0.1pt)
    and token-respecting line breaks such that the text does not overflow.

Key Functions:
    - split_into_lines(): Greedy, token-aware line breaking at one size
    - fit_font_size(): Binary search over font sizes

Algorithm:
    A line is grown one character at a time while
    ``NBSP + line + NBSP`` fits the available width. When the line is not
    the end of the paragraph, the break walks backwards to a turn
    boundary. The fragment is then padded with NBSPs to the full width so
    every fragment of a paragraph is equally wide.

Dependencies:
    - layout.fonts: Width measurement
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from reportlab.lib.utils import simpleSplit

from .config import NON_BREAKING_SPACE
from .fonts import FontMetrics
from .models import FittedText, LineFragment

logger = logging.getLogger(__name__)

FONT_SIZE_PRECISION = 0.1
MIN_FONT_SIZE = 1.0
DEFAULT_TEXT_PADDING = 1


def _break_index(line: str, start: int, end: int) -> int:
    """
    Walk back from ``end`` to the closest turn boundary after ``start``.

    Square-1 style lines (containing "/") break right after a "/";
    everything else breaks on a space. Without any boundary the perfect
    fit ``end`` is kept and the turn is split.
    """
    perfect_fit = end
    slash_notation = "/" in line
    while end >= start:
        if slash_notation:
            if end > start and line[end - 1] == "/":
                return end
        elif line[end] == " ":
            return end
        end -= 1
    return perfect_fit


def split_into_lines(
    text: str,
    metrics: FontMetrics,
    font_size: float,
    width: float,
    padding: float = DEFAULT_TEXT_PADDING,
) -> List[LineFragment]:
    """
    Split ``text`` into fragments no wider than ``width`` at ``font_size``.

    Newlines are always respected. Empty paragraphs produce no fragment.

    Args:
        text: Text to split
        metrics: Font used for measurement
        font_size: Size to measure at
        width: Column width; ``padding`` is reserved on both sides
        padding: Horizontal padding per side

    Returns:
        Fragments, each padded with NBSPs to the paragraph width
    """
    available = width - 2 * padding
    nbsp = NON_BREAKING_SPACE

    def fits(candidate: str) -> bool:
        return metrics.width(candidate, font_size) <= available

    fragments: List[LineFragment] = []
    for line in text.split("\n"):
        start = 0
        while start < len(line):
            end = start + 1
            while end <= len(line) and fits(nbsp + line[start:end] + nbsp):
                end += 1
            end -= 1

            if end < len(line):
                end = _break_index(line, start, end)
            if end <= start:
                # Not even one character fits; take one so the split terminates
                end = start + 1

            content = nbsp + line[start:end] + nbsp
            while True:
                content += nbsp
                if not fits(content):
                    break
            content = content[:-1]

            while end < len(line) and line[end] == " ":
                end += 1
            start = end
            fragments.append(LineFragment(content))
    return fragments


def fit_font_size(
    text: str,
    metrics: FontMetrics,
    width: float,
    height: float,
    max_font_size: float,
    allow_line_breaks: bool = True,
    leading: float = 1.0,
    padding: float = DEFAULT_TEXT_PADDING,
) -> FittedText:
    """
    Largest font size (within 0.1pt) at which ``text`` fits the rectangle.

    A size is accepted when ``lines * size * leading < height``; with
    ``allow_line_breaks`` false any size that needs more than one line is
    rejected. The lower bound of the search is returned, so the result
    always fits (or is 1.0 when nothing does).

    Example:
        >>> fitted = fit_font_size("R U R' U'", MONO, 200, 30, 20)
        >>> fitted.line_count
        1
    """
    low = MIN_FONT_SIZE
    high = max_font_size
    while high - low >= FONT_SIZE_PRECISION:
        size = (low + high) / 2
        lines = split_into_lines(text, metrics, size, width, padding)
        if not allow_line_breaks and len(lines) > 1:
            high = size
        elif len(lines) * size * leading < height:
            low = size
        else:
            high = size

    lines = split_into_lines(text, metrics, low, width, padding)
    logger.debug(f"Fitted {len(text)} chars at {low:.2f}pt in {len(lines)} lines")
    return FittedText(font_size=low, lines=tuple(lines))


def shrink_to_fit(
    text: str,
    metrics: FontMetrics,
    width: float,
    height: float,
    max_font_size: float,
    leading: float = 1.0,
) -> Tuple[float, List[List[str]]]:
    """
    Word-wrapped fitting for prose blocks (rules, headings).

    Steps down 0.1pt from ``max_font_size`` until the wrapped text fits.
    Lines are wrapped at spaces with reportlab's ``simpleSplit``; the
    result keeps paragraphs (hard breaks) apart so they can be justified.
    """
    size = max_font_size
    while True:
        paragraphs = [
            simpleSplit(paragraph, metrics.name, size, width) or [""]
            for paragraph in text.split("\n")
        ]
        line_count = sum(len(lines) for lines in paragraphs)
        if line_count * size * leading <= height or size <= MIN_FONT_SIZE:
            return size, paragraphs
        size -= FONT_SIZE_PRECISION
