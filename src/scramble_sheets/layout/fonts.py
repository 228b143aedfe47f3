"""
Module: layout.fonts

Purpose:
    Font metrics used by the text fitter. Widths come from reportlab's
    built-in Type 1 metrics, so layout decisions match what the renderer
    draws with the same font.

Key Classes:
    - FontMetrics: Named font with string width measurement

Constants:
    - MONO: Scramble text (Courier)
    - SANS / SANS_BOLD: Labels, headers and sheet text (Helvetica)
"""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.pdfbase import pdfmetrics


@dataclass(frozen=True)
class FontMetrics:
    """
    Width measurement for one font.

    Example:
        >>> MONO.width("R U", 10)
        18.0
    """

    name: str

    def width(self, text: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, self.name, size)


MONO = FontMetrics("Courier")
SANS = FontMetrics("Helvetica")
SANS_BOLD = FontMetrics("Helvetica-Bold")
