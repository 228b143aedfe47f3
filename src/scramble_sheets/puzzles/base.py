"""
Module: puzzles.base

Purpose:
    Abstract puzzle capability interface. The layout engine only ever talks
    to puzzles through these methods:

    - generate(count, seed): scramble strings
    - parse_color_scheme(spec): facelet -> colour mapping
    - preferred_image_size(max_width, max_height): image envelope
    - render(scramble, color_scheme): SVG text or a PIL image

Dependencies:
    - reportlab.lib.colors: colour name / hex parsing
    - PIL: raster images returned by bitmap renderers
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union

from PIL import Image
from reportlab.lib import colors

from scramble_sheets.core.models.geometry import ImageSize
from scramble_sheets.errors import InvalidColorSchemeError

# SVG document text, or an already rasterised image
ScrambleImageSource = Union[str, Image.Image]


def normalize_color(value: str) -> str:
    """
    Convert a colour name or hex literal to ``#rrggbb``.

    Raises:
        ValueError: If reportlab does not recognise the colour

    Example:
        >>> normalize_color("red")
        '#ff0000'
        >>> normalize_color("#00F")
        '#0000ff'
    """
    text = value.strip()
    if not text:
        raise ValueError("empty colour")
    if text.startswith("#") and len(text) == 4:
        text = "#" + "".join(ch * 2 for ch in text[1:])
    color = colors.toColor(text)
    return "#" + color.hexval()[2:].lower()


class PuzzleType(ABC):
    """
    Puzzle capability interface.

    Subclasses set ``short_name``/``long_name`` and the default colour
    scheme. ``fixed_image_width`` lets a puzzle request a fixed, narrower
    image column (megaminx-like scrambles get too small otherwise).
    """

    short_name: str = ""
    long_name: str = ""
    fixed_image_width: Optional[int] = None

    @property
    @abstractmethod
    def default_color_scheme(self) -> Dict[str, str]:
        """Facelet name -> ``#rrggbb``."""

    @abstractmethod
    def generate(self, count: int, seed: Optional[str] = None) -> List[str]:
        """
        Generate ``count`` scrambles.

        With a seed the result must be a pure function of (seed, count).
        """

    @abstractmethod
    def preferred_image_size(self, max_width: int, max_height: int) -> ImageSize:
        """Largest natural-aspect image size fitting the envelope."""

    @abstractmethod
    def render(self, scramble: str, color_scheme: Dict[str, str]) -> ScrambleImageSource:
        """Draw the scrambled state."""

    def parse_color_scheme(self, spec: str) -> Dict[str, str]:
        """
        Parse a comma separated colour list, one colour per facelet.

        Facelets are taken in sorted name order. An empty spec selects the
        default scheme.

        Raises:
            InvalidColorSchemeError: Wrong colour count or unknown colour
        """
        default = self.default_color_scheme
        if not spec:
            return dict(default)

        faces = sorted(default)
        parts = spec.split(",")
        if len(parts) != len(faces):
            raise InvalidColorSchemeError(
                f"Incorrect number of colors specified (expecting {len(faces)}, got {len(parts)})"
            )

        scheme: Dict[str, str] = {}
        for face, raw in zip(faces, parts):
            try:
                scheme[face] = normalize_color(raw)
            except ValueError as exc:
                raise InvalidColorSchemeError(f"Invalid color {raw!r} for face {face}") from exc
        return scheme

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.short_name!r})"
