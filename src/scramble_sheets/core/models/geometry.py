"""
Module: core.models.geometry

Purpose:
    Page geometry primitives in PDF points. Coordinates are bottom-up
    (origin at the lower-left corner) to match reportlab's canvas.

Key Classes:
    - Rect: Axis-aligned rectangle
    - ImageSize: Integer width/height pair returned by puzzle renderers
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in PDF points (bottom-up).

    Corners are normalised on construction so that ``left <= right`` and
    ``bottom <= top`` regardless of argument order.

    Example:
        >>> Rect(0, 100, 50, 20).bottom
        20
    """

    left: float
    bottom: float
    right: float
    top: float

    def __post_init__(self) -> None:
        if self.left > self.right:
            left, right = self.right, self.left
            object.__setattr__(self, "left", left)
            object.__setattr__(self, "right", right)
        if self.bottom > self.top:
            bottom, top = self.top, self.bottom
            object.__setattr__(self, "bottom", bottom)
            object.__setattr__(self, "top", top)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    def inset(self, dx: float, dy: float = 0) -> "Rect":
        """Shrink by ``dx`` on the left/right and ``dy`` on the top/bottom."""
        return Rect(self.left + dx, self.bottom + dy, self.right - dx, self.top - dy)

    def contains(self, other: "Rect", tolerance: float = 1e-6) -> bool:
        return (
            other.left >= self.left - tolerance
            and other.right <= self.right + tolerance
            and other.bottom >= self.bottom - tolerance
            and other.top <= self.top + tolerance
        )


@dataclass(frozen=True)
class ImageSize:
    """Preferred pixel size of a scramble image."""

    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0
