"""
scramble-sheets core package.

Holds the request model and geometry primitives shared by the layout and
output packages. Everything here is independent of PDF libraries.
"""

from .models import ImageSize, Rect, RequestParser, ScrambleRequest, sort_requests

__all__ = [
    "ImageSize",
    "Rect",
    "RequestParser",
    "ScrambleRequest",
    "sort_requests",
]
