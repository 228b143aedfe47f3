"""
Core Models Package

Frozen dataclasses for requests and page geometry. New instances are
created (``dataclasses.replace``) for any change, so a request can be
shared read-only by every composer and layout routine.
"""

from .geometry import ImageSize, Rect
from .request import RequestParser, ScrambleRequest, sort_requests

__all__ = [
    "ImageSize",
    "Rect",
    "RequestParser",
    "ScrambleRequest",
    "sort_requests",
]
