"""
Module: errors

Purpose:
    Exception taxonomy for scramble-sheets.

    Request errors (malformed spec, unknown puzzle, bad colour scheme,
    empty batch) are raised while parsing, before any document work
    starts. Image errors are recoverable and turned into placeholders by
    the layout code. BuildError wraps every other failure with the request
    title and stage that produced it.

Used By:
    - core.models.request: Request parsing
    - puzzles: Colour scheme parsing, rendering
    - output: Document assembly and archive packaging
"""

from __future__ import annotations

from typing import Optional


class ScrambleSheetsError(Exception):
    """Base class for all scramble-sheets errors."""


class InvalidScrambleRequestError(ScrambleSheetsError):
    """A scramble request could not be parsed."""


class MalformedRequestSpecError(InvalidScrambleRequestError):
    """Encoded request spec has the wrong field count or bad encoding."""


class UnknownPuzzleError(InvalidScrambleRequestError):
    """Puzzle identifier is not in the registry."""

    def __init__(self, puzzle_id: str):
        super().__init__(f"Invalid scrambler: {puzzle_id!r}")
        self.puzzle_id = puzzle_id


class InvalidColorSchemeError(InvalidScrambleRequestError):
    """Colour scheme spec was rejected by the puzzle type."""


class EmptyBatchError(InvalidScrambleRequestError):
    """A batch must contain at least one request."""


class ImageRenderError(ScrambleSheetsError):
    """A scramble image could not be rendered or converted."""


class BuildError(ScrambleSheetsError):
    """
    Fatal failure while building documents or the archive.

    Attributes:
        title: Title of the request being processed (if any)
        stage: Pipeline stage, e.g. "print-pdf", "computer-display", "zip"
    """

    def __init__(self, message: str, *, title: Optional[str] = None, stage: Optional[str] = None):
        context = []
        if stage:
            context.append(f"stage={stage}")
        if title:
            context.append(f"title={title!r}")
        full = f"{message} ({', '.join(context)})" if context else message
        super().__init__(full)
        self.title = title
        self.stage = stage
