"""
Module: puzzles.registry

Purpose:
    Registration table mapping puzzle identifiers to PuzzleType instances.
    The table is built once at startup by ``default_registry()``; callers
    may register additional puzzle types before parsing requests.

Key Classes:
    - PuzzleRegistry: Identifier -> PuzzleType lookup

Key Functions:
    - default_registry(): Table with the bundled cube plug-ins
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional

from scramble_sheets.errors import UnknownPuzzleError

from .base import PuzzleType
from .cube import CubePuzzle

logger = logging.getLogger(__name__)


class PuzzleRegistry:
    """
    Puzzle identifier -> PuzzleType table.

    Example:
        >>> registry = PuzzleRegistry()
        >>> registry.register(CubePuzzle(3))
        >>> registry.lookup("333").long_name
        '3x3x3'
    """

    def __init__(self) -> None:
        self._puzzles: Dict[str, PuzzleType] = {}

    def register(self, puzzle: PuzzleType, puzzle_id: Optional[str] = None) -> None:
        key = puzzle_id or puzzle.short_name
        if not key:
            raise ValueError(f"Puzzle {puzzle!r} has no identifier")
        if key in self._puzzles:
            logger.debug(f"Replacing registered puzzle {key}")
        self._puzzles[key] = puzzle

    def lookup(self, puzzle_id: str) -> PuzzleType:
        """
        Resolve a puzzle identifier.

        Raises:
            UnknownPuzzleError: If the identifier is not registered
        """
        try:
            return self._puzzles[puzzle_id]
        except KeyError:
            raise UnknownPuzzleError(puzzle_id) from None

    def __contains__(self, puzzle_id: object) -> bool:
        return puzzle_id in self._puzzles

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._puzzles))

    def __len__(self) -> int:
        return len(self._puzzles)


def default_registry() -> PuzzleRegistry:
    """Registry with the bundled NxN cube plug-ins."""
    registry = PuzzleRegistry()
    for size in range(2, 8):
        registry.register(CubePuzzle(size))
    registry.register(CubePuzzle(3, short_name="333ni", long_name="3x3x3 Blindfolded"))
    registry.register(CubePuzzle(3, short_name="333fm", long_name="3x3x3 Fewest Moves"))
    registry.register(CubePuzzle(3, short_name="333oh", long_name="3x3x3 One-Handed"))
    registry.register(CubePuzzle(4, short_name="444ni", long_name="4x4x4 Blindfolded"))
    registry.register(CubePuzzle(5, short_name="555ni", long_name="5x5x5 Blindfolded"))
    return registry
