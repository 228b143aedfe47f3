"""
Module: puzzles

Purpose:
    Puzzle-type interface consumed by the layout engine, plus the
    registration table and the process-wide scramble pool.

    Scrambling algorithms and image drawing live behind ``PuzzleType``.
    The bundled ``CubePuzzle`` is a random-turn reference plug-in; real
    scramblers are registered with ``PuzzleRegistry.register``.

Key Classes:
    - PuzzleType: Abstract puzzle capability interface
    - PuzzleRegistry: Puzzle identifier -> PuzzleType table
    - ScramblePool: Thread-safe per-puzzle scramble cache
"""

from .base import PuzzleType, ScrambleImageSource
from .cube import CubePuzzle
from .pool import ScramblePool
from .registry import PuzzleRegistry, default_registry

__all__ = [
    "PuzzleType",
    "ScrambleImageSource",
    "CubePuzzle",
    "ScramblePool",
    "PuzzleRegistry",
    "default_registry",
]
