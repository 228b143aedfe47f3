"""
Module: puzzles.pool

Purpose:
    Process-wide scramble cache for unseeded requests. Scrambles are
    pre-generated in batches per puzzle identifier and handed out in FIFO
    order, so repeated requests for the same puzzle reuse the buffered
    values instead of paying generation cost each time.

    The pool is an injectable service: create one per process and pass it
    to ``RequestParser``. Entries are never invalidated.

Key Classes:
    - ScramblePool: Thread-safe per-puzzle scramble buffer
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Dict, List

from .base import PuzzleType

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 100


class _PuzzleCache:
    """Buffered scrambles for one puzzle; ``lock`` serialises refills."""

    def __init__(self, puzzle: PuzzleType, cache_size: int):
        self.puzzle = puzzle
        self.cache_size = cache_size
        self.buffer: Deque[str] = deque()
        self.lock = threading.Lock()

    def take(self, count: int) -> List[str]:
        with self.lock:
            if len(self.buffer) < count:
                needed = max(count - len(self.buffer), self.cache_size)
                logger.debug(f"Generating {needed} {self.puzzle.short_name} scrambles for pool")
                self.buffer.extend(self.puzzle.generate(needed))
            return [self.buffer.popleft() for _ in range(count)]


class ScramblePool:
    """
    Lazily created scramble buffers keyed by puzzle identifier.

    Creation of a buffer is double-checked under a pool-wide lock so at most
    one buffer (and one populator) exists per key. Lookups of an existing
    buffer never take the pool-wide lock.

    Example:
        >>> pool = ScramblePool(cache_size=10)
        >>> scrambles = pool.new_scrambles("333", CubePuzzle(3), 5)
        >>> len(scrambles)
        5
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE):
        if cache_size < 1:
            raise ValueError(f"cache_size must be positive: {cache_size}")
        self.cache_size = cache_size
        self._caches: Dict[str, _PuzzleCache] = {}
        self._create_lock = threading.Lock()

    def _cache_for(self, puzzle_id: str, puzzle: PuzzleType) -> _PuzzleCache:
        cache = self._caches.get(puzzle_id)
        if cache is not None:
            return cache
        with self._create_lock:
            cache = self._caches.get(puzzle_id)
            if cache is None:
                cache = _PuzzleCache(puzzle, self.cache_size)
                self._caches[puzzle_id] = cache
                logger.debug(f"Created scramble pool for {puzzle_id}")
            return cache

    def new_scrambles(self, puzzle_id: str, puzzle: PuzzleType, count: int) -> List[str]:
        """Take ``count`` fresh scrambles for ``puzzle_id``."""
        if count < 0:
            raise ValueError(f"count must not be negative: {count}")
        return self._cache_for(puzzle_id, puzzle).take(count)

    def __contains__(self, puzzle_id: object) -> bool:
        return puzzle_id in self._caches

    def buffered(self, puzzle_id: str) -> int:
        """Number of scrambles currently buffered for ``puzzle_id``."""
        cache = self._caches.get(puzzle_id)
        return len(cache.buffer) if cache is not None else 0
