import itertools
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add src to sys.path so we can import scramble_sheets
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from scramble_sheets.core.models.geometry import ImageSize  # noqa: E402
from scramble_sheets.core.models.request import RequestParser, ScrambleRequest  # noqa: E402
from scramble_sheets.errors import ImageRenderError  # noqa: E402
from scramble_sheets.puzzles.base import PuzzleType  # noqa: E402
from scramble_sheets.puzzles.cube import CubePuzzle  # noqa: E402
from scramble_sheets.puzzles.pool import ScramblePool  # noqa: E402
from scramble_sheets.puzzles.registry import PuzzleRegistry  # noqa: E402

SQUARE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">'
    '<rect x="0" y="0" width="100" height="100" fill="#ff0000"/></svg>'
)


class FakePuzzle(PuzzleType):
    """Small deterministic puzzle with square images."""

    def __init__(
        self,
        short_name: str = "fake",
        long_name: str = "Fake Puzzle",
        image: bool = True,
        fail_render: bool = False,
        turns: int = 8,
    ):
        self.short_name = short_name
        self.long_name = long_name
        self.image = image
        self.fail_render = fail_render
        self.turns = turns
        self.generate_calls = 0
        self._counter = itertools.count()

    @property
    def default_color_scheme(self) -> Dict[str, str]:
        return {"A": "#ff0000", "B": "#0000ff"}

    def generate(self, count: int, seed: Optional[str] = None) -> List[str]:
        self.generate_calls += 1
        if seed is None:
            # Unique, so pool tests can detect reuse
            return [f"R U F{next(self._counter)}" for _ in range(count)]
        rng = random.Random(seed)
        return [" ".join(rng.choice(["R", "U'", "F2", "L", "D'"]) for _ in range(self.turns)) for _ in range(count)]

    def preferred_image_size(self, max_width: int, max_height: int) -> ImageSize:
        if not self.image:
            return ImageSize(0, 0)
        side = max(0, min(max_width, max_height))
        return ImageSize(side, side)

    def render(self, scramble: str, color_scheme: Dict[str, str]) -> str:
        if self.fail_render:
            raise ImageRenderError(f"cannot draw {scramble!r}")
        return SQUARE_SVG


@pytest.fixture
def fake_puzzle() -> FakePuzzle:
    return FakePuzzle()


@pytest.fixture
def registry(fake_puzzle) -> PuzzleRegistry:
    registry = PuzzleRegistry()
    registry.register(fake_puzzle)
    registry.register(CubePuzzle(3))
    registry.register(CubePuzzle(3, short_name="333fm", long_name="3x3x3 Fewest Moves"))
    return registry


@pytest.fixture
def pool() -> ScramblePool:
    return ScramblePool(cache_size=10)


@pytest.fixture
def parser(registry, pool) -> RequestParser:
    return RequestParser(registry, pool)


@pytest.fixture
def make_request(fake_puzzle):
    """Factory for requests without going through the parser."""
    def _create(scrambles=("R U F", "L D B"), puzzle=None, **kwargs) -> ScrambleRequest:
        puzzle = puzzle or fake_puzzle
        kwargs.setdefault("title", "Round 1")
        kwargs.setdefault("color_scheme", puzzle.default_color_scheme)
        return ScrambleRequest(
            puzzle_id=puzzle.short_name,
            puzzle=puzzle,
            scrambles=tuple(scrambles),
            **kwargs,
        )
    return _create


@pytest.fixture
def make_puzzle():
    """FakePuzzle class, for tests that need a non-default fake."""
    return FakePuzzle
