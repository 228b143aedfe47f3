"""
Module: puzzles.cube

Purpose:
    Random-turn NxN cube plug-in. Generates face-turn scrambles and draws
    the scrambled state as an unfolded net (SVG).

    Stickers are tracked by their integer surface position on a cube
    spanning [-N, N] on every axis; a turn rotates every sticker whose
    position lies inside the turned layers. This avoids per-size
    permutation tables.

Key Classes:
    - CubePuzzle: PuzzleType implementation for 2x2x2 through 7x7x7
"""

from __future__ import annotations

import logging
import random
import re
from typing import Dict, List, Optional, Tuple

from scramble_sheets.core.models.geometry import ImageSize
from scramble_sheets.errors import ImageRenderError

from .base import PuzzleType

logger = logging.getLogger(__name__)

Vector = Tuple[int, int, int]

FACES = "URFDLB"

# Outward normals (x right, y up, z towards the viewer)
NORMALS: Dict[str, Vector] = {
    "U": (0, 1, 0),
    "D": (0, -1, 0),
    "R": (1, 0, 0),
    "L": (-1, 0, 0),
    "F": (0, 0, 1),
    "B": (0, 0, -1),
}

# Net orientation: (column direction, row direction) seen from outside
NET_AXES: Dict[str, Tuple[Vector, Vector]] = {
    "U": ((1, 0, 0), (0, 0, 1)),
    "F": ((1, 0, 0), (0, -1, 0)),
    "R": ((0, 0, -1), (0, -1, 0)),
    "B": ((-1, 0, 0), (0, -1, 0)),
    "L": ((0, 0, 1), (0, -1, 0)),
    "D": ((1, 0, 0), (0, 0, -1)),
}

# Face placement in the net, in face units (column, row)
NET_POSITIONS: Dict[str, Tuple[int, int]] = {
    "U": (1, 0),
    "L": (0, 1),
    "F": (1, 1),
    "R": (2, 1),
    "B": (3, 1),
    "D": (1, 2),
}

DEFAULT_COLOR_SCHEME = {
    "B": "#0000ff",
    "D": "#ffff00",
    "F": "#00ff00",
    "L": "#ff8000",
    "R": "#ff0000",
    "U": "#ffffff",
}

SCRAMBLE_LENGTHS = {2: 11, 3: 25, 4: 40, 5: 60, 6: 80, 7: 100}

NET_GAP_RATIO = 0.1  # gap between faces, in face widths
FACE_UNIT = 100

_TURN_PATTERN = re.compile(r"^(\d*)([URFDLB])(w?)(['2]?)$")


def _dot(a: Vector, b: Vector) -> int:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _cross(a: Vector, b: Vector) -> Vector:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _rotate_clockwise(p: Vector, n: Vector) -> Vector:
    """Rotate ``p`` a quarter turn clockwise as seen looking down ``n``."""
    c = _cross(n, p)
    d = _dot(n, p)
    return (-c[0] + n[0] * d, -c[1] + n[1] * d, -c[2] + n[2] * d)


class CubePuzzle(PuzzleType):
    """
    NxN cube with random-turn scrambles.

    Example:
        >>> cube = CubePuzzle(3)
        >>> len(cube.generate(5, seed="demo"))
        5
    """

    def __init__(self, size: int, short_name: Optional[str] = None, long_name: Optional[str] = None):
        if size < 2:
            raise ValueError(f"cube size must be at least 2: {size}")
        self.size = size
        self.short_name = short_name or f"{size}{size}{size}"
        self.long_name = long_name or f"{size}x{size}x{size}"
        self.scramble_length = SCRAMBLE_LENGTHS.get(size, 20 * (size - 2))

    @property
    def default_color_scheme(self) -> Dict[str, str]:
        return dict(DEFAULT_COLOR_SCHEME)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _turn_faces(self) -> str:
        # 2x2x2 only needs three faces
        return "URF" if self.size == 2 else FACES

    def _max_depth(self) -> int:
        return max(1, self.size // 2)

    def generate(self, count: int, seed: Optional[str] = None) -> List[str]:
        rng: random.Random = random.Random(seed) if seed is not None else random.SystemRandom()
        return [self._random_scramble(rng) for _ in range(count)]

    def _random_scramble(self, rng: random.Random) -> str:
        faces = self._turn_faces()
        max_depth = self._max_depth()
        moves: List[Tuple[str, int]] = []
        turns: List[str] = []

        while len(turns) < self.scramble_length:
            face = rng.choice(faces)
            depth = rng.randint(1, max_depth)
            axis = _axis_of(face)

            if moves and moves[-1][0] == face:
                continue
            if len(moves) >= 2 and _axis_of(moves[-1][0]) == axis and _axis_of(moves[-2][0]) == axis:
                continue

            moves.append((face, depth))
            turns.append(_format_turn(face, depth, rng.choice(("", "'", "2"))))

        return " ".join(turns)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def preferred_image_size(self, max_width: int, max_height: int) -> ImageSize:
        width_units = 4 + 5 * NET_GAP_RATIO
        height_units = 3 + 4 * NET_GAP_RATIO
        face = min(max_width / width_units, max_height / height_units)
        if face <= 0:
            return ImageSize(0, 0)
        return ImageSize(int(face * width_units), int(face * height_units))

    def solved_state(self) -> Dict[Vector, str]:
        n = self.size
        state: Dict[Vector, str] = {}
        for face, normal in NORMALS.items():
            u, v = NET_AXES[face]
            for i in range(n):
                for j in range(n):
                    a = 2 * i - (n - 1)
                    b = 2 * j - (n - 1)
                    pos = tuple(normal[k] * n + u[k] * a + v[k] * b for k in range(3))
                    state[pos] = face
        return state

    def apply(self, scramble: str, state: Optional[Dict[Vector, str]] = None) -> Dict[Vector, str]:
        """
        Apply a scramble to ``state`` (solved if omitted).

        Raises:
            ImageRenderError: If a turn cannot be parsed
        """
        state = dict(state) if state is not None else self.solved_state()
        for token in scramble.split():
            face, depth, quarter_turns = self._parse_turn(token)
            normal = NORMALS[face]
            threshold = self.size - 2 * depth
            for _ in range(quarter_turns):
                rotated: Dict[Vector, str] = {}
                for pos, color in state.items():
                    if _dot(pos, normal) > threshold:
                        rotated[_rotate_clockwise(pos, normal)] = color
                    else:
                        rotated[pos] = color
                state = rotated
        return state

    def _parse_turn(self, token: str) -> Tuple[str, int, int]:
        match = _TURN_PATTERN.match(token)
        if match is None:
            raise ImageRenderError(f"Unrecognised turn {token!r} for {self.long_name}")
        prefix, face, wide, modifier = match.groups()
        if wide:
            depth = int(prefix) if prefix else 2
        elif prefix:
            raise ImageRenderError(f"Slice turn {token!r} is not supported")
        else:
            depth = 1
        if depth >= self.size:
            raise ImageRenderError(f"Turn {token!r} is deeper than the puzzle")
        quarter_turns = {"": 1, "2": 2, "'": 3}[modifier]
        return face, depth, quarter_turns

    def facelets(self, state: Dict[Vector, str]) -> Dict[str, List[List[str]]]:
        """Face -> rows of facelet names, in net orientation."""
        n = self.size
        grid = {face: [["" for _ in range(n)] for _ in range(n)] for face in FACES}
        for pos, color in state.items():
            face = next(f for f, normal in NORMALS.items() if _dot(pos, normal) == n)
            u, v = NET_AXES[face]
            col = (_dot(pos, u) + n - 1) // 2
            row = (_dot(pos, v) + n - 1) // 2
            grid[face][row][col] = color
        return grid

    def render(self, scramble: str, color_scheme: Dict[str, str]) -> str:
        grid = self.facelets(self.apply(scramble))
        gap = FACE_UNIT * NET_GAP_RATIO
        width = 4 * FACE_UNIT + 5 * gap
        height = 3 * FACE_UNIT + 4 * gap
        sticker = FACE_UNIT / self.size

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
            f'width="{width:g}" height="{height:g}" viewBox="0 0 {width:g} {height:g}">'
        ]
        for face, rows in grid.items():
            column, row = NET_POSITIONS[face]
            x0 = gap + column * (FACE_UNIT + gap)
            y0 = gap + row * (FACE_UNIT + gap)
            for r, names in enumerate(rows):
                for c, name in enumerate(names):
                    fill = color_scheme.get(name, DEFAULT_COLOR_SCHEME[name])
                    parts.append(
                        f'<rect x="{x0 + c * sticker:g}" y="{y0 + r * sticker:g}" '
                        f'width="{sticker:g}" height="{sticker:g}" '
                        f'fill="{fill}" stroke="#000000" stroke-width="1"/>'
                    )
        parts.append("</svg>")
        return "".join(parts)


def _axis_of(face: str) -> int:
    normal = NORMALS[face]
    return next(i for i, value in enumerate(normal) if value)


def _format_turn(face: str, depth: int, modifier: str) -> str:
    if depth == 1:
        return f"{face}{modifier}"
    if depth == 2:
        return f"{face}w{modifier}"
    return f"{depth}{face}w{modifier}"
