"""
Module: request

Purpose:
    The ScrambleRequest dataclass and the parser that builds it from the
    compact ``puzzle*count*copies*scheme`` request encoding.

Key Classes:
    - ScrambleRequest: One titled set of scrambles (immutable)
    - RequestParser: Parses encoded specs against a puzzle registry

Key Functions:
    - sort_requests(): Order requests by round start time

Dependencies:
    - urllib.parse (std): URL decoding of spec fields
    - scramble_sheets.puzzles: registry, scramble pool

Used By:
    - controller: Batch parsing
    - layout.composer / layout.fmc: Read-only request access
    - output.assembler / output.archive: Document and archive building
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import unquote_plus

from scramble_sheets.errors import (
    EmptyBatchError,
    InvalidColorSchemeError,
    MalformedRequestSpecError,
)

if TYPE_CHECKING:
    from scramble_sheets.puzzles.base import PuzzleType
    from scramble_sheets.puzzles.pool import ScramblePool
    from scramble_sheets.puzzles.registry import PuzzleRegistry

logger = logging.getLogger(__name__)

MAX_COUNT = 100
MAX_COPIES = 100
FMC_COUNT = "fmc"
MULTI_BLIND_EVENT = "333mbf"

# "%" must start a two hex digit escape
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class ScrambleRequest:
    """
    One titled scramble set (immutable).

    Attributes:
        title: User-visible title, also the source of the file name
        puzzle_id: Registry identifier of the puzzle
        puzzle: Resolved puzzle type
        scrambles: Primary scrambles, 1-100 entries
        extra_scrambles: Spares, printed in a separate block
        copies: Copies in the all-scrambles document (1-100)
        fmc: Fewest-moves mode (single scramble, solution sheet layout)
        color_scheme: Facelet name -> ``#rrggbb``
        attempt / total_attempt: Position inside a round split across the
            schedule; only used for "Scramble X of Y" numbering
        round_start_time: Sort key for pagination, None sorts last
        group / scramble_set_id / event / round: Pass-through metadata

    Invariants:
        - scrambles is never empty
        - 1 <= copies <= MAX_COPIES
    """

    title: str
    puzzle_id: str
    puzzle: PuzzleType
    scrambles: tuple[str, ...]
    extra_scrambles: tuple[str, ...] = ()
    copies: int = 1
    fmc: bool = False
    color_scheme: Dict[str, str] = field(default_factory=dict)
    attempt: int = 0
    total_attempt: int = 0
    round_start_time: Optional[datetime] = None
    group: Optional[str] = None
    scramble_set_id: Optional[str] = None
    event: Optional[str] = None
    round: int = 0

    def __post_init__(self) -> None:
        if not self.scrambles:
            raise ValueError(f"Request {self.title!r} has no scrambles")
        if not (1 <= self.copies <= MAX_COPIES):
            raise ValueError(f"copies must be 1-{MAX_COPIES}: {self.copies}")
        # Accept lists from callers, store tuples
        object.__setattr__(self, "scrambles", tuple(self.scrambles))
        object.__setattr__(self, "extra_scrambles", tuple(self.extra_scrambles))

    @property
    def all_scrambles(self) -> List[str]:
        """Primary scrambles followed by the extra scrambles."""
        return list(self.scrambles) + list(self.extra_scrambles)

    @property
    def is_multi_blind(self) -> bool:
        return self.event == MULTI_BLIND_EVENT

    def with_metadata(self, **changes: Any) -> "ScrambleRequest":
        """Copy with pass-through metadata (or any other field) replaced."""
        return replace(self, **changes)

    def sort_key(self) -> tuple[bool, float]:
        start = self.round_start_time
        return (start is None, start.timestamp() if start is not None else 0.0)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize for the interchange JSON.

        Key names are the camelCase names downstream tooling reads; unset
        optional fields are omitted.
        """
        data: Dict[str, Any] = {
            "scrambles": list(self.scrambles),
            "extraScrambles": list(self.extra_scrambles),
            "scrambler": self.puzzle.short_name,
            "copies": self.copies,
            "title": self.title,
            "fmc": self.fmc,
            "colorScheme": dict(self.color_scheme),
            "totalAttempt": self.total_attempt,
            "attempt": self.attempt,
            "round": self.round,
        }
        if self.round_start_time is not None:
            data["roundStartTime"] = self.round_start_time.isoformat()
        if self.group is not None:
            data["group"] = self.group
        if self.scramble_set_id is not None:
            data["scrambleSetId"] = self.scramble_set_id
        if self.event is not None:
            data["event"] = self.event
        return data


def sort_requests(requests: Iterable[ScrambleRequest]) -> List[ScrambleRequest]:
    """Stable sort by round start time; requests without one go last."""
    return sorted(requests, key=ScrambleRequest.sort_key)


def _to_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _decode(value: str, spec: str) -> str:
    if _BAD_ESCAPE.search(value):
        raise MalformedRequestSpecError(f"Invalid escape sequence in puzzle request {spec!r}")
    try:
        return unquote_plus(value, errors="strict")
    except UnicodeDecodeError as exc:
        raise MalformedRequestSpecError(f"Invalid encoding in puzzle request {spec!r}") from exc


class RequestParser:
    """
    Builds ScrambleRequests from encoded specs.

    Seeded requests are generated directly by the puzzle (deterministic);
    unseeded ones are drawn from the shared scramble pool.

    Example:
        >>> parser = RequestParser(default_registry(), ScramblePool())
        >>> request = parser.parse("Round 1", "333*5*1*")
        >>> len(request.scrambles), request.copies
        (5, 1)
    """

    def __init__(self, registry: PuzzleRegistry, pool: ScramblePool):
        self.registry = registry
        self.pool = pool

    def parse(self, title: str, spec: str, seed: Optional[str] = None) -> ScrambleRequest:
        """
        Parse one ``puzzle*count*copies*scheme`` spec.

        Args:
            title: Request title (URL-decoded like the other fields)
            spec: Encoded request, trailing fields optional
            seed: Session seed; prefixed with the title so different
                rounds of one session get different scrambles

        Raises:
            MalformedRequestSpecError: More than four fields or bad encoding
            UnknownPuzzleError: Puzzle is not registered
            InvalidColorSchemeError: Scheme rejected by the puzzle
        """
        fields = spec.split("*")
        # Trailing empty fields are dropped, so "333*5*1*abc*" is four fields
        while len(fields) > 1 and not fields[-1]:
            fields.pop()
        if len(fields) > 4:
            raise MalformedRequestSpecError(f"Invalid puzzle request {spec!r}")
        title = _decode(title, spec)
        fields = [_decode(part, spec) for part in fields]
        fields += [""] * (4 - len(fields))
        puzzle_id, count_text, copies_text, scheme_text = fields

        puzzle = self.registry.lookup(puzzle_id)

        fmc = count_text == FMC_COUNT
        if fmc:
            count = 1
        else:
            count = _clamp(_to_int(count_text, 1), 1, MAX_COUNT)
        copies = _clamp(_to_int(copies_text, 1), 1, MAX_COPIES)

        if seed is not None:
            scrambles = puzzle.generate(count, seed=title + seed)
        else:
            scrambles = self.pool.new_scrambles(puzzle_id, puzzle, count)

        try:
            color_scheme = puzzle.parse_color_scheme(scheme_text)
        except ValueError as exc:
            raise InvalidColorSchemeError(str(exc)) from exc

        logger.info(f"Parsed request {title!r}: {puzzle_id} x{count}, {copies} copies{' (fmc)' if fmc else ''}")
        return ScrambleRequest(
            title=title,
            puzzle_id=puzzle_id,
            puzzle=puzzle,
            scrambles=tuple(scrambles),
            copies=copies,
            fmc=fmc,
            color_scheme=color_scheme,
        )

    def parse_batch(self, specs: Mapping[str, str], seed: Optional[str] = None) -> List[ScrambleRequest]:
        """
        Parse every title -> spec entry, failing on the first bad one.

        Requests come back in mapping order; use ``sort_requests`` before
        pagination.

        Raises:
            EmptyBatchError: If ``specs`` is empty
        """
        if not specs:
            raise EmptyBatchError("Must specify at least one scramble request")
        return [self.parse(title, spec, seed) for title, spec in specs.items()]
