"""
Module: layout.turns

Purpose:
    Scramble notation helpers. Padding every turn to the same width keeps
    turns in aligned columns across wrapped lines.

Key Functions:
    - pad_turns_uniformly(): Pad turns to the longest turn's length
    - widest_probe(): Worst-case-width copy of a scramble for measuring
"""

from __future__ import annotations

import re
from typing import Tuple

WIDEST_CHARACTER = "M"
SQUARE_ONE_SEPARATOR = "/"

_NON_SPACE = re.compile(r"\S")


def pad_turns_uniformly(scramble: str, pad: str) -> str:
    """
    Pad every turn to the length of the longest turn in the scramble.

    Turns are separated by whitespace and newlines are kept as hard
    breaks. Bare ``/`` turns are never padded.

    Example:
        >>> pad_turns_uniformly("R U2 F'", ".")
        "R. U2 F'"
    """
    max_len = max((len(turn) for turn in scramble.split()), default=0)
    lines = []
    for line in scramble.split("\n"):
        turns = [
            turn if turn == SQUARE_ONE_SEPARATOR else turn.ljust(max_len, pad)
            for turn in line.split()
        ]
        lines.append(" ".join(turns))
    return "\n".join(lines)


def widest_probe(scramble: str) -> Tuple[str, bool]:
    """
    Build the text used to size the scramble column.

    Every printable character becomes the widest glyph, so the probe is
    an upper bound on the width of any scramble of the same shape. If
    the scramble has hard breaks, spaces are filled too: only the hard
    breaks may wrap, and one-line layout is ruled out.

    Returns:
        (probe text, whether a one-line layout may be tried)
    """
    probe = _NON_SPACE.sub(WIDEST_CHARACTER, pad_turns_uniformly(scramble, WIDEST_CHARACTER))
    if "\n" in probe:
        return probe.replace(" ", WIDEST_CHARACTER), False
    return probe, True


def one_line_probe(scramble: str) -> str:
    """Whole scramble as widest glyphs, spaces included."""
    return re.sub(r".", WIDEST_CHARACTER, scramble)
