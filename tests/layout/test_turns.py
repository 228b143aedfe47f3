"""
Unit tests for turn padding and width probes.
"""

from scramble_sheets.layout.turns import (
    WIDEST_CHARACTER,
    one_line_probe,
    pad_turns_uniformly,
    widest_probe,
)
from scramble_sheets.puzzles.cube import CubePuzzle


class TestPadTurnsUniformly:
    def test_every_turn_padded_to_longest(self):
        for scramble in CubePuzzle(6).generate(10, seed="pad"):
            longest = max(len(turn) for turn in scramble.split())

            padded = pad_turns_uniformly(scramble, "_")

            assert all(len(turn) == longest for turn in padded.split())
            assert [turn.rstrip("_") for turn in padded.split()] == scramble.split()

    def test_newlines_are_kept(self):
        padded = pad_turns_uniformly("R U2\nF", ".")

        assert padded == "R. U2\nF."

    def test_slash_is_never_padded(self):
        padded = pad_turns_uniformly("(1,0) / (-1,2) /", ".")

        assert padded.split() == ["(1,0).", "/", "(-1,2)", "/"]

    def test_when_empty_then_empty(self):
        assert pad_turns_uniformly("", ".") == ""


class TestProbes:
    def test_single_line_probe_allows_one_line_layout(self):
        probe, try_one_line = widest_probe("R U2 F'")

        assert try_one_line is True
        assert probe == "MM MM MM"

    def test_multi_line_probe_fills_spaces_and_forbids_one_line(self):
        probe, try_one_line = widest_probe("R U\nF")

        assert try_one_line is False
        assert " " not in probe
        assert probe.split("\n") == ["MMM", "M"]

    def test_one_line_probe_replaces_every_character(self):
        probe = one_line_probe("R U' F")

        assert probe == WIDEST_CHARACTER * 6
