"""
Unit tests for the shared scramble pool.
"""

import threading

import pytest

from scramble_sheets.puzzles.pool import ScramblePool


class TestScramblePool:
    def test_when_first_taken_then_buffer_filled_to_cache_size(self, fake_puzzle):
        # Arrange
        pool = ScramblePool(cache_size=10)

        # Act
        scrambles = pool.new_scrambles("fake", fake_puzzle, 4)

        # Assert
        assert len(scrambles) == 4
        assert pool.buffered("fake") == 6
        assert fake_puzzle.generate_calls == 1

    def test_when_buffer_sufficient_then_no_generation(self, fake_puzzle):
        pool = ScramblePool(cache_size=10)
        pool.new_scrambles("fake", fake_puzzle, 4)

        pool.new_scrambles("fake", fake_puzzle, 6)

        assert fake_puzzle.generate_calls == 1
        assert pool.buffered("fake") == 0

    def test_when_request_exceeds_cache_size_then_refilled_once(self, fake_puzzle):
        pool = ScramblePool(cache_size=5)

        scrambles = pool.new_scrambles("fake", fake_puzzle, 12)

        assert len(scrambles) == 12
        assert fake_puzzle.generate_calls == 1

    def test_scrambles_are_never_handed_out_twice(self, fake_puzzle):
        pool = ScramblePool(cache_size=3)

        taken = [s for _ in range(5) for s in pool.new_scrambles("fake", fake_puzzle, 2)]

        assert len(set(taken)) == len(taken)

    def test_when_unknown_puzzle_then_nothing_buffered(self):
        pool = ScramblePool()

        assert "333" not in pool
        assert pool.buffered("333") == 0

    def test_when_cache_size_not_positive_then_value_error(self):
        with pytest.raises(ValueError):
            ScramblePool(cache_size=0)

    def test_when_many_threads_take_concurrently_then_one_buffer_and_unique_scrambles(self, fake_puzzle):
        # Arrange
        pool = ScramblePool(cache_size=100)
        barrier = threading.Barrier(8)
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            scrambles = pool.new_scrambles("fake", fake_puzzle, 5)
            with lock:
                results.extend(scrambles)

        # Act
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Assert
        assert len(results) == 40
        assert len(set(results)) == 40
        assert fake_puzzle.generate_calls == 1
        assert pool.buffered("fake") == 60
