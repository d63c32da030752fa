"""Tests for track simplification with index tracking."""
import math
import random

import pytest

from ridetrace.analysis.simplify import (
    _sq_segment_distance,
    douglas_peucker_indices,
    simplify_with_indices,
)


def _recursive_reference(points, tolerance):
    """Textbook recursive Douglas–Peucker over index ranges."""
    sq_tol = tolerance * tolerance
    kept = [0]

    def step(first, last):
        max_sq, index = sq_tol, None
        for i in range(first + 1, last):
            d = _sq_segment_distance(points[i], points[first], points[last])
            if d > max_sq:
                index, max_sq = i, d
        if index is not None:
            if index - first > 1:
                step(first, index)
            kept.append(index)
            if last - index > 1:
                step(index, last)

    step(0, len(points) - 1)
    kept.append(len(points) - 1)
    return kept


class TestEdgeCases:
    def test_empty_input(self):
        assert simplify_with_indices([]) == ([], [])

    def test_single_point(self):
        assert simplify_with_indices([(7.0, 45.0, 3000.0)]) == ([[7.0, 45.0, 3000.0]], [0])

    def test_two_points_always_kept(self):
        pts = [(7.0, 45.0, 1.0), (7.0, 45.0, 2.0)]
        _, indices = simplify_with_indices(pts)
        assert indices == [0, 1]


class TestSimplification:
    def test_drops_interior_point_on_straight_line(self):
        pts = [(7.0, 45.0, 3000.0), (7.001, 45.001, 3010.0), (7.002, 45.002, 3020.0)]
        simplified, indices = simplify_with_indices(pts)
        assert indices == [0, 2]
        assert simplified == [[7.0, 45.0, 3000.0], [7.002, 45.002, 3020.0]]

    def test_keeps_corner(self):
        pts = [(0.0, 0.0, 0.0), (0.5, 1.0, 0.0), (1.0, 0.0, 0.0)]
        assert simplify_with_indices(pts)[1] == [0, 1, 2]

    def test_deviation_below_tolerance_dropped(self):
        pts = [(0.0, 0.0, 0.0), (0.5, 0.000005, 0.0), (1.0, 0.0, 0.0)]
        assert simplify_with_indices(pts, tolerance=1e-5)[1] == [0, 2]

    def test_deviation_above_tolerance_kept(self):
        pts = [(0.0, 0.0, 0.0), (0.5, 0.00002, 0.0), (1.0, 0.0, 0.0)]
        assert simplify_with_indices(pts, tolerance=1e-5)[1] == [0, 1, 2]

    def test_altitude_does_not_affect_distance(self):
        pts = [(0.0, 0.0, 0.0), (0.5, 0.0, 9999.0), (1.0, 0.0, 0.0)]
        assert simplify_with_indices(pts)[1] == [0, 2]

    def test_distance_is_to_segment_not_infinite_line(self):
        """A point beyond the chord's end is measured to the endpoint."""
        pts = [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (1.0, 0.0, 0.0)]
        assert simplify_with_indices(pts)[1] == [0, 1, 2]

    def test_closed_loop(self):
        pts = [(0.0, 0.0, 0.0), (0.001, 0.0, 0.0), (0.001, 0.001, 0.0), (0.0, 0.0, 0.0)]
        assert simplify_with_indices(pts)[1] == [0, 1, 2, 3]


class TestIndexInvariants:
    @pytest.fixture
    def wiggly_track(self):
        rng = random.Random(42)
        return [
            (7.0 + i * 1e-5, 45.0 + 2e-5 * math.sin(i / 7.0) + rng.uniform(-5e-6, 5e-6), 3000.0 + i)
            for i in range(400)
        ]

    def test_indices_strictly_increasing_with_endpoints(self, wiggly_track):
        indices = douglas_peucker_indices(wiggly_track, 1e-5)
        assert indices[0] == 0
        assert indices[-1] == len(wiggly_track) - 1
        assert all(b > a for a, b in zip(indices, indices[1:]))

    def test_points_match_indices(self, wiggly_track):
        simplified, indices = simplify_with_indices(wiggly_track)
        assert simplified == [list(wiggly_track[i]) for i in indices]

    def test_matches_recursive_formulation(self, wiggly_track):
        assert douglas_peucker_indices(wiggly_track, 1e-5) == _recursive_reference(wiggly_track, 1e-5)

    def test_long_track_does_not_hit_recursion_limit(self):
        # Every point is a corner of a sawtooth, so every point survives.
        pts = [(i * 1e-3, (i % 2) * 1e-3, 0.0) for i in range(5000)]
        indices = douglas_peucker_indices(pts, 1e-5)
        assert indices == list(range(5000))
