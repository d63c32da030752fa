"""
Polyline simplification that remembers which original points survived.

Douglas–Peucker in "highest quality" mode (no radial-distance
pre-pass): split the range at the point farthest from the chord between
its endpoints while that distance exceeds the tolerance. Distances are
planar on (longitude, latitude); the third coordinate rides along.

The ranges are processed from an explicit stack instead of recursion so
a long, wiggly track cannot exhaust Python's recursion limit. The set of
retained points is identical to the recursive formulation.
"""
from typing import List, Sequence, Tuple

Point = Sequence[float]

DEFAULT_TOLERANCE = 1e-5  # degrees


def _sq_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Squared planar distance from p to the segment a–b."""
    x, y = a[0], a[1]
    dx, dy = b[0] - x, b[1] - y

    if dx != 0 or dy != 0:
        t = ((p[0] - x) * dx + (p[1] - y) * dy) / (dx * dx + dy * dy)
        if t > 1:
            x, y = b[0], b[1]
        elif t > 0:
            x += dx * t
            y += dy * t

    dx = p[0] - x
    dy = p[1] - y
    return dx * dx + dy * dy


def douglas_peucker_indices(points: Sequence[Point], tolerance: float) -> List[int]:
    """
    Indices of the points Douglas–Peucker keeps, in increasing order.

    The first and last index are always kept.
    """
    n = len(points)
    if n <= 2:
        return list(range(n))

    sq_tolerance = tolerance * tolerance
    keep = [False] * n
    keep[0] = keep[-1] = True

    stack: List[Tuple[int, int]] = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        max_sq_dist = sq_tolerance
        index = -1
        for i in range(first + 1, last):
            sq_dist = _sq_segment_distance(points[i], points[first], points[last])
            if sq_dist > max_sq_dist:
                index = i
                max_sq_dist = sq_dist

        if index < 0:
            continue
        keep[index] = True
        if index - first > 1:
            stack.append((first, index))
        if last - index > 1:
            stack.append((index, last))

    return [i for i, kept in enumerate(keep) if kept]


def simplify_with_indices(
    points: Sequence[Point],
    tolerance: float = DEFAULT_TOLERANCE,
) -> Tuple[List[List[float]], List[int]]:
    """
    Simplify a (longitude, latitude, altitude) track.

    Args:
        points: Ordered track points. Only the first two coordinates are
            used for distances.
        tolerance: Maximum perpendicular deviation, in coordinate units.

    Returns:
        (simplified points, retained original indices). Inputs of 0 or 1
        points come back unchanged with an identity mapping.
    """
    indices = douglas_peucker_indices(points, tolerance)
    return [list(points[i]) for i in indices], indices
