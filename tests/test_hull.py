import random

import pytest
from shapely.geometry import Point

from tools.territory.hull import build_convex_hull
from tools.territory.models import Coordinate, Polygon


def _coords(pairs):
    return [Coordinate(latitude=lat, longitude=lon) for lat, lon in pairs]


def test_square_with_inner_points_keeps_corners_only(square):
    points = square + _coords([(0.0005, 0.0005), (0.0002, 0.0007)])
    hull = build_convex_hull(points)

    assert isinstance(hull, Polygon)
    assert set(hull.vertices) == set(square)


def test_hull_contains_every_input_point():
    rnd = random.Random(7)
    points = _coords([(55.75 + rnd.uniform(0, 0.01), 37.61 + rnd.uniform(0, 0.01)) for _ in range(60)])
    hull = build_convex_hull(points).to_shape()

    for p in points:
        assert hull.buffer(1e-12).contains(Point(p.longitude, p.latitude))


def test_hull_is_counter_clockwise_from_lowest_vertex(square):
    hull = build_convex_hull(square)

    assert hull.vertices[0] == Coordinate(latitude=0.0, longitude=0.0)
    assert hull.to_shape().exterior.is_ccw


def test_hull_does_not_depend_on_input_order(square):
    rnd = random.Random(42)
    points = square + _coords([(0.0004, 0.0006), (0.0009, 0.0001)])
    expected = build_convex_hull(points)

    for _ in range(10):
        shuffled = list(points)
        rnd.shuffle(shuffled)
        assert build_convex_hull(shuffled) == expected


def test_hull_drops_duplicates_and_colinear_edge_points(square):
    points = square + square + _coords([(0.0, 0.0005)])
    hull = build_convex_hull(points)

    assert len(hull) == 4


@pytest.mark.parametrize(
    "pairs",
    [
        [],
        [(0.0, 0.0)],
        [(0.0, 0.0), (0.0, 0.0), (0.0, 0.0)],
        [(0.0, 0.0), (0.001, 0.001)],
        [(0.0, 0.0), (0.001, 0.001), (0.002, 0.002), (0.003, 0.003)],
    ],
)
def test_degenerate_input_returns_none(pairs):
    assert build_convex_hull(_coords(pairs)) is None


def test_near_duplicate_vertices_collapse():
    points = _coords([(0.0, 0.0), (0.0, 1e-9), (1e-9, 0.0)])
    assert build_convex_hull(points) is None
