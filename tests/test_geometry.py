"""Tests for point-in-polygon and bounds helpers."""

import pytest

from cropwatch.config import DEFAULT_BOUNDARY
from cropwatch.errors import ValidationError
from cropwatch.geo import (
    coordinate_distance,
    point_in_polygon,
    polygon_bounds,
    polygon_centroid,
)


class TestPointInPolygon:
    def test_center_of_square_is_inside(self, square):
        assert point_in_polygon((0.5, 0.5), square)

    def test_outside_square(self, square):
        assert not point_in_polygon((1.5, 0.5), square)
        assert not point_in_polygon((0.5, -0.1), square)

    def test_concave_polygon(self):
        # L-shape: the notch at the top right is outside
        shape = [(0, 0), (0, 2), (1, 2), (1, 1), (2, 1), (2, 0)]
        assert point_in_polygon((0.5, 1.5), shape)
        assert point_in_polygon((1.5, 0.5), shape)
        assert not point_in_polygon((1.5, 1.5), shape)

    def test_triangle(self):
        triangle = [(0, 0), (0, 4), (4, 0)]
        assert point_in_polygon((1, 1), triangle)
        assert not point_in_polygon((3, 3), triangle)

    def test_too_few_vertices(self):
        with pytest.raises(ValidationError):
            point_in_polygon((0, 0), [(0, 0), (1, 1)])

    def test_default_boundary_contains_its_center(self):
        lat = sum(p[0] for p in DEFAULT_BOUNDARY) / 4
        lng = sum(p[1] for p in DEFAULT_BOUNDARY) / 4
        assert point_in_polygon((lat, lng), DEFAULT_BOUNDARY)


class TestBounds:
    def test_polygon_bounds(self):
        bounds = polygon_bounds([(1, 5), (3, 2), (2, 8)])
        assert (bounds.min_lat, bounds.max_lat) == (1, 3)
        assert (bounds.min_lng, bounds.max_lng) == (2, 8)

    def test_contains_and_center(self, square):
        bounds = polygon_bounds(square)
        assert bounds.contains(0.5, 0.5)
        assert bounds.contains(1.0, 1.0)
        assert not bounds.contains(1.1, 0.5)
        assert bounds.center() == (0.5, 0.5)


class TestHelpers:
    def test_coordinate_distance(self):
        assert coordinate_distance((0, 0), (3, 4)) == pytest.approx(5.0)

    def test_centroid(self, square):
        assert polygon_centroid(square) == (0.5, 0.5)
