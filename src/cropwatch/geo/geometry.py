"""
Geometry Utilities

Planar helpers over ``(lat, lng)`` degree coordinates. Farm plots are a few
hundred metres across, so no projection is applied.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..errors import ValidationError

Coordinate = Tuple[float, float]


def _check_polygon(polygon: Sequence[Coordinate]) -> None:
    if polygon is None or len(polygon) < 3:
        raise ValidationError("A polygon needs at least 3 vertices", field="polygon")


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a polygon."""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return (self.min_lat <= lat <= self.max_lat and
                self.min_lng <= lng <= self.max_lng)

    def center(self) -> Coordinate:
        return ((self.min_lat + self.max_lat) / 2,
                (self.min_lng + self.max_lng) / 2)


def point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    """
    Ray-casting containment test.

    Casts a ray from the point towards increasing latitude and counts the
    polygon edges it crosses; an odd count means the point is inside.

    Args:
        point: ``(lat, lng)`` to test
        polygon: Vertices in boundary order

    Returns:
        True if the point lies inside the polygon

    Raises:
        ValidationError: If the polygon has fewer than 3 vertices
    """
    _check_polygon(polygon)
    lat, lng = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        lat_i, lng_i = polygon[i]
        lat_j, lng_j = polygon[j]
        if (lng_i > lng) != (lng_j > lng):
            crossing_lat = (lat_j - lat_i) * (lng - lng_i) / (lng_j - lng_i) + lat_i
            if lat < crossing_lat:
                inside = not inside
        j = i
    return inside


def polygon_bounds(polygon: Sequence[Coordinate]) -> Bounds:
    _check_polygon(polygon)
    lats = [vertex[0] for vertex in polygon]
    lngs = [vertex[1] for vertex in polygon]
    return Bounds(min(lats), max(lats), min(lngs), max(lngs))


def coordinate_distance(a: Coordinate, b: Coordinate) -> float:
    """Euclidean distance in degrees."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def polygon_centroid(polygon: Sequence[Coordinate]) -> Coordinate:
    """Mean of the vertices."""
    _check_polygon(polygon)
    count = len(polygon)
    return (sum(v[0] for v in polygon) / count,
            sum(v[1] for v in polygon) / count)
