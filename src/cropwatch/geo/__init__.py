"""
Geo - farm geometry and placement.
"""

from .geometry import (
    Bounds,
    Coordinate,
    coordinate_distance,
    point_in_polygon,
    polygon_bounds,
    polygon_centroid,
)
from .placement import Placement, generate_farm_plot, generate_placements

__all__ = [
    "Bounds",
    "Coordinate",
    "Placement",
    "coordinate_distance",
    "generate_farm_plot",
    "generate_placements",
    "point_in_polygon",
    "polygon_bounds",
    "polygon_centroid",
]
