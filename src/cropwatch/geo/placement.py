"""
Farm Placement Generator

Rejection sampling of farm centers inside a region boundary, with a minimum
separation between centers, and a slightly skewed square plot per farm.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from ..errors import ValidationError
from .geometry import Coordinate, coordinate_distance, point_in_polygon, polygon_bounds

logger = logging.getLogger(__name__)

METERS_PER_DEGREE_LAT = 111_000.0
METERS_PER_DEGREE_LNG = 106_000.0  # at ~16.7 degrees north
MIN_SKEW = 0.7
MAX_SKEW = 1.3
DEFAULT_AREA = 2.5
RANDOM_AREA_RANGE = (1.5, 5.0)

AreaSpec = Union[None, float, Sequence[float]]


@dataclass(frozen=True)
class Placement:
    """A generated farm location."""
    center: Coordinate
    polygon: List[Coordinate]
    area: float  # hectares


def generate_farm_plot(
    center: Coordinate,
    area: float,
    rng: Optional[np.random.Generator] = None,
) -> List[Coordinate]:
    """
    Build a four-vertex plot of roughly ``area`` hectares around a center.

    Each vertex has one coordinate pushed in or out by its own skew factor
    drawn from [0.7, 1.3], so plots are not perfect squares.
    """
    if area <= 0:
        raise ValidationError(f"Plot area must be positive: {area}", field="area")
    rng = rng if rng is not None else np.random.default_rng()

    side_m = math.sqrt(area * 10_000)
    lat_offset = side_m / 2 / METERS_PER_DEGREE_LAT
    lng_offset = side_m / 2 / METERS_PER_DEGREE_LNG
    skew = rng.uniform(MIN_SKEW, MAX_SKEW, size=4)
    lat, lng = center

    return [
        (lat - lat_offset, lng - lng_offset * skew[0]),
        (lat - lat_offset * skew[1], lng + lng_offset),
        (lat + lat_offset, lng + lng_offset * skew[2]),
        (lat + lat_offset * skew[3], lng - lng_offset),
    ]


def _area_for(index: int, area: AreaSpec, rng: np.random.Generator) -> float:
    if area is None:
        return round(float(rng.uniform(*RANDOM_AREA_RANGE)), 1)
    if isinstance(area, (int, float)):
        return float(area)
    return float(area[index]) if index < len(area) else DEFAULT_AREA


def generate_placements(
    count: int,
    boundary: Sequence[Coordinate],
    area: AreaSpec = None,
    min_distance: float = 0.0005,
    attempts_per_farm: int = 150,
    rng: Optional[np.random.Generator] = None,
) -> List[Placement]:
    """
    Place up to ``count`` farms inside ``boundary``.

    Candidate centers are drawn uniformly from the boundary's bounding box
    and rejected when they fall outside the polygon or within
    ``min_distance`` degrees of an accepted center. Sampling stops after
    ``count * attempts_per_farm`` draws.

    Args:
        count: Number of farms wanted
        boundary: Region polygon in ``(lat, lng)``
        area: None for random 1.5-5.0 ha plots, one area for all farms,
            or a per-farm sequence (missing entries get 2.5 ha)
        min_distance: Minimum separation between centers, in degrees
        attempts_per_farm: Attempt budget multiplier
        rng: Random generator, seed it for reproducible placements

    Returns:
        The accepted placements. May be shorter than ``count`` when the
        attempt budget runs out.
    """
    if count < 0:
        raise ValidationError(f"Farm count must be >= 0: {count}", field="count")
    rng = rng if rng is not None else np.random.default_rng()
    bounds = polygon_bounds(boundary)

    placements: List[Placement] = []
    max_attempts = count * attempts_per_farm
    attempts = 0

    while len(placements) < count and attempts < max_attempts:
        attempts += 1
        point = (
            float(rng.uniform(bounds.min_lat, bounds.max_lat)),
            float(rng.uniform(bounds.min_lng, bounds.max_lng)),
        )
        if not point_in_polygon(point, boundary):
            continue
        if any(coordinate_distance(point, p.center) < min_distance for p in placements):
            continue

        plot_area = _area_for(len(placements), area, rng)
        placements.append(Placement(
            center=point,
            polygon=generate_farm_plot(point, plot_area, rng),
            area=plot_area,
        ))

    if len(placements) < count:
        logger.warning(
            "Placed %d of %d farms after %d attempts",
            len(placements), count, attempts,
        )
    else:
        logger.debug("Placed %d farms in %d attempts", count, attempts)
    return placements
