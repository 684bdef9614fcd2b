"""Territory module - геометрия завоёванной территории."""

from .exceptions import (
    DogAccessDenied,
    GeometryDegenerateError,
    MergeFailure,
    PersistenceError,
    RewardCreditError,
    WalkInputError,
    WalkNotFound,
)
from .geo import (
    haversine_distance_km,
    path_distance_km,
    planar_polygon_area_km2,
    territory_area_km2,
)
from .hull import build_convex_hull
from .merge import MergeResult, merge_territory
from .models import Coordinate, Polygon, Territory, TerritoryDelta, WalkPoint, WalkSession
from .validation import is_valid_polygon, polygon_rejection_reason

__all__ = [
    # Geometry
    "haversine_distance_km",
    "path_distance_km",
    "planar_polygon_area_km2",
    "territory_area_km2",
    "build_convex_hull",
    "is_valid_polygon",
    "polygon_rejection_reason",
    "merge_territory",
    "MergeResult",
    # Models
    "Coordinate",
    "Polygon",
    "Territory",
    "TerritoryDelta",
    "WalkPoint",
    "WalkSession",
    # Exceptions
    "DogAccessDenied",
    "GeometryDegenerateError",
    "MergeFailure",
    "PersistenceError",
    "RewardCreditError",
    "WalkInputError",
    "WalkNotFound",
]
