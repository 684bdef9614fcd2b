# Dote - dog walking territory game backend
# Copyright (C) 2025-2026 Dote contributors

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.

"""Доменные типы территорий и прогулок."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import MultiPolygon, mapping, shape
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry

from models.walk_enums import WalkStatus
from tools.territory.geo import planar_polygon_area_km2, territory_area_km2


@dataclass(frozen=True)
class Coordinate:
    """Точка WGS84 в градусах."""
    latitude: float
    longitude: float

    def __post_init__(self):
        # NaN не проходит ни одно сравнение и отсекается здесь же
        if not (-90.0 <= self.latitude <= 90.0):
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not (-180.0 <= self.longitude <= 180.0):
            raise ValueError(f"longitude out of range: {self.longitude}")

    def as_lon_lat(self) -> Tuple[float, float]:
        return self.longitude, self.latitude


@dataclass(frozen=True)
class Polygon:
    """
    Полигон прогулки: упорядоченные вершины, замыкание неявное.

    Корректность (площадь, дубликаты вершин) проверяет
    tools.territory.validation, конструктор требует только >= 3 вершин.
    """
    vertices: Tuple[Coordinate, ...]

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(self.vertices))
        if len(self.vertices) < 3:
            raise ValueError(f"Polygon needs at least 3 vertices, got {len(self.vertices)}")

    def __len__(self) -> int:
        return len(self.vertices)

    def __iter__(self):
        return iter(self.vertices)

    @property
    def area_km2(self) -> float:
        return planar_polygon_area_km2(self.vertices)

    def to_shape(self) -> ShapelyPolygon:
        return ShapelyPolygon([v.as_lon_lat() for v in self.vertices])

    def to_geojson(self) -> Dict[str, Any]:
        return mapping(self.to_shape())


def _as_multipolygon(geometry: Optional[BaseGeometry]) -> MultiPolygon:
    if geometry is None or geometry.is_empty:
        return MultiPolygon()
    if geometry.geom_type == "MultiPolygon":
        return geometry
    if geometry.geom_type == "Polygon":
        return MultiPolygon([geometry])
    if geometry.geom_type == "GeometryCollection":
        polygons: List[ShapelyPolygon] = []
        for part in geometry.geoms:
            if part.is_empty:
                continue
            if part.geom_type == "Polygon":
                polygons.append(part)
            elif part.geom_type == "MultiPolygon":
                polygons.extend(part.geoms)
        return MultiPolygon(polygons)
    raise ValueError(f"Territory must be polygonal, got {geometry.geom_type}")


class Territory:
    """
    Накопленная территория собаки: один полигон или мультиполигон.

    Объект неизменяемый; новую территорию создаёт только движок слияния.
    """

    def __init__(self, geometry: Optional[BaseGeometry] = None):
        self._geometry = _as_multipolygon(geometry)
        self._area_km2 = territory_area_km2(self._geometry)

    @classmethod
    def empty(cls) -> "Territory":
        return cls(None)

    @classmethod
    def from_polygon(cls, polygon: Polygon) -> "Territory":
        return cls(polygon.to_shape())

    @classmethod
    def from_geojson(cls, data: Optional[Dict[str, Any]]) -> "Territory":
        if not data:
            return cls.empty()
        return cls(shape(data))

    @property
    def geometry(self) -> MultiPolygon:
        return self._geometry

    @property
    def polygons(self) -> List[ShapelyPolygon]:
        return list(self._geometry.geoms)

    @property
    def is_empty(self) -> bool:
        return self._geometry.is_empty

    @property
    def area_km2(self) -> float:
        return self._area_km2

    def covers(self, polygon: Polygon) -> bool:
        if self.is_empty:
            return False
        return self._geometry.covers(polygon.to_shape())

    def to_geojson(self) -> Dict[str, Any]:
        return mapping(self._geometry)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Territory):
            return NotImplemented
        if self.is_empty or other.is_empty:
            return self.is_empty and other.is_empty
        return self._geometry.equals(other._geometry)

    __hash__ = None

    def __repr__(self):
        return f"<Territory polygons={len(self._geometry.geoms)} area_km2={self._area_km2:.6f}>"


@dataclass(frozen=True)
class TerritoryDelta:
    """Вклад одной прогулки в территорию."""
    new_polygon: Polygon
    incremental_area_km2: float


@dataclass(frozen=True)
class WalkPoint:
    """GPS-точка прогулки. Только добавляется, никогда не меняется."""
    coordinate: Coordinate
    timestamp: datetime
    session_id: str
    dog_id: str


@dataclass
class WalkSession:
    id: str
    dog_id: str
    owner_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    status: WalkStatus = WalkStatus.ACTIVE
    distance_km: float = 0.0
    territory_gained_km2: float = 0.0
    points_count: int = 0
