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

"""
Геодезические примитивы: расстояние по гаверсинусу и площадь полигона.

Площадь считается на плоскости (формула шнурования в градусах lon/lat),
после чего переводится в км² с поправкой на широту. Это приближение
годится для небольших полигонов (квартал — несколько км). У полюсов
и на больших разбросах долготы оно неточно, и это известное ограничение.
"""

import math
from typing import Iterable, Sequence, Tuple

from shapely.geometry.base import BaseGeometry

EARTH_RADIUS_KM = 6371.0
LAT_DEG_KM = 111.32


def haversine_distance_km(a, b) -> float:
    """
    Расстояние по большому кругу между двумя координатами.

    Args:
        a: Coordinate (latitude, longitude в градусах)
        b: Coordinate

    Returns:
        Расстояние в километрах
    """
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)

    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    # min() защищает asin от 1.0000000000000002
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def path_distance_km(points: Sequence) -> float:
    """Длина ломаной по порядку точек."""
    return sum(
        haversine_distance_km(points[i - 1], points[i])
        for i in range(1, len(points))
    )


def _ring_area_km2(lon_lat: Sequence[Tuple[float, float]], area_weighted: bool = False) -> float:
    """
    Площадь кольца, заданного парами (lon, lat) без замыкающей точки.

    area_weighted=False: поправка по среднему арифметическому широт вершин.
    area_weighted=True: по широте центроида площади. Она не меняется, если
    на сторону добавить промежуточную вершину (так делает GEOS при
    объединении), и площадь объединения не "плывёт" от числа вершин.
    """
    n = len(lon_lat)
    if n < 3:
        return 0.0

    twice_area = 0.0
    moment_lat = 0.0
    for i in range(n):
        x1, y1 = lon_lat[i]
        x2, y2 = lon_lat[(i + 1) % n]
        cross = x1 * y2 - x2 * y1
        twice_area += cross
        moment_lat += (y1 + y2) * cross

    if twice_area == 0.0:
        return 0.0

    if area_weighted:
        latitude = moment_lat / (3.0 * twice_area)
    else:
        latitude = sum(lat for _, lat in lon_lat) / n
    lon_deg_km = LAT_DEG_KM * math.cos(math.radians(latitude))

    return abs(twice_area / 2.0) * LAT_DEG_KM * lon_deg_km


def planar_polygon_area_km2(points: Sequence) -> float:
    """
    Приближённая площадь полигона в км².

    Args:
        points: Вершины полигона (Coordinate), замыкание неявное

    Returns:
        Неотрицательная площадь; 0 если точек меньше трёх
    """
    return _ring_area_km2([(p.longitude, p.latitude) for p in points])


def _open_ring(coords: Iterable[Tuple[float, ...]]) -> list:
    # shapely хранит кольцо замкнутым: последняя точка == первая
    ring = [(c[0], c[1]) for c in coords]
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring.pop()
    return ring


def territory_area_km2(geometry: BaseGeometry) -> float:
    """
    Площадь (мульти)полигона с дырками: сумма по частям (внешнее кольцо − дырки).

    Единственное каноническое определение "размера территории":
    используется и для наград, и для статистики, и для лидерборда.
    Кольца масштабируются по широте центроида, см. _ring_area_km2.
    """
    if geometry is None or geometry.is_empty:
        return 0.0

    parts = getattr(geometry, "geoms", [geometry])
    total = 0.0
    for part in parts:
        if part.geom_type == "MultiPolygon":
            total += territory_area_km2(part)
            continue
        if part.geom_type != "Polygon":
            continue
        area = _ring_area_km2(_open_ring(part.exterior.coords), area_weighted=True)
        for hole in part.interiors:
            area -= _ring_area_km2(_open_ring(hole.coords), area_weighted=True)
        total += max(area, 0.0)
    return total
