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
Выпуклая оболочка точек прогулки (монотонная цепочка Эндрю).

Реальный трек шумный и сам себя пересекает, поэтому "завоёванной"
считается выпуклая оболочка: простой полигон, который можно
объединять с территорией. Для петлистых прогулок площадь завышается.

Результат не зависит от порядка входных точек: обход против часовой
стрелки, начиная с вершины с наименьшими (lon, lat).
"""

from typing import Iterable, List, Optional, Tuple

from tools.territory.models import Coordinate, Polygon

DUPLICATE_VERTEX_TOLERANCE_DEG = 1e-7

Point = Tuple[float, float]


def _cross(o: Point, a: Point, b: Point) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _half_hull(points: Iterable[Point]) -> List[Point]:
    chain: List[Point] = []
    for p in points:
        # <= 0 выкидывает и коллинеарные точки на границе
        while len(chain) >= 2 and _cross(chain[-2], chain[-1], p) <= 0:
            chain.pop()
        chain.append(p)
    return chain


def _collapse_near_duplicates(hull: List[Point], tolerance: float) -> List[Point]:
    kept: List[Point] = []
    for p in hull:
        if kept and _is_near(kept[-1], p, tolerance):
            continue
        kept.append(p)
    while len(kept) > 1 and _is_near(kept[-1], kept[0], tolerance):
        kept.pop()
    return kept


def _is_near(a: Point, b: Point, tolerance: float) -> bool:
    return abs(a[0] - b[0]) <= tolerance and abs(a[1] - b[1]) <= tolerance


def build_convex_hull(
    points: Iterable[Coordinate],
    tolerance: float = DUPLICATE_VERTEX_TOLERANCE_DEG,
) -> Optional[Polygon]:
    """
    Строит выпуклую оболочку точек.

    Args:
        points: Координаты прогулки в любом порядке
        tolerance: Вершины ближе этого порога (в градусах) склеиваются

    Returns:
        Polygon или None, если различных точек меньше трёх
        или все они лежат на одной прямой
    """
    unique = sorted({p.as_lon_lat() for p in points})
    if len(unique) < 3:
        return None

    lower = _half_hull(unique)
    upper = _half_hull(reversed(unique))
    # концы каждой цепочки совпадают с началом другой
    hull = lower[:-1] + upper[:-1]

    hull = _collapse_near_duplicates(hull, tolerance)
    if len(hull) < 3:
        return None

    return Polygon(tuple(Coordinate(latitude=lat, longitude=lon) for lon, lat in hull))
