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

"""Проверка полигона прогулки перед превью и слиянием."""

from typing import Optional

from tools.territory.geo import planar_polygon_area_km2
from tools.territory.hull import DUPLICATE_VERTEX_TOLERANCE_DEG

# ~100 м²: меньше — шум GPS на месте
DEFAULT_MIN_AREA_KM2 = 1e-4
# больше — скорее всего скачок GPS, а не прогулка
DEFAULT_MAX_AREA_KM2 = 50.0


def polygon_rejection_reason(
    polygon,
    min_area_km2: float = DEFAULT_MIN_AREA_KM2,
    max_area_km2: float = DEFAULT_MAX_AREA_KM2,
    tolerance: float = DUPLICATE_VERTEX_TOLERANCE_DEG,
) -> Optional[str]:
    """
    Возвращает причину отказа или None, если полигон допустим.

    Полигон вне диапазона площадей отклоняется, а не обрезается.
    """
    if polygon is None:
        return "no polygon"

    vertices = list(polygon)
    if len(vertices) < 3:
        return f"too few vertices: {len(vertices)}"

    for i, current in enumerate(vertices):
        following = vertices[(i + 1) % len(vertices)]
        if (
            abs(current.latitude - following.latitude) <= tolerance
            and abs(current.longitude - following.longitude) <= tolerance
        ):
            return f"duplicate consecutive vertices at index {i}"

    area = planar_polygon_area_km2(vertices)
    if area <= min_area_km2:
        return f"area {area:.8f} km² not above minimum {min_area_km2}"
    if area > max_area_km2:
        return f"area {area:.3f} km² above maximum {max_area_km2}"

    return None


def is_valid_polygon(
    polygon,
    min_area_km2: float = DEFAULT_MIN_AREA_KM2,
    max_area_km2: float = DEFAULT_MAX_AREA_KM2,
) -> bool:
    """Единственный фильтр перед превью и перед слиянием с территорией."""
    return polygon_rejection_reason(polygon, min_area_km2, max_area_km2) is None
