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
Схемы для территории, статистики и лидерборда.

Размер территории везде один и тот же: площадь объединения
всех прогулок собаки, а не сумма площадей отдельных прогулок.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class TerritoryResponse(BaseModel):
    """
    Территория собаки.

    Attributes:
        dog_id: ID собаки.
        area_km2: Площадь объединения, км².
        polygons_count: Сколько несвязных кусков у территории.
        geojson: MultiPolygon в GeoJSON (координаты lon, lat) или None.
    """
    dog_id: str
    area_km2: float
    polygons_count: int
    geojson: Optional[Dict[str, Any]] = None


class DogStatsResponse(BaseModel):
    dog_id: str
    total_walks: int
    total_distance_km: float
    territory_km2: float


class LeaderboardEntry(BaseModel):
    rank: int
    dog_id: str
    dog_name: str
    territory_km2: float


class LeaderboardResponse(BaseModel):
    items: List[LeaderboardEntry]
