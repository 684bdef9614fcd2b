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
Общие схемы, используемые в нескольких эндпоинтах.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from tools.territory.models import Coordinate, Polygon


class CoordinateIn(BaseModel):
    """
    Географические координаты WGS84 в градусах.

    Диапазоны проверяются здесь же, чтобы невалидная точка
    отсекалась ответом 422 до оркестратора.
    """
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def from_coordinate(cls, coordinate: Coordinate) -> "CoordinateIn":
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)


def polygon_to_schema(polygon: Optional[Polygon]) -> Optional[List[CoordinateIn]]:
    if polygon is None:
        return None
    return [CoordinateIn.from_coordinate(v) for v in polygon]
