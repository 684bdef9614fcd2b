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
Схемы для эндпоинта /walks.

Содержит модели для жизненного цикла прогулки: старт, GPS-точки,
живое превью территории, завершение с наградой и отмена.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from api.schemas.common import CoordinateIn


class WalkStartRequest(BaseModel):
    """
    Запрос на старт прогулки.

    Прогулку ведёт один из (со)владельцев собаки, ему же
    начисляются лапки за завоёванную территорию.
    """
    dog_id: str
    owner_id: str


class WalkPointRequest(CoordinateIn):
    """GPS-точка от трекера геолокации приложения."""
    timestamp: Optional[datetime] = None


class WalkEndRequest(BaseModel):
    """
    Завершение прогулки.

    Attributes:
        record_without_territory: если из точек не получается полигон,
            всё равно сохранить прогулку (дистанция без территории)
    """
    record_without_territory: bool = False


class WalkSessionResponse(BaseModel):
    """Состояние прогулки с превью полигона (для карты)."""
    id: str
    dog_id: str
    owner_id: str
    status: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    distance_km: float
    territory_gained_km2: float
    points_count: int
    preview_polygon: Optional[List[CoordinateIn]] = None


class WalkResultResponse(BaseModel):
    """
    Итог завершённой прогулки.

    Attributes:
        distance_km: Пройденная дистанция.
        territory_gained_km2: Прирост территории (площадь объединения минус прежняя).
        paws_earned: Лапки, одна за квадратный метр прироста.
        total_territory_km2: Территория собаки после прогулки.
        merge_error: Причина, если объединение не удалось и территория не изменилась.
        unlocked_achievements: Достижения, открытые этой прогулкой.
    """
    session_id: str
    distance_km: float
    territory_gained_km2: float
    paws_earned: int
    total_territory_km2: float
    merge_error: Optional[str] = None
    unlocked_achievements: List[str] = Field(default_factory=list)


class WalkHistoryItem(BaseModel):
    """Прогулка из истории собаки (как она записана в БД)."""
    id: str
    dog_id: str
    owner_id: str
    status: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    distance_km: Optional[float] = None
    territory_gained_km2: Optional[float] = None
    points_count: Optional[int] = None

    class Config:
        from_attributes = True


class WalkPointItem(BaseModel):
    """Точка трека прогулки."""
    lat: float
    lon: float
    timestamp: datetime

    class Config:
        from_attributes = True
