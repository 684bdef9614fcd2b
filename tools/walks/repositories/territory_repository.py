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

"""Репозиторий территорий собак (PostGIS MULTIPOLYGON)."""

from typing import List, Optional, Tuple
from geoalchemy2.shape import from_shape, to_shape
from sqlalchemy.orm import Session

from infrastructure.database.models import Dog, TerritoryRecord
from infrastructure.logging.logger import setup_logger
from tools.territory.models import Territory

logger = setup_logger("territory_repository")

SRID_WGS84 = 4326


class TerritoryRepository:
    """Чтение и запись накопленной территории собаки."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, dog_id: str, for_update: bool = False) -> Optional[Territory]:
        """
        Текущая территория собаки.

        Args:
            dog_id: ID собаки
            for_update: заблокировать строку до конца транзакции

        Returns:
            Territory или None, если собака ещё ничего не завоевала
        """
        query = self.session.query(TerritoryRecord).filter(TerritoryRecord.dog_id == dog_id)
        if for_update:
            query = query.with_for_update()
        record = query.first()
        if record is None or record.geometry is None:
            return None
        return Territory(to_shape(record.geometry))

    def save(self, dog_id: str, territory: Territory) -> Optional[TerritoryRecord]:
        """Перезаписывает территорию собаки. Пустую территорию не пишем."""
        if territory.is_empty:
            return None

        record = self.session.get(TerritoryRecord, dog_id)
        if record is None:
            record = TerritoryRecord(dog_id=dog_id)
            self.session.add(record)

        record.geometry = from_shape(territory.geometry, srid=SRID_WGS84)
        record.area_km2 = territory.area_km2
        self.session.flush()

        logger.debug("Территория сохранена: dog_id=%s, area=%.6f км²", dog_id, territory.area_km2)
        return record

    def get_area(self, dog_id: str) -> float:
        """Размер территории собаки (км²), 0 если нет."""
        area = (
            self.session.query(TerritoryRecord.area_km2)
            .filter(TerritoryRecord.dog_id == dog_id)
            .scalar()
        )
        return float(area or 0.0)

    def leaderboard(self, limit: int = 20) -> List[Tuple[Dog, float]]:
        """Собаки с наибольшей территорией."""
        rows = (
            self.session.query(Dog, TerritoryRecord.area_km2)
            .join(TerritoryRecord, TerritoryRecord.dog_id == Dog.id)
            .order_by(TerritoryRecord.area_km2.desc())
            .limit(limit)
            .all()
        )
        return [(dog, float(area or 0.0)) for dog, area in rows]
