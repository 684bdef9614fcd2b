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

"""Репозиторий для работы с сессиями прогулок и точками трека."""

from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from infrastructure.database.models import WalkPointRecord, WalkSessionRecord
from infrastructure.database.repositories.base import BaseRepository
from infrastructure.logging.logger import setup_logger
from models.walk_enums import WalkStatus
from tools.territory.models import WalkPoint, WalkSession

logger = setup_logger("walk_session_repository")


class WalkSessionRepository(BaseRepository[WalkSessionRecord]):
    """Репозиторий для работы с прогулками собак."""

    def __init__(self, session: Session):
        super().__init__(session, WalkSessionRecord)

    def upsert(self, walk: WalkSession) -> WalkSessionRecord:
        """
        Создаёт или обновляет прогулку по доменному объекту.

        Args:
            walk: Доменная сессия прогулки из оркестратора

        Returns:
            ORM-запись (flush без коммита)
        """
        record = self.get(walk.id)
        if record is None:
            record = WalkSessionRecord(id=walk.id)
            self.session.add(record)

        record.dog_id = walk.dog_id
        record.owner_id = walk.owner_id
        record.started_at = walk.started_at
        record.ended_at = walk.ended_at
        record.status = walk.status.value
        record.distance_km = walk.distance_km
        record.territory_gained_km2 = walk.territory_gained_km2
        record.points_count = walk.points_count
        self.session.flush()

        logger.info(f"Прогулка сохранена: id={walk.id}, dog_id={walk.dog_id}, status={walk.status.value}")
        return record

    def add_points(self, points: Iterable[WalkPoint]) -> int:
        """Дописывает точки трека. Возвращает количество добавленных."""
        records = [
            WalkPointRecord(
                session_id=p.session_id,
                dog_id=p.dog_id,
                lat=p.coordinate.latitude,
                lon=p.coordinate.longitude,
                timestamp=p.timestamp,
            )
            for p in points
        ]
        self.session.add_all(records)
        self.session.flush()
        return len(records)

    def get_for_dog(
        self,
        dog_id: str,
        limit: int = 10,
        status: Optional[WalkStatus] = None,
    ) -> List[WalkSessionRecord]:
        """Последние прогулки собаки, новые сверху."""
        query = (
            self.session.query(WalkSessionRecord)
            .filter(WalkSessionRecord.dog_id == dog_id)
        )
        if status is not None:
            query = query.filter(WalkSessionRecord.status == status.value)
        return query.order_by(WalkSessionRecord.started_at.desc()).limit(limit).all()

    def get_points(self, session_id: str) -> List[WalkPointRecord]:
        """Получает все точки маршрута для прогулки."""
        return (
            self.session.query(WalkPointRecord)
            .filter(WalkPointRecord.session_id == session_id)
            .order_by(WalkPointRecord.timestamp)
            .all()
        )

    def _totals(self, *criteria) -> Dict[str, float]:
        walks, distance = (
            self.session.query(
                func.count(WalkSessionRecord.id),
                func.coalesce(func.sum(WalkSessionRecord.distance_km), 0.0),
            )
            .filter(WalkSessionRecord.status == WalkStatus.COMPLETED.value, *criteria)
            .one()
        )
        return {"walks": int(walks or 0), "distance_km": float(distance or 0.0)}

    def totals_for_dog(self, dog_id: str) -> Dict[str, float]:
        """Количество завершённых прогулок и суммарная дистанция собаки."""
        return self._totals(WalkSessionRecord.dog_id == dog_id)

    def totals_for_owner(self, owner_id: str) -> Dict[str, float]:
        """Количество завершённых прогулок и суммарная дистанция хозяина."""
        return self._totals(WalkSessionRecord.owner_id == owner_id)
