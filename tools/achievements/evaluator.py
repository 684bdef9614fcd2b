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

"""Чекер достижений после завершения прогулки."""

from typing import Dict, List, Optional

from infrastructure.database.models import AchievementRecord
from infrastructure.database.session import Database
from infrastructure.logging.logger import setup_logger
from tools.achievements.catalog import (
    CATALOG,
    METRIC_DISTANCE_KM,
    METRIC_TERRITORY_KM2,
    METRIC_WALK_DISTANCE_KM,
    METRIC_WALKS,
    pending_achievements,
)
from tools.achievements.repository import AchievementRepository
from tools.walks.gateways import CurrencyLedger
from tools.walks.repositories import DogRepository, TerritoryRepository, WalkSessionRepository

logger = setup_logger("achievement_evaluator")


class WalkAchievementEvaluator:
    """AchievementEvaluator: открывает достижения и начисляет за них лапки."""

    def __init__(self, ledger: CurrencyLedger, db: Optional[Database] = None):
        self.ledger = ledger
        self.db = db or Database.get_instance()

    def on_walk_completed(
        self,
        dog_id: str,
        owner_id: str,
        total_territory_km2: float,
        walk_distance_km: float,
    ) -> List[AchievementRecord]:
        """
        Проверяет каталог по итогам прогулки.

        Args:
            dog_id: Собака, которая гуляла
            owner_id: Хозяин, который вёл прогулку
            total_territory_km2: Территория собаки после слияния
            walk_distance_km: Дистанция этой прогулки

        Returns:
            Только что открытые достижения
        """
        with self.db.transaction() as session:
            totals = WalkSessionRepository(session).totals_for_owner(owner_id)
            progress = {
                METRIC_WALKS: totals["walks"],
                METRIC_DISTANCE_KM: totals["distance_km"],
                METRIC_WALK_DISTANCE_KM: walk_distance_km,
                METRIC_TERRITORY_KM2: total_territory_km2,
            }
            repo = AchievementRepository(session)
            unlocked = []
            for definition in pending_achievements(progress, repo.unlocked_codes(owner_id)):
                record = repo.unlock(owner_id, definition)
                if record:
                    unlocked.append(record)

        for record in unlocked:
            if record.paws_reward:
                try:
                    self.ledger.credit_currency(owner_id, record.paws_reward, f"Achievement: {record.name}")
                except Exception as exc:
                    logger.error("Награда за достижение %s не начислена: %s", record.code, exc)

        if unlocked:
            logger.info("dog=%s owner=%s: открыто достижений %d", dog_id, owner_id, len(unlocked))
        return unlocked

    def progress_for_owner(self, owner_id: str) -> List[Dict]:
        """Прогресс по всем достижениям каталога (для экрана достижений)."""
        with self.db.transaction() as session:
            totals = WalkSessionRepository(session).totals_for_owner(owner_id)
            territory_repo = TerritoryRepository(session)
            best_territory = max(
                (territory_repo.get_area(dog.id) for dog in DogRepository(session).dogs_of(owner_id)),
                default=0.0,
            )
            unlocked = {a.code: a for a in AchievementRepository(session).get_all(owner_id)}

        progress = {
            METRIC_WALKS: totals["walks"],
            METRIC_DISTANCE_KM: totals["distance_km"],
            METRIC_TERRITORY_KM2: best_territory,
        }
        items = []
        for definition in CATALOG:
            record = unlocked.get(definition.code)
            # для метрик одной прогулки накопленного значения нет, только факт
            current = progress.get(definition.metric, definition.target if record else 0.0)
            items.append({
                "code": definition.code,
                "name": definition.name,
                "description": definition.description,
                "icon": definition.icon,
                "unit": definition.unit,
                "current_value": current,
                "target_value": definition.target,
                "paws_reward": definition.paws_reward,
                "completed": record is not None,
                "unlocked_at": record.unlocked_at if record else None,
            })
        return items
