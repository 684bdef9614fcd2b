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

"""Сервис прогулок: собирает зависимости и держит реестр активных прогулок."""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from infrastructure.logging.logger import setup_logger
from settings import settings
from tools.territory.exceptions import DogAccessDenied, RewardCreditError, WalkInputError, WalkNotFound
from tools.territory.models import Coordinate, Polygon, Territory, WalkSession
from tools.walks.gateways import AchievementEvaluator, CurrencyLedger, PersistenceGateway
from tools.walks.locks import DogLockRegistry
from tools.walks.orchestrator import WalkConfig, WalkResult, WalkSessionOrchestrator

logger = setup_logger("territory_service")


class TerritoryService:
    """
    Точка сборки для прогулок вместо глобальных контекстов.

    Все внешние сервисы передаются через конструктор; одна активная
    прогулка на собаку, слияния одной собаки сериализованы общим
    DogLockRegistry.
    """

    def __init__(
        self,
        persistence: PersistenceGateway,
        ledger: CurrencyLedger,
        achievements: Optional[AchievementEvaluator] = None,
        config: Optional[WalkConfig] = None,
        walk_attempt_cost: Optional[int] = None,
    ):
        """
        Args:
            persistence: Хранилище прогулок и территорий
            ledger: Учёт лапок
            achievements: Проверка достижений (опционально)
            config: Пороги площади и частота превью
            walk_attempt_cost: Стоимость старта прогулки в лапках (0 — бесплатно)
        """
        self.persistence = persistence
        self.ledger = ledger
        self.achievements = achievements
        self.config = config or WalkConfig.from_settings()
        self.walk_attempt_cost = (
            settings.WALK_ATTEMPT_COST_PAWS if walk_attempt_cost is None else walk_attempt_cost
        )
        self.locks = DogLockRegistry()
        self._walks: Dict[str, WalkSessionOrchestrator] = {}
        self._active_by_dog: Dict[str, str] = {}

    async def start_walk(self, dog_id: str, owner_id: str) -> WalkSessionOrchestrator:
        """
        Начинает прогулку собаки.

        Raises:
            DogAccessDenied: пользователь не владелец собаки
            WalkInputError: у собаки уже есть активная прогулка
            InsufficientPawsError: не хватает лапок на попытку
        """
        is_owner = await asyncio.to_thread(self.persistence.is_dog_owner, dog_id, owner_id)
        if not is_owner:
            raise DogAccessDenied(dog_id, owner_id)

        if dog_id in self._active_by_dog:
            raise WalkInputError(f"Dog {dog_id} already has an active walk: {self._active_by_dog[dog_id]}")

        orchestrator = WalkSessionOrchestrator(
            dog_id=dog_id,
            owner_id=owner_id,
            persistence=self.persistence,
            ledger=self.ledger,
            achievements=self.achievements,
            locks=self.locks,
            config=self.config,
        )
        # резервируем собаку до первого await, чтобы два старта не прошли одновременно
        self._active_by_dog[dog_id] = ""
        charged = False
        try:
            if self.walk_attempt_cost > 0:
                await asyncio.to_thread(
                    self.ledger.debit_currency, owner_id, self.walk_attempt_cost, "Walk attempt"
                )
                charged = True
            session = await orchestrator.start_walk()
        except Exception:
            self._active_by_dog.pop(dog_id, None)
            if charged:
                logger.warning("Старт прогулки dog=%s не удался, возвращаем %d лапок", dog_id, self.walk_attempt_cost)
                await asyncio.to_thread(
                    self.ledger.credit_currency, owner_id, self.walk_attempt_cost, "Walk attempt refund"
                )
            raise

        self._walks[session.id] = orchestrator
        self._active_by_dog[dog_id] = session.id
        return orchestrator

    def get_walk(self, session_id: str) -> WalkSessionOrchestrator:
        orchestrator = self._walks.get(session_id)
        if orchestrator is None:
            raise WalkNotFound(session_id)
        return orchestrator

    def active_walks(self) -> List[WalkSession]:
        return [
            self._walks[session_id].session
            for session_id in self._active_by_dog.values()
            if session_id in self._walks
        ]

    async def add_walk_point(
        self,
        session_id: str,
        coordinate: Coordinate,
        timestamp: Optional[datetime] = None,
    ) -> Optional[Polygon]:
        return await self.get_walk(session_id).add_walk_point(coordinate, timestamp)

    async def end_walk(self, session_id: str, record_without_territory: bool = False) -> WalkResult:
        orchestrator = self.get_walk(session_id)
        try:
            result = await orchestrator.end_walk(record_without_territory=record_without_territory)
        except RewardCreditError:
            # прогулка уже завершена, собака свободна для новой
            self._release(orchestrator)
            raise
        self._release(orchestrator)
        return result

    async def retry_reward(self, session_id: str) -> WalkResult:
        orchestrator = self.get_walk(session_id)
        result = await orchestrator.retry_reward()
        self._release(orchestrator)
        return result

    async def cancel_walk(self, session_id: str) -> WalkSession:
        orchestrator = self.get_walk(session_id)
        session = await orchestrator.cancel_walk()
        self._release(orchestrator)
        self._walks.pop(session_id, None)
        return session

    def _release(self, orchestrator: WalkSessionOrchestrator) -> None:
        if self._active_by_dog.get(orchestrator.dog_id) == orchestrator.session.id:
            del self._active_by_dog[orchestrator.dog_id]
        # завершённую прогулку держим, пока лапки не начислены (retry_reward)
        if not orchestrator.reward_pending:
            self._walks.pop(orchestrator.session.id, None)

    async def get_territory(self, dog_id: str) -> Territory:
        territory = await asyncio.to_thread(self.persistence.load_territory, dog_id)
        return territory or Territory.empty()
