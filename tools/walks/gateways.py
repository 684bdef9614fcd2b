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
Контракты внешних сервисов, с которыми работает прогулка.

Реализации на SQLAlchemy:
- PersistenceGateway -> tools/walks/persistence.py
- CurrencyLedger -> tools/paws/ledger.py
- AchievementEvaluator -> tools/achievements/evaluator.py

Все методы синхронные: оркестратор вызывает их через asyncio.to_thread.
"""

from typing import Iterable, List, Optional, Protocol

from tools.territory.models import Territory, WalkPoint, WalkSession


class PersistenceGateway(Protocol):

    def save_walk_session(self, session: WalkSession) -> None:
        """Создаёт или обновляет запись прогулки."""

    def append_walk_points(self, points: Iterable[WalkPoint]) -> None:
        """Дописывает точки трека (только добавление)."""

    def load_territory(self, dog_id: str) -> Optional[Territory]:
        """Текущая территория собаки или None."""

    def commit_walk(
        self,
        session: WalkSession,
        territory: Territory,
        base: Optional[Territory] = None,
    ) -> None:
        """
        Одной транзакцией сохраняет территорию и завершённую прогулку.

        base: территория, с которой считалось слияние. Если в хранилище
        уже другая, ничего не пишется и поднимается TerritoryConflictError.
        """

    def is_dog_owner(self, dog_id: str, owner_id: str) -> bool:
        """Является ли пользователь (со)владельцем собаки."""


class CurrencyLedger(Protocol):

    def credit_currency(self, owner_id: str, amount: int, reason: str) -> int:
        """Начисляет лапки, возвращает новый баланс."""

    def debit_currency(self, owner_id: str, amount: int, reason: str) -> int:
        """Списывает лапки, возвращает новый баланс."""


class AchievementEvaluator(Protocol):

    def on_walk_completed(
        self,
        dog_id: str,
        owner_id: str,
        total_territory_km2: float,
        walk_distance_km: float,
    ) -> List:
        """Сообщает итоги прогулки, возвращает разблокированные достижения."""
