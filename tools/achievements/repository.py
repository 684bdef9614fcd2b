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

"""Репозиторий для работы с достижениями (Achievements)."""

from datetime import datetime
from typing import List, Optional, Set
from sqlalchemy.orm import Session

from infrastructure.database.models import AchievementRecord
from infrastructure.logging.logger import setup_logger
from tools.achievements.catalog import AchievementDefinition

logger = setup_logger("achievement_repository")


class AchievementRepository:
    """Репозиторий для работы с достижениями пользователя."""

    def __init__(self, session: Session):
        self.session = session

    def get_all(self, owner_id: str) -> List[AchievementRecord]:
        """
        Получает все открытые достижения пользователя.

        Args:
            owner_id: ID пользователя

        Returns:
            Список достижений в порядке открытия
        """
        return (
            self.session.query(AchievementRecord)
            .filter(AchievementRecord.owner_id == owner_id)
            .order_by(AchievementRecord.unlocked_at)
            .all()
        )

    def unlocked_codes(self, owner_id: str) -> Set[str]:
        rows = (
            self.session.query(AchievementRecord.code)
            .filter(AchievementRecord.owner_id == owner_id)
            .all()
        )
        return {code for (code,) in rows}

    def unlock(self, owner_id: str, definition: AchievementDefinition) -> Optional[AchievementRecord]:
        """
        Открывает достижение, если его ещё нет у пользователя.
        Возвращает созданный объект или None.
        """
        existing = (
            self.session.query(AchievementRecord)
            .filter_by(owner_id=owner_id, code=definition.code)
            .first()
        )
        if existing:
            return None

        record = AchievementRecord(
            owner_id=owner_id,
            code=definition.code,
            name=definition.name,
            description=definition.description,
            icon=definition.icon,
            paws_reward=definition.paws_reward,
            unlocked_at=datetime.utcnow(),
        )
        self.session.add(record)
        # не коммитим здесь – пусть вызывающий решает
        logger.info("Достижение открыто: owner=%s, code=%s", owner_id, definition.code)
        return record
