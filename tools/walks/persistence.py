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

"""PersistenceGateway поверх SQLAlchemy + PostGIS."""

from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from infrastructure.database.session import Database
from infrastructure.logging.logger import setup_logger
from tools.territory.exceptions import PersistenceError, TerritoryConflictError
from tools.territory.models import Territory, WalkPoint, WalkSession
from tools.walks.repositories import DogRepository, TerritoryRepository, WalkSessionRepository

logger = setup_logger("walk_persistence")


class SqlWalkPersistence:
    """
    Каждый метод — отдельная транзакция.

    Ошибки SQLAlchemy откатываются и превращаются в PersistenceError,
    которую оркестратор считает повторяемой.
    """

    def __init__(self, db: Optional[Database] = None):
        self.db = db or Database.get_instance()

    def save_walk_session(self, session: WalkSession) -> None:
        try:
            with self.db.transaction() as db_session:
                WalkSessionRepository(db_session).upsert(session)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Не удалось сохранить прогулку {session.id}", original_error=exc) from exc

    def append_walk_points(self, points: Iterable[WalkPoint]) -> None:
        points = list(points)
        if not points:
            return
        try:
            with self.db.transaction() as db_session:
                WalkSessionRepository(db_session).add_points(points)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Не удалось сохранить {len(points)} точек", original_error=exc) from exc

    def load_territory(self, dog_id: str) -> Optional[Territory]:
        try:
            with self.db.transaction() as db_session:
                return TerritoryRepository(db_session).get(dog_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Не удалось загрузить территорию собаки {dog_id}", original_error=exc) from exc

    def commit_walk(
        self,
        session: WalkSession,
        territory: Territory,
        base: Optional[Territory] = None,
    ) -> None:
        """
        Территория и завершённая прогулка пишутся одной транзакцией.

        Строка территории читается с FOR UPDATE и сверяется с base: если её
        успел переписать другой процесс, транзакция откатывается с
        TerritoryConflictError. Строки ещё нет, блокировать нечего: гонка
        двух первых вставок заканчивается IntegrityError по первичному ключу,
        то есть обычной PersistenceError.
        """
        try:
            with self.db.transaction() as db_session:
                territories = TerritoryRepository(db_session)
                if base is not None:
                    stored = territories.get(session.dog_id, for_update=True) or Territory.empty()
                    if stored != base:
                        raise TerritoryConflictError(session.dog_id)
                territories.save(session.dog_id, territory)
                WalkSessionRepository(db_session).upsert(session)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Не удалось зафиксировать прогулку {session.id}", original_error=exc) from exc

        logger.info(
            "Прогулка %s зафиксирована: территория собаки %s = %.6f км²",
            session.id,
            session.dog_id,
            territory.area_km2,
        )

    def is_dog_owner(self, dog_id: str, owner_id: str) -> bool:
        try:
            with self.db.transaction() as db_session:
                return DogRepository(db_session).is_owner(dog_id, owner_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Не удалось проверить владельца собаки {dog_id}", original_error=exc) from exc
