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

"""Репозиторий собак и их совладельцев."""

from typing import List
from sqlalchemy.orm import Session

from infrastructure.database.models import Dog, DogOwner
from infrastructure.database.repositories.base import BaseRepository


class DogRepository(BaseRepository[Dog]):

    def __init__(self, session: Session):
        super().__init__(session, Dog)

    def is_owner(self, dog_id: str, user_id: str) -> bool:
        """Является ли пользователь владельцем или совладельцем собаки."""
        return self.session.get(DogOwner, (dog_id, user_id)) is not None

    def dogs_of(self, user_id: str) -> List[Dog]:
        return (
            self.session.query(Dog)
            .join(DogOwner, DogOwner.dog_id == Dog.id)
            .filter(DogOwner.user_id == user_id)
            .all()
        )
