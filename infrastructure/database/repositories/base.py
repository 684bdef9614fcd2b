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
Базовый репозиторий с общими операциями.

Коммит — забота вызывающего (gateway / роутер): репозитории только
добавляют и читают, чтобы несколько репозиториев работали в одной транзакции.
"""

from typing import TypeVar, Generic, Type, Optional
from sqlalchemy.orm import Session

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """Типовые операции над одной ORM-моделью."""

    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model

    def get(self, key) -> Optional[T]:
        """Получает запись по первичному ключу."""
        return self.session.get(self.model, key)

