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

"""Исключения движка территорий и прогулок."""

from typing import Optional


class WalkInputError(Exception):
    """Недопустимый вызов для текущего состояния прогулки (состояние не меняется)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class GeometryDegenerateError(WalkInputError):
    """Из точек прогулки не получается допустимый полигон."""

    def __init__(self, message: str = "Не удалось построить полигон территории из точек прогулки"):
        super().__init__(message)


class MergeFailure(Exception):
    """Ошибка объединения полигонов. Восстановимая: территория остаётся прежней."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class PersistenceError(Exception):
    """Ошибка записи в хранилище. Можно повторить запрос."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class RewardCreditError(Exception):
    """Прогулка сохранена, но лапки не начислены. Повтор через retry_reward()."""

    def __init__(self, session_id: str, amount: int, original_error: Optional[Exception] = None):
        self.session_id = session_id
        self.amount = amount
        self.original_error = original_error
        self.message = f"Не удалось начислить {amount} лапок за прогулку {session_id}"
        super().__init__(self.message)


class DogAccessDenied(Exception):
    """Пользователь не является владельцем собаки."""

    def __init__(self, dog_id: str, owner_id: str):
        self.dog_id = dog_id
        self.owner_id = owner_id
        self.message = f"User {owner_id} is not an owner of dog {dog_id}"
        super().__init__(self.message)


class WalkNotFound(Exception):
    """Активная прогулка не найдена."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.message = f"Walk session {session_id} not found"
        super().__init__(self.message)


class TerritoryConflictError(PersistenceError):
    """Территория собаки изменилась между загрузкой и записью: слияние нужно пересчитать."""

    def __init__(self, dog_id: str):
        self.dog_id = dog_id
        super().__init__(f"Territory of dog {dog_id} changed while merging")
