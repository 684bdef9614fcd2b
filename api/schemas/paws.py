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

"""Схемы для лапок и достижений."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class PawsTransactionItem(BaseModel):
    id: int
    type: str
    amount: int
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PawsBalanceResponse(BaseModel):
    owner_id: str
    balance: int
    transactions: List[PawsTransactionItem] = Field(default_factory=list)


class PawsSpendRequest(BaseModel):
    amount: int = Field(..., gt=0)
    description: str = "Spent paws"


class AchievementProgressItem(BaseModel):
    """
    Прогресс по одному достижению каталога.

    Attributes:
        current_value: Текущее значение метрики (прогулки, км, км²).
        target_value: Цель для открытия.
        completed: Открыто ли достижение.
    """
    code: str
    name: str
    description: str
    icon: str
    unit: str
    current_value: float
    target_value: float
    paws_reward: int
    completed: bool
    unlocked_at: Optional[datetime] = None
