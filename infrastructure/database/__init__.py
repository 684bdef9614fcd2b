"""
Database infrastructure package.

Экспортирует основные функции и классы для работы с базой данных.
"""

# Экспортируем Database и модели
from .session import Database
from .models import (
    Base,
    Dog,
    DogOwner,
    WalkSessionRecord,
    WalkPointRecord,
    TerritoryRecord,
    PawsBalance,
    PawsTransaction,
    AchievementRecord,
)

__all__ = [
    # Database
    "Database",
    # Модели
    "Base",
    "Dog",
    "DogOwner",
    "WalkSessionRecord",
    "WalkPointRecord",
    "TerritoryRecord",
    "PawsBalance",
    "PawsTransaction",
    "AchievementRecord",
]
