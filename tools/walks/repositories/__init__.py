"""Репозитории прогулок для работы с БД."""

from .dog_repository import DogRepository
from .territory_repository import TerritoryRepository
from .walk_session_repository import WalkSessionRepository

__all__ = [
    "DogRepository",
    "TerritoryRepository",
    "WalkSessionRepository",
]
