"""
Общая база для репозиториев.

Domain-specific репозитории должны находиться в соответствующих tools:
- tools/walks/repositories/
- tools/paws/repository.py
- tools/achievements/repository.py
"""

from .base import BaseRepository

__all__ = [
    "BaseRepository",
]
