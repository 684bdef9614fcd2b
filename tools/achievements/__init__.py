"""Achievements module - достижения и награды за них."""

from .catalog import CATALOG, AchievementDefinition, pending_achievements
from .evaluator import WalkAchievementEvaluator
from .repository import AchievementRepository

__all__ = [
    "CATALOG",
    "AchievementDefinition",
    "AchievementRepository",
    "WalkAchievementEvaluator",
    "pending_achievements",
]
