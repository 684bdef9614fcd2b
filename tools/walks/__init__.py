"""Walks module - прогулки и завоевание территории."""

from .gateways import AchievementEvaluator, CurrencyLedger, PersistenceGateway
from .locks import DogLockRegistry
from .orchestrator import WalkConfig, WalkResult, WalkSessionOrchestrator, paws_for_area
from .service import TerritoryService

__all__ = [
    # Services
    "TerritoryService",
    "WalkSessionOrchestrator",
    "WalkConfig",
    "WalkResult",
    "DogLockRegistry",
    "paws_for_area",
    # Contracts
    "AchievementEvaluator",
    "CurrencyLedger",
    "PersistenceGateway",
]
