"""
Схемы API для Dote.

Организованы по доменам для удобства навигации и поддержки.

Структура:
- common: Общие схемы (координаты)
- walk_sessions: Схемы для прогулок
- territory: Схемы для территории, статистики и лидерборда
- paws: Схемы для лапок и достижений
"""

# Common
from api.schemas.common import (
    CoordinateIn,
    polygon_to_schema,
)

# Walk Sessions
from api.schemas.walk_sessions import (
    WalkStartRequest,
    WalkPointRequest,
    WalkEndRequest,
    WalkSessionResponse,
    WalkResultResponse,
    WalkHistoryItem,
    WalkPointItem,
)

# Territory
from api.schemas.territory import (
    TerritoryResponse,
    DogStatsResponse,
    LeaderboardEntry,
    LeaderboardResponse,
)

# Paws
from api.schemas.paws import (
    PawsTransactionItem,
    PawsBalanceResponse,
    PawsSpendRequest,
    AchievementProgressItem,
)

__all__ = [
    # Common
    "CoordinateIn",
    "polygon_to_schema",
    # Walk Sessions
    "WalkStartRequest",
    "WalkPointRequest",
    "WalkEndRequest",
    "WalkSessionResponse",
    "WalkResultResponse",
    "WalkHistoryItem",
    "WalkPointItem",
    # Territory
    "TerritoryResponse",
    "DogStatsResponse",
    "LeaderboardEntry",
    "LeaderboardResponse",
    # Paws
    "PawsTransactionItem",
    "PawsBalanceResponse",
    "PawsSpendRequest",
    "AchievementProgressItem",
]
