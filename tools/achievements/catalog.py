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
Каталог достижений.

Метрики:
- walks — завершённые прогулки хозяина
- distance_km — суммарная дистанция хозяина
- walk_distance_km — дистанция одной прогулки
- territory_km2 — территория собаки (площадь объединения, не сумма прогулок)
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set

METRIC_WALKS = "walks"
METRIC_DISTANCE_KM = "distance_km"
METRIC_WALK_DISTANCE_KM = "walk_distance_km"
METRIC_TERRITORY_KM2 = "territory_km2"


@dataclass(frozen=True)
class AchievementDefinition:
    code: str
    name: str
    description: str
    metric: str
    target: float
    unit: str
    paws_reward: int
    icon: str


CATALOG: List[AchievementDefinition] = [
    AchievementDefinition(
        code="first_walk",
        name="First Walk",
        description="Complete your first walk",
        metric=METRIC_WALKS,
        target=1,
        unit="walks",
        paws_reward=50,
        icon="first_walk",
    ),
    AchievementDefinition(
        code="five_walks",
        name="Getting Into It",
        description="Complete 5 walks",
        metric=METRIC_WALKS,
        target=5,
        unit="walks",
        paws_reward=100,
        icon="five_walks",
    ),
    AchievementDefinition(
        code="first_km",
        name="First Kilometer",
        description="Walk a total of 1 kilometer",
        metric=METRIC_DISTANCE_KM,
        target=1.0,
        unit="km",
        paws_reward=50,
        icon="1km",
    ),
    AchievementDefinition(
        code="marathon_runner",
        name="Marathon Runner",
        description="Walk a total of 42.2 kilometers",
        metric=METRIC_DISTANCE_KM,
        target=42.2,
        unit="km",
        paws_reward=500,
        icon="marathon",
    ),
    AchievementDefinition(
        code="long_walk",
        name="Long Walk",
        description="Walk more than 3 km in a single walk",
        metric=METRIC_WALK_DISTANCE_KM,
        target=3.0,
        unit="km",
        paws_reward=75,
        icon="long_walk",
    ),
    AchievementDefinition(
        code="land_baron",
        name="Land Baron",
        description="Claim 1 km² of territory",
        metric=METRIC_TERRITORY_KM2,
        target=1.0,
        unit="km²",
        paws_reward=150,
        icon="land_baron",
    ),
    AchievementDefinition(
        code="territory_king",
        name="Territory King",
        description="Claim 10 km² of territory",
        metric=METRIC_TERRITORY_KM2,
        target=10.0,
        unit="km²",
        paws_reward=200,
        icon="territory_king",
    ),
]

def pending_achievements(
    progress: Dict[str, float],
    unlocked_codes: Set[str],
    catalog: Iterable[AchievementDefinition] = CATALOG,
) -> List[AchievementDefinition]:
    """Достижения, цель которых достигнута, но которые ещё не открыты."""
    return [
        a for a in catalog
        if a.code not in unlocked_codes and progress.get(a.metric, 0.0) >= a.target
    ]
