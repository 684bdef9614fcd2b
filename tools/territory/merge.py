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
Слияние нового полигона прогулки с накопленной территорией собаки.

Прирост считается как площадь той части объединения, которой не было
в прежней территории, а не как площадь нового полигона: перекрытие с уже
завоёванным не оплачивается повторно. Площадь разности, а не разность
площадей: на высоких широтах поправка на широту у объединения и у
прежней территории разная, и разность площадей дала бы ложный прирост.

Главное правило: при любой ошибке объединения территория остаётся
прежней, прирост равен нулю. Территория не уменьшается и не портится.
"""

from dataclasses import dataclass
from typing import Optional

from shapely.errors import GEOSException
from shapely.ops import unary_union

from infrastructure.logging.logger import setup_logger
from tools.territory.exceptions import MergeFailure
from tools.territory.geo import territory_area_km2
from tools.territory.models import Polygon, Territory, TerritoryDelta

logger = setup_logger("territory_merge")

# Допуск на погрешность объединения, ниже которого "усадка" считается шумом.
# Сравнение в квадратных градусах: поправка на широту тут не участвует.
SHRINK_ABS_TOLERANCE_DEG2 = 1e-13
SHRINK_REL_TOLERANCE = 1e-6


@dataclass(frozen=True)
class MergeResult:
    merged: Territory
    incremental_area_km2: float
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def delta(self, new_polygon: Polygon) -> TerritoryDelta:
        return TerritoryDelta(new_polygon=new_polygon, incremental_area_km2=self.incremental_area_km2)


def _union(existing: Territory, new_polygon: Polygon) -> Territory:
    try:
        union = unary_union([existing.geometry, new_polygon.to_shape()])
        merged = Territory(union)
    except (GEOSException, ValueError) as exc:
        raise MergeFailure(f"union failed: {exc}", original_error=exc) from exc

    if merged.is_empty:
        raise MergeFailure("union produced an empty geometry")
    if not merged.geometry.is_valid:
        raise MergeFailure("union produced an invalid geometry")

    before, after = existing.geometry.area, merged.geometry.area
    tolerance = SHRINK_ABS_TOLERANCE_DEG2 + before * SHRINK_REL_TOLERANCE
    if after < before - tolerance:
        raise MergeFailure(
            f"union shrank territory: {existing.area_km2:.8f} -> {merged.area_km2:.8f} km²"
        )
    return merged


def merge_territory(existing: Optional[Territory], new_polygon: Polygon) -> MergeResult:
    """
    Объединяет территорию с новым полигоном.

    Args:
        existing: Текущая территория собаки (None или пустая, если её ещё нет)
        new_polygon: Проверенный полигон прогулки

    Returns:
        MergeResult: новая территория и прирост площади (км², >= 0).
        При ошибке объединения merged — это existing, прирост 0, error заполнен.
    """
    if existing is None or existing.is_empty:
        return MergeResult(
            merged=Territory.from_polygon(new_polygon),
            incremental_area_km2=new_polygon.area_km2,
        )

    try:
        if existing.covers(new_polygon):
            logger.debug("Полигон целиком внутри территории, прироста нет")
            return MergeResult(merged=existing, incremental_area_km2=0.0)

        merged = _union(existing, new_polygon)
        gained = merged.geometry.difference(existing.geometry)
    except MergeFailure as exc:
        logger.warning("Слияние территории не удалось, территория сохранена: %s", exc.message)
        return MergeResult(merged=existing, incremental_area_km2=0.0, error=exc.message)
    except GEOSException as exc:
        # covers() или difference() на битой геометрии из БД
        logger.warning("Слияние территории не удалось, территория сохранена: %s", exc)
        return MergeResult(merged=existing, incremental_area_km2=0.0, error=str(exc))

    incremental = max(0.0, territory_area_km2(gained))
    logger.info(
        "Территория объединена: частей=%d, площадь %.6f -> %.6f км², прирост %.6f км²",
        len(merged.polygons),
        existing.area_km2,
        merged.area_km2,
        incremental,
    )
    return MergeResult(merged=merged, incremental_area_km2=incremental)
