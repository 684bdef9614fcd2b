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
Оркестратор одной прогулки.

Состояния: Idle -> Active -> Completed | Cancelled.
Completed и Cancelled конечные: любые дальнейшие вызовы дают WalkInputError.

Все изменения буфера точек идут под asyncio.Lock, поэтому точки из
асинхронных колбэков геолокации не перемешиваются. Слияние территории
выполняется в рабочем потоке под замком собаки (DogLockRegistry).
"""

import asyncio
import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from infrastructure.logging.logger import setup_logger
from models.walk_enums import WalkStatus
from settings import settings
from tools.territory.exceptions import (
    GeometryDegenerateError,
    PersistenceError,
    RewardCreditError,
    TerritoryConflictError,
    WalkInputError,
)
from tools.territory.geo import haversine_distance_km
from tools.territory.hull import build_convex_hull
from tools.territory.merge import MergeResult, merge_territory
from tools.territory.models import Coordinate, Polygon, Territory, WalkPoint, WalkSession
from tools.territory.validation import polygon_rejection_reason
from tools.walks.gateways import AchievementEvaluator, CurrencyLedger, PersistenceGateway
from tools.walks.locks import DogLockRegistry

logger = setup_logger("walk_orchestrator")

MIN_WALK_POINTS = 3
PAWS_PER_KM2 = 1_000_000  # одна лапка за квадратный метр
MERGE_CONFLICT_RETRIES = 3


def paws_for_area(area_km2: float) -> int:
    return math.floor(area_km2 * PAWS_PER_KM2)


@dataclass(frozen=True)
class WalkConfig:
    min_area_km2: float = 1e-4
    max_area_km2: float = 50.0
    preview_every: int = 1

    @classmethod
    def from_settings(cls) -> "WalkConfig":
        return cls(
            min_area_km2=settings.MIN_POLYGON_AREA_KM2,
            max_area_km2=settings.MAX_POLYGON_AREA_KM2,
            preview_every=max(1, settings.PREVIEW_RECOMPUTE_EVERY),
        )


@dataclass(frozen=True)
class WalkResult:
    session_id: str
    distance_km: float
    territory_gained_km2: float
    paws_earned: int
    total_territory_km2: float
    merge_error: Optional[str] = None
    unlocked_achievements: Tuple[str, ...] = ()


@dataclass(frozen=True)
class _PendingMerge:
    """Результат слияния, ещё не подтверждённый хранилищем."""
    base: Territory
    polygon: Optional[Polygon]
    result: MergeResult


class WalkSessionOrchestrator:
    """Ведёт одну прогулку одной собаки от старта до завершения или отмены."""

    def __init__(
        self,
        dog_id: str,
        owner_id: str,
        persistence: PersistenceGateway,
        ledger: CurrencyLedger,
        achievements: Optional[AchievementEvaluator] = None,
        locks: Optional[DogLockRegistry] = None,
        config: Optional[WalkConfig] = None,
    ):
        self.dog_id = dog_id
        self.owner_id = owner_id
        self.persistence = persistence
        self.ledger = ledger
        self.achievements = achievements
        self.locks = locks or DogLockRegistry()
        self.config = config or WalkConfig.from_settings()

        self._lock = asyncio.Lock()
        self._session: Optional[WalkSession] = None
        self._points: List[WalkPoint] = []
        self._unsynced: List[WalkPoint] = []
        self._distance_km = 0.0
        self._preview: Optional[Polygon] = None
        self._ending = False
        self._pending: Optional[_PendingMerge] = None
        self._result: Optional[WalkResult] = None
        self._reward_pending = False

    # --- состояние ---

    @property
    def session(self) -> Optional[WalkSession]:
        return self._session

    @property
    def status(self) -> Optional[WalkStatus]:
        """None — прогулка ещё не начата (Idle)."""
        return self._session.status if self._session else None

    @property
    def points(self) -> Tuple[WalkPoint, ...]:
        return tuple(self._points)

    @property
    def distance_km(self) -> float:
        return self._distance_km

    @property
    def preview_polygon(self) -> Optional[Polygon]:
        return self._preview

    @property
    def result(self) -> Optional[WalkResult]:
        return self._result

    @property
    def reward_pending(self) -> bool:
        return self._reward_pending

    def _require_active(self, action: str) -> WalkSession:
        if self._session is None:
            raise WalkInputError(f"Cannot {action}: walk has not been started")
        if self._session.status is not WalkStatus.ACTIVE:
            raise WalkInputError(f"Cannot {action}: walk is {self._session.status.value}")
        if self._ending:
            raise WalkInputError(f"Cannot {action}: walk is being completed")
        return self._session

    # --- переходы ---

    async def start_walk(self) -> WalkSession:
        """Idle -> Active. При ошибке хранилища остаёмся в Idle."""
        async with self._lock:
            if self._session is not None:
                raise WalkInputError(f"Walk already started: {self._session.id}")

            self._points.clear()
            self._unsynced.clear()
            self._distance_km = 0.0
            self._preview = None

            session = WalkSession(
                id=str(uuid.uuid4()),
                dog_id=self.dog_id,
                owner_id=self.owner_id,
                started_at=datetime.now(timezone.utc),
            )
            await asyncio.to_thread(self.persistence.save_walk_session, session)
            self._session = session

        logger.info("Прогулка начата: session=%s dog=%s owner=%s", session.id, self.dog_id, self.owner_id)
        return session

    async def add_walk_point(
        self,
        coordinate: Coordinate,
        timestamp: Optional[datetime] = None,
    ) -> Optional[Polygon]:
        """
        Active -> Active: добавляет GPS-точку.

        Returns:
            Текущий полигон превью или None, если валидного полигона пока нет
        """
        async with self._lock:
            session = self._require_active("add walk point")

            point = WalkPoint(
                coordinate=coordinate,
                timestamp=timestamp or datetime.now(timezone.utc),
                session_id=session.id,
                dog_id=self.dog_id,
            )
            if self._points:
                self._distance_km += haversine_distance_km(self._points[-1].coordinate, coordinate)
            self._points.append(point)
            self._unsynced.append(point)

            session.points_count = len(self._points)
            session.distance_km = self._distance_km

            count = len(self._points)
            if count < MIN_WALK_POINTS:
                self._preview = None
            elif (count - MIN_WALK_POINTS) % self.config.preview_every == 0:
                self._preview = self._build_preview()

            await self._flush_points(strict=False)
            return self._preview

    def _build_preview(self) -> Optional[Polygon]:
        hull = build_convex_hull(p.coordinate for p in self._points)
        reason = polygon_rejection_reason(hull, self.config.min_area_km2, self.config.max_area_km2)
        if reason:
            logger.debug("Превью скрыто (%s): %s", self._session.id, reason)
            return None
        return hull

    async def _flush_points(self, strict: bool) -> None:
        if not self._unsynced:
            return
        batch = list(self._unsynced)
        try:
            await asyncio.to_thread(self.persistence.append_walk_points, batch)
        except PersistenceError as exc:
            if strict:
                raise
            logger.warning(
                "Не удалось сохранить %d точек прогулки %s, повторим позже: %s",
                len(batch),
                self._session.id,
                exc.message,
            )
            return
        del self._unsynced[:len(batch)]

    async def end_walk(self, record_without_territory: bool = False) -> WalkResult:
        """
        Active -> Completed.

        Args:
            record_without_territory: если финальный полигон невалиден,
                всё равно завершить прогулку (только дистанция, без территории)

        Raises:
            WalkInputError: прогулка не активна или точек меньше трёх
            GeometryDegenerateError: финальный полигон невалиден
            PersistenceError: хранилище не приняло результат, прогулка остаётся активной
            RewardCreditError: прогулка завершена, но лапки не начислены
        """
        async with self._lock:
            session = self._require_active("end walk")

            if len(self._points) < MIN_WALK_POINTS:
                raise WalkInputError(
                    f"Walk too short: {len(self._points)} points, need at least {MIN_WALK_POINTS}"
                )

            # финальный контур всегда по полному набору точек
            coordinates = [p.coordinate for p in self._points]
            hull = await asyncio.to_thread(build_convex_hull, coordinates)
            reason = polygon_rejection_reason(hull, self.config.min_area_km2, self.config.max_area_km2)
            if reason:
                if not record_without_territory:
                    logger.info("Финальный полигон прогулки %s отклонён: %s", session.id, reason)
                    raise GeometryDegenerateError(f"Walk polygon rejected: {reason}")
                logger.info("Прогулка %s завершается без территории: %s", session.id, reason)
                hull = None

            self._ending = True
            try:
                await self._flush_points(strict=True)
                finished, merge_result = await self._merge_and_commit(session, hull)
            except PersistenceError as exc:
                logger.error("Не удалось сохранить прогулку %s: %s", session.id, exc.message)
                raise
            finally:
                self._ending = False

            self._session = finished
            self._preview = None
            self._pending = None

        if merge_result.failed:
            logger.warning("Прогулка %s завершена без прироста: %s", finished.id, merge_result.error)

        incremental = merge_result.incremental_area_km2
        paws = paws_for_area(incremental)
        unlocked = await self._notify_achievements(merge_result.merged.area_km2)

        result = WalkResult(
            session_id=finished.id,
            distance_km=finished.distance_km,
            territory_gained_km2=incremental,
            paws_earned=paws,
            total_territory_km2=merge_result.merged.area_km2,
            merge_error=merge_result.error,
            unlocked_achievements=tuple(unlocked),
        )
        logger.info(
            "Прогулка завершена: session=%s distance=%.3f км, прирост %.0f м², лапок %d",
            finished.id,
            finished.distance_km,
            incremental * PAWS_PER_KM2,
            paws,
        )

        async with self._lock:
            # retry_reward видит результат только вместе с флагом начисления
            self._result = result
            self._reward_pending = paws > 0
            await self._credit_reward()
        return result

    async def _merge_and_commit(
        self,
        session: WalkSession,
        hull: Optional[Polygon],
    ) -> Tuple[WalkSession, MergeResult]:
        # замок собаки действует в одном процессе, между процессами
        # территорию сторожит проверка base при записи
        async with self.locks.for_dog(self.dog_id):
            attempt = 0
            while True:
                attempt += 1
                existing = await asyncio.to_thread(self.persistence.load_territory, self.dog_id)
                existing = existing or Territory.empty()

                pending = self._pending
                if pending is not None and pending.polygon == hull and pending.base == existing:
                    logger.info("Повторное сохранение прогулки %s без пересчёта слияния", session.id)
                    merge_result = pending.result
                elif hull is None:
                    merge_result = MergeResult(merged=existing, incremental_area_km2=0.0)
                else:
                    merge_result = await asyncio.to_thread(merge_territory, existing, hull)
                self._pending = _PendingMerge(base=existing, polygon=hull, result=merge_result)

                finished = replace(
                    session,
                    status=WalkStatus.COMPLETED,
                    ended_at=datetime.now(timezone.utc),
                    distance_km=self._distance_km,
                    territory_gained_km2=merge_result.incremental_area_km2,
                    points_count=len(self._points),
                )
                try:
                    await asyncio.to_thread(
                        self.persistence.commit_walk, finished, merge_result.merged, existing
                    )
                except TerritoryConflictError as exc:
                    if attempt >= MERGE_CONFLICT_RETRIES:
                        raise
                    logger.warning(
                        "Прогулка %s: %s, слияние пересчитывается (попытка %d)",
                        session.id,
                        exc.message,
                        attempt + 1,
                    )
                    continue
                return finished, merge_result

    async def _notify_achievements(self, total_territory_km2: float) -> List[str]:
        if self.achievements is None:
            return []
        try:
            unlocked = await asyncio.to_thread(
                self.achievements.on_walk_completed,
                self.dog_id,
                self.owner_id,
                total_territory_km2,
                self._distance_km,
            )
        except Exception as exc:
            # достижения считаются отдельно и не должны ронять прогулку
            logger.error("Ошибка проверки достижений для dog=%s: %s", self.dog_id, exc, exc_info=True)
            return []
        return [getattr(a, "name", str(a)) for a in unlocked or []]

    async def _credit_reward(self) -> None:
        if not self._reward_pending:
            return
        result = self._result
        reason = f"Territory conquered: {result.territory_gained_km2 * PAWS_PER_KM2:.0f} m²"
        try:
            await asyncio.to_thread(self.ledger.credit_currency, self.owner_id, result.paws_earned, reason)
        except Exception as exc:
            logger.error(
                "Лапки за прогулку %s не начислены (%d): %s",
                result.session_id,
                result.paws_earned,
                exc,
            )
            raise RewardCreditError(result.session_id, result.paws_earned, original_error=exc) from exc
        self._reward_pending = False

    async def retry_reward(self) -> WalkResult:
        """
        Повторяет начисление лапок после RewardCreditError.

        Под замком прогулки: два одновременных повтора начисляют один раз,
        второй получает WalkInputError.
        """
        async with self._lock:
            if self._result is None or not self._reward_pending:
                raise WalkInputError("No pending reward for this walk")
            await self._credit_reward()
            return self._result

    async def cancel_walk(self) -> WalkSession:
        """
        Active -> Cancelled. Переход мгновенный, без побочных эффектов
        для территории и лапок; статус в хранилище пишется после.
        """
        session = self._require_active("cancel walk")

        session.status = WalkStatus.CANCELLED
        session.ended_at = datetime.now(timezone.utc)
        self._points.clear()
        self._unsynced.clear()
        self._preview = None
        self._pending = None

        logger.info("Прогулка отменена: session=%s", session.id)
        try:
            await asyncio.to_thread(self.persistence.save_walk_session, session)
        except PersistenceError as exc:
            logger.warning("Статус отмены прогулки %s не сохранён: %s", session.id, exc.message)
        return session
