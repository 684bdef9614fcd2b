from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies.runtime import get_db, get_territory_service
from api.helpers import DOMAIN_ERRORS, to_http_exception
from api.schemas.common import polygon_to_schema
from api.schemas.walk_sessions import (
    WalkEndRequest,
    WalkHistoryItem,
    WalkPointItem,
    WalkPointRequest,
    WalkResultResponse,
    WalkSessionResponse,
    WalkStartRequest,
)
from infrastructure.database.session import Database
from models.walk_enums import WalkStatus
from tools.walks import TerritoryService, WalkResult, WalkSessionOrchestrator
from tools.walks.repositories import WalkSessionRepository

router = APIRouter(prefix="/api/walks", tags=["walks"])


def _walk_state(orchestrator: WalkSessionOrchestrator) -> WalkSessionResponse:
    session = orchestrator.session
    return WalkSessionResponse(
        id=session.id,
        dog_id=session.dog_id,
        owner_id=session.owner_id,
        status=session.status.value,
        started_at=session.started_at,
        ended_at=session.ended_at,
        distance_km=session.distance_km,
        territory_gained_km2=session.territory_gained_km2,
        points_count=session.points_count,
        preview_polygon=polygon_to_schema(orchestrator.preview_polygon),
    )


def _walk_result(result: WalkResult) -> WalkResultResponse:
    return WalkResultResponse(
        session_id=result.session_id,
        distance_km=result.distance_km,
        territory_gained_km2=result.territory_gained_km2,
        paws_earned=result.paws_earned,
        total_territory_km2=result.total_territory_km2,
        merge_error=result.merge_error,
        unlocked_achievements=list(result.unlocked_achievements),
    )


@router.post("/", response_model=WalkSessionResponse)
async def start_walk(
    payload: WalkStartRequest,
    service: TerritoryService = Depends(get_territory_service),
):
    """
    Начинает прогулку собаки.

    Одна активная прогулка на собаку; вести её может любой из владельцев.
    """
    try:
        orchestrator = await service.start_walk(payload.dog_id, payload.owner_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _walk_state(orchestrator)


@router.post("/{session_id}/points", response_model=WalkSessionResponse)
async def add_walk_point(
    session_id: str,
    payload: WalkPointRequest,
    service: TerritoryService = Depends(get_territory_service),
):
    """Добавляет GPS-точку и возвращает состояние с превью полигона."""
    try:
        await service.add_walk_point(session_id, payload.to_coordinate(), payload.timestamp)
        orchestrator = service.get_walk(session_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _walk_state(orchestrator)


@router.get("/dog/{dog_id}", response_model=List[WalkHistoryItem])
def get_dog_walks(
    dog_id: str,
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    db: Database = Depends(get_db),
):
    """
    История прогулок собаки, новые сверху.

    Args:
        limit: Сколько прогулок вернуть
        status: Фильтр по статусу (active, completed, cancelled)
    """
    try:
        walk_status = WalkStatus.from_str(status) if status else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = db.get_session()
    try:
        records = WalkSessionRepository(session).get_for_dog(dog_id, limit=limit, status=walk_status)
        return [WalkHistoryItem.model_validate(r) for r in records]
    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Ошибка при получении прогулок: {e}")
    finally:
        session.close()


@router.get("/{session_id}/points", response_model=List[WalkPointItem])
def get_walk_points(session_id: str, db: Database = Depends(get_db)):
    """Трек прогулки из БД в порядке времени (и для завершённых прогулок)."""
    session = db.get_session()
    try:
        records = WalkSessionRepository(session).get_points(session_id)
        return [WalkPointItem.model_validate(r) for r in records]
    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Ошибка при получении точек: {e}")
    finally:
        session.close()


@router.get("/{session_id}", response_model=WalkSessionResponse)
async def get_walk(
    session_id: str,
    service: TerritoryService = Depends(get_territory_service),
):
    try:
        orchestrator = service.get_walk(session_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _walk_state(orchestrator)


@router.post("/{session_id}/end", response_model=WalkResultResponse)
async def end_walk(
    session_id: str,
    payload: WalkEndRequest = WalkEndRequest(),
    service: TerritoryService = Depends(get_territory_service),
):
    """
    Завершает прогулку: полигон, слияние с территорией, лапки.

    При 503 (хранилище недоступно) запрос можно повторить; если не
    начислились только лапки, повтор идёт через /reward/retry.
    """
    try:
        result = await service.end_walk(
            session_id, record_without_territory=payload.record_without_territory
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _walk_result(result)


@router.post("/{session_id}/reward/retry", response_model=WalkResultResponse)
async def retry_reward(
    session_id: str,
    service: TerritoryService = Depends(get_territory_service),
):
    try:
        result = await service.retry_reward(session_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _walk_result(result)


@router.post("/{session_id}/cancel", response_model=WalkSessionResponse)
async def cancel_walk(
    session_id: str,
    service: TerritoryService = Depends(get_territory_service),
):
    """Отменяет прогулку без территории и наград."""
    try:
        orchestrator = service.get_walk(session_id)
        await service.cancel_walk(session_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _walk_state(orchestrator)
