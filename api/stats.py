from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies.runtime import get_db
from api.schemas.territory import DogStatsResponse
from infrastructure.database.session import Database
from tools.walks.repositories import TerritoryRepository, WalkSessionRepository

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/{dog_id}", response_model=DogStatsResponse)
def get_stats(dog_id: str, db: Database = Depends(get_db)):
    """
    Статистика собаки: завершённые прогулки, дистанция и размер территории.

    Размер территории это площадь объединения, а не сумма по прогулкам.
    """
    session = db.get_session()
    try:
        totals = WalkSessionRepository(session).totals_for_dog(dog_id)
        territory_km2 = TerritoryRepository(session).get_area(dog_id)

        return DogStatsResponse(
            dog_id=dog_id,
            total_walks=totals["walks"],
            total_distance_km=totals["distance_km"],
            territory_km2=territory_km2,
        )

    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Ошибка при получении статистики: {e}")
    finally:
        session.close()
