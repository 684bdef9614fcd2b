from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies.runtime import get_db
from api.schemas.territory import LeaderboardEntry, LeaderboardResponse
from infrastructure.database.session import Database
from tools.walks.repositories import TerritoryRepository

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("/", response_model=LeaderboardResponse)
def get_leaderboard(
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
):
    """Собаки по размеру территории, от большей к меньшей."""
    session = db.get_session()
    try:
        rows = TerritoryRepository(session).leaderboard(limit)
        return LeaderboardResponse(
            items=[
                LeaderboardEntry(rank=i, dog_id=dog.id, dog_name=dog.name, territory_km2=area)
                for i, (dog, area) in enumerate(rows, start=1)
            ]
        )
    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Ошибка при получении лидерборда: {e}")
    finally:
        session.close()
