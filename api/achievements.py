from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies.runtime import get_achievement_evaluator
from api.schemas.paws import AchievementProgressItem
from tools.achievements import WalkAchievementEvaluator

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


@router.get("/{owner_id}", response_model=List[AchievementProgressItem])
def get_achievements(
    owner_id: str,
    evaluator: WalkAchievementEvaluator = Depends(get_achievement_evaluator),
):
    """Все достижения каталога с прогрессом хозяина."""
    try:
        return [AchievementProgressItem(**item) for item in evaluator.progress_for_owner(owner_id)]
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Ошибка при получении достижений: {e}")
