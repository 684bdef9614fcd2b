from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from api import achievements, leaderboard, paws, stats, territory, walk_sessions
from infrastructure.database.session import Database
from infrastructure.logging.logger import setup_logger
from tools.achievements import WalkAchievementEvaluator
from tools.paws import PawsLedger
from tools.walks import TerritoryService
from tools.walks.persistence import SqlWalkPersistence

logger = setup_logger("dote")


def create_app(
    territory_service: Optional[TerritoryService] = None,
    db: Optional[Database] = None,
    ledger: Optional[PawsLedger] = None,
    achievement_evaluator: Optional[WalkAchievementEvaluator] = None,
) -> FastAPI:
    """
    Собирает приложение. Всё, что не передано явно, строится поверх
    одного Database (для тестов подставляются свои реализации).
    """
    app = FastAPI(
        title="Dote",
        version="0.1.0",
        description="Гуляй с собакой и завоёвывай территорию"
    )

    # Разрешаем доступ с телефона
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Разрешаем всем
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    db = db or Database.get_instance()
    ledger = ledger or PawsLedger(db)
    achievement_evaluator = achievement_evaluator or WalkAchievementEvaluator(ledger, db)
    if territory_service is None:
        territory_service = TerritoryService(
            persistence=SqlWalkPersistence(db),
            ledger=ledger,
            achievements=achievement_evaluator,
        )

    app.state.db = db
    app.state.ledger = ledger
    app.state.achievement_evaluator = achievement_evaluator
    app.state.territory_service = territory_service

    # Подключаем эндпоинты
    app.include_router(walk_sessions.router)
    app.include_router(territory.router)
    app.include_router(stats.router)
    app.include_router(leaderboard.router)
    app.include_router(paws.router)
    app.include_router(achievements.router)

    @app.get("/")
    def root():
        return {"status": "ok"}

    logger.info("Dote API собрано")
    return app


app = create_app()
