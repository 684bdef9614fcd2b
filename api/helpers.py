from fastapi import HTTPException

from infrastructure.logging.logger import setup_logger
from tools.paws.exceptions import InsufficientPawsError
from tools.territory.exceptions import (
    DogAccessDenied,
    PersistenceError,
    RewardCreditError,
    WalkInputError,
    WalkNotFound,
)

# Настройка логгера для текущего модуля
logger = setup_logger("api")

# Порядок важен: GeometryDegenerateError наследует WalkInputError
_STATUS_BY_ERROR = (
    (WalkInputError, 400),
    (DogAccessDenied, 403),
    (WalkNotFound, 404),
    (InsufficientPawsError, 402),
    (RewardCreditError, 503),
    (PersistenceError, 503),
)

DOMAIN_ERRORS = tuple(error_type for error_type, _ in _STATUS_BY_ERROR)


def to_http_exception(exc: Exception) -> HTTPException:
    """
    Переводит доменную ошибку в HTTPException с нужным кодом.

    Неизвестные ошибки превращаются в 500.
    """
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            if status_code >= 500:
                logger.warning(f"[api] {type(exc).__name__}: {exc}")
            return HTTPException(status_code=status_code, detail=getattr(exc, "message", str(exc)))
    logger.error(f"[api] Необработанная ошибка: {exc}")
    return HTTPException(status_code=500, detail=f"Внутренняя ошибка: {exc}")
