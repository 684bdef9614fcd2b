from enum import Enum


class WalkStatus(str, Enum):
    """Статус прогулки. COMPLETED и CANCELLED — конечные состояния."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def from_str(cls, status_str: str) -> "WalkStatus":
        """
        Преобразует строку в значение enum WalkStatus.

        Raises:
            ValueError: Если строка не соответствует ни одному значению enum.
        """
        try:
            return cls(status_str)
        except ValueError:
            raise ValueError(f"Неизвестный статус прогулки: {status_str}")


class TransactionType(str, Enum):
    """Тип операции с лапками."""
    CREDIT = "credit"
    DEBIT = "debit"


class OwnerRole(str, Enum):
    """Роль владельца собаки: основной владелец или совладелец по приглашению."""
    PRIMARY = "primary"
    CO_OWNER = "co_owner"
