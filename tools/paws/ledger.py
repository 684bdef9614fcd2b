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
Учёт лапок (внутренняя валюта).

Лапки начисляются за завоёванную территорию и достижения,
тратятся на попытки прогулок. Новый хозяин получает приветственный бонус.
"""

from typing import List, Optional

from infrastructure.database.models import PawsBalance, PawsTransaction
from infrastructure.database.session import Database
from infrastructure.logging.logger import setup_logger
from models.walk_enums import TransactionType
from settings import settings
from tools.paws.exceptions import InsufficientPawsError
from tools.paws.repository import PawsRepository

logger = setup_logger("paws_ledger")

WELCOME_BONUS_DESCRIPTION = "Welcome bonus"


class PawsLedger:
    """CurrencyLedger на SQLAlchemy: каждая операция — своя транзакция."""

    def __init__(self, db: Optional[Database] = None, welcome_bonus: Optional[int] = None):
        self.db = db or Database.get_instance()
        self.welcome_bonus = settings.WELCOME_BONUS_PAWS if welcome_bonus is None else welcome_bonus

    def _ensure_account(self, repo: PawsRepository, owner_id: str) -> PawsBalance:
        row = repo.get_balance_row(owner_id, for_update=True)
        if row is not None:
            return row

        row = repo.create_balance_row(owner_id, balance=self.welcome_bonus)
        if self.welcome_bonus > 0:
            repo.add_transaction(owner_id, TransactionType.CREDIT, self.welcome_bonus, WELCOME_BONUS_DESCRIPTION)
        logger.info("Новый кошелёк лапок: owner=%s, бонус=%d", owner_id, self.welcome_bonus)
        return row

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")

    def get_balance(self, owner_id: str) -> int:
        with self.db.transaction() as session:
            return self._ensure_account(PawsRepository(session), owner_id).balance

    def credit_currency(self, owner_id: str, amount: int, reason: str = "Earned paws") -> int:
        """
        Начисляет лапки.

        Returns:
            Новый баланс
        """
        self._check_amount(amount)
        with self.db.transaction() as session:
            repo = PawsRepository(session)
            row = self._ensure_account(repo, owner_id)
            row.balance += amount
            repo.add_transaction(owner_id, TransactionType.CREDIT, amount, reason)
            balance = row.balance

        logger.info("Начислено %d лапок owner=%s (%s), баланс %d", amount, owner_id, reason, balance)
        return balance

    def debit_currency(self, owner_id: str, amount: int, reason: str = "Spent paws") -> int:
        """
        Списывает лапки.

        Raises:
            InsufficientPawsError: если баланс меньше суммы (ничего не списывается)
        """
        self._check_amount(amount)
        with self.db.transaction() as session:
            repo = PawsRepository(session)
            row = self._ensure_account(repo, owner_id)
            if row.balance < amount:
                raise InsufficientPawsError(owner_id, row.balance, amount)
            row.balance -= amount
            repo.add_transaction(owner_id, TransactionType.DEBIT, amount, reason)
            balance = row.balance

        logger.info("Списано %d лапок owner=%s (%s), баланс %d", amount, owner_id, reason, balance)
        return balance

    def get_transactions(self, owner_id: str, limit: int = 50) -> List[PawsTransaction]:
        with self.db.transaction() as session:
            self._ensure_account(PawsRepository(session), owner_id)
            return PawsRepository(session).get_transactions(owner_id, limit)
