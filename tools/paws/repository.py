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

"""Репозиторий баланса и истории лапок."""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from infrastructure.database.models import PawsBalance, PawsTransaction
from models.walk_enums import TransactionType


class PawsRepository:
    """Баланс хранится отдельной строкой, история — журналом операций."""

    def __init__(self, session: Session):
        self.session = session

    def get_balance_row(self, owner_id: str, for_update: bool = False) -> Optional[PawsBalance]:
        query = self.session.query(PawsBalance).filter(PawsBalance.owner_id == owner_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def create_balance_row(self, owner_id: str, balance: int = 0) -> PawsBalance:
        row = PawsBalance(owner_id=owner_id, balance=balance)
        self.session.add(row)
        self.session.flush()
        return row

    def add_transaction(
        self,
        owner_id: str,
        type_: TransactionType,
        amount: int,
        description: Optional[str] = None,
    ) -> PawsTransaction:
        tx = PawsTransaction(
            owner_id=owner_id,
            type=type_.value,
            amount=amount,
            description=description,
            created_at=datetime.utcnow(),
        )
        self.session.add(tx)
        return tx

    def get_transactions(self, owner_id: str, limit: int = 50) -> List[PawsTransaction]:
        """История операций, новые сверху."""
        return (
            self.session.query(PawsTransaction)
            .filter(PawsTransaction.owner_id == owner_id)
            .order_by(PawsTransaction.created_at.desc(), PawsTransaction.id.desc())
            .limit(limit)
            .all()
        )
