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

"""Исключения учёта лапок."""


class InsufficientPawsError(Exception):
    """На балансе не хватает лапок для списания."""

    def __init__(self, owner_id: str, balance: int, amount: int):
        self.owner_id = owner_id
        self.balance = balance
        self.amount = amount
        self.message = f"Insufficient paws balance: {balance} < {amount}"
        super().__init__(self.message)
