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


"""Зависимости эндпоинтов: всё берётся из app.state, собранного в create_app"""

from fastapi import Request

def get_db(request: Request):
    return request.app.state.db

def get_territory_service(request: Request):
    return request.app.state.territory_service

def get_ledger(request: Request):
    return request.app.state.ledger

def get_achievement_evaluator(request: Request):
    return request.app.state.achievement_evaluator
