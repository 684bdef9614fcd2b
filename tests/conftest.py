from typing import Dict, List, Optional

import pytest

from tools.paws.exceptions import InsufficientPawsError
from tools.territory.exceptions import PersistenceError, TerritoryConflictError
from tools.territory.models import Coordinate, Territory, WalkSession
from tools.walks.orchestrator import WalkConfig


class FakePersistence:
    """Хранилище в памяти. fail_* включают отказ следующих N вызовов."""

    def __init__(self, owners: Optional[Dict[str, List[str]]] = None):
        self.owners = owners if owners is not None else {"rex": ["alice", "bob"]}
        self.sessions: Dict[str, WalkSession] = {}
        self.points: List = []
        self.territories: Dict[str, Territory] = {}
        self.commits = 0
        self.fail_commit = 0
        self.fail_append = 0
        self.fail_save = 0
        # вызывается перед проверкой base: "другой процесс" пишет территорию
        self.interleave = None
        self.conflicts = 0

    def save_walk_session(self, session):
        if self.fail_save:
            self.fail_save -= 1
            raise PersistenceError("save failed")
        self.sessions[session.id] = session

    def append_walk_points(self, points):
        if self.fail_append:
            self.fail_append -= 1
            raise PersistenceError("append failed")
        self.points.extend(points)

    def load_territory(self, dog_id):
        return self.territories.get(dog_id)

    def commit_walk(self, session, territory, base=None):
        if self.fail_commit:
            self.fail_commit -= 1
            raise PersistenceError("commit failed")
        if self.interleave is not None:
            writer, self.interleave = self.interleave, None
            writer(self)
        if base is not None and (self.territories.get(session.dog_id) or Territory.empty()) != base:
            self.conflicts += 1
            raise TerritoryConflictError(session.dog_id)
        self.commits += 1
        self.sessions[session.id] = session
        if not territory.is_empty:
            self.territories[session.dog_id] = territory

    def is_dog_owner(self, dog_id, owner_id):
        return owner_id in self.owners.get(dog_id, [])


class FakeLedger:
    def __init__(self, balance: int = 0):
        self.balances: Dict[str, int] = {}
        self.start_balance = balance
        self.credits: List = []
        self.debits: List = []
        self.fail_credit = 0

    def credit_currency(self, owner_id, amount, reason="Earned paws"):
        if self.fail_credit:
            self.fail_credit -= 1
            raise RuntimeError("ledger offline")
        self.credits.append((owner_id, amount, reason))
        self.balances[owner_id] = self.balances.get(owner_id, self.start_balance) + amount
        return self.balances[owner_id]

    def debit_currency(self, owner_id, amount, reason="Spent paws"):
        balance = self.balances.get(owner_id, self.start_balance)
        if balance < amount:
            raise InsufficientPawsError(owner_id, balance, amount)
        self.debits.append((owner_id, amount, reason))
        self.balances[owner_id] = balance - amount
        return self.balances[owner_id]


class FakeAchievements:
    def __init__(self, unlock: Optional[List[str]] = None, fail: bool = False):
        self.calls: List = []
        self.unlock = unlock or []
        self.fail = fail

    def on_walk_completed(self, dog_id, owner_id, total_territory_km2, walk_distance_km):
        self.calls.append((dog_id, owner_id, total_territory_km2, walk_distance_km))
        if self.fail:
            raise RuntimeError("achievements offline")
        return list(self.unlock)


# Квадрат ~111 м x 111 м на экваторе, площадь ≈ 0.012392 км²
SQUARE = [(0.0, 0.0), (0.0, 0.001), (0.001, 0.001), (0.001, 0.0)]


def coords(pairs):
    return [Coordinate(latitude=lat, longitude=lon) for lat, lon in pairs]


@pytest.fixture
def persistence():
    return FakePersistence()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def achievements():
    return FakeAchievements()


@pytest.fixture
def walk_config():
    return WalkConfig(min_area_km2=1e-4, max_area_km2=50.0, preview_every=1)


@pytest.fixture
def square():
    return coords(SQUARE)


@pytest.fixture
def make_achievements():
    return FakeAchievements


@pytest.fixture
def sqlite_db(tmp_path):
    """Database на файле SQLite: только таблицы без геометрии (PostGIS тут нет)."""
    from infrastructure.database.models import (
        AchievementRecord,
        Base,
        Dog,
        DogOwner,
        PawsBalance,
        PawsTransaction,
        WalkPointRecord,
        WalkSessionRecord,
    )
    from infrastructure.database.session import Database

    db = Database(db_url=f"sqlite:///{tmp_path / 'dote.db'}")
    Base.metadata.create_all(
        db.engine,
        tables=[
            Dog.__table__,
            DogOwner.__table__,
            WalkSessionRecord.__table__,
            WalkPointRecord.__table__,
            AchievementRecord.__table__,
            PawsBalance.__table__,
            PawsTransaction.__table__,
        ],
    )
    yield db
    db.engine.dispose()
