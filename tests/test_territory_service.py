import asyncio

import pytest

from models.walk_enums import WalkStatus
from tools.paws.exceptions import InsufficientPawsError
from tools.territory.exceptions import (
    DogAccessDenied,
    PersistenceError,
    RewardCreditError,
    WalkInputError,
    WalkNotFound,
)
from tools.walks import TerritoryService


def _service(persistence, ledger, walk_config, **kwargs):
    return TerritoryService(
        persistence=persistence,
        ledger=ledger,
        config=walk_config,
        walk_attempt_cost=kwargs.pop("walk_attempt_cost", 0),
        **kwargs,
    )


async def _walk_square(service, square, dog_id="rex", owner_id="alice"):
    walk = await service.start_walk(dog_id, owner_id)
    for p in square:
        await service.add_walk_point(walk.session.id, p)
    return walk.session.id


@pytest.mark.asyncio
async def test_stranger_cannot_walk_the_dog(persistence, ledger, walk_config):
    service = _service(persistence, ledger, walk_config)

    with pytest.raises(DogAccessDenied):
        await service.start_walk("rex", "mallory")
    assert service.active_walks() == []


@pytest.mark.asyncio
async def test_one_active_walk_per_dog(persistence, ledger, walk_config):
    service = _service(persistence, ledger, walk_config)
    await service.start_walk("rex", "alice")

    # второй владелец тоже не может начать параллельную прогулку
    with pytest.raises(WalkInputError):
        await service.start_walk("rex", "bob")
    assert len(service.active_walks()) == 1


@pytest.mark.asyncio
async def test_dog_is_free_again_after_end(persistence, ledger, walk_config, square):
    service = _service(persistence, ledger, walk_config)
    session_id = await _walk_square(service, square)

    result = await service.end_walk(session_id)

    assert result.paws_earned == 12392
    assert service.active_walks() == []
    with pytest.raises(WalkNotFound):
        service.get_walk(session_id)

    territory = await service.get_territory("rex")
    assert territory.area_km2 == pytest.approx(result.total_territory_km2)

    walk = await service.start_walk("rex", "bob")
    assert walk.status is WalkStatus.ACTIVE


@pytest.mark.asyncio
async def test_cancel_releases_the_dog(persistence, ledger, walk_config, square):
    service = _service(persistence, ledger, walk_config)
    session_id = await _walk_square(service, square)

    session = await service.cancel_walk(session_id)

    assert session.status is WalkStatus.CANCELLED
    assert (await service.get_territory("rex")).is_empty
    await service.start_walk("rex", "alice")


@pytest.mark.asyncio
async def test_unknown_walk(persistence, ledger, walk_config, square):
    service = _service(persistence, ledger, walk_config)

    with pytest.raises(WalkNotFound):
        await service.add_walk_point("nope", square[0])
    with pytest.raises(WalkNotFound):
        await service.end_walk("nope")


@pytest.mark.asyncio
async def test_reward_retry_through_service(persistence, ledger, walk_config, square):
    service = _service(persistence, ledger, walk_config)
    session_id = await _walk_square(service, square)
    ledger.fail_credit = 1

    with pytest.raises(RewardCreditError):
        await service.end_walk(session_id)

    # собака свободна, но прогулка ждёт начисления
    assert service.active_walks() == []
    assert service.get_walk(session_id).reward_pending

    result = await service.retry_reward(session_id)

    assert result.paws_earned == 12392
    with pytest.raises(WalkNotFound):
        service.get_walk(session_id)


@pytest.mark.asyncio
async def test_double_reward_retry_through_service_credits_once(persistence, ledger, walk_config, square):
    service = _service(persistence, ledger, walk_config)
    session_id = await _walk_square(service, square)
    ledger.fail_credit = 1
    with pytest.raises(RewardCreditError):
        await service.end_walk(session_id)

    results = await asyncio.gather(
        service.retry_reward(session_id),
        service.retry_reward(session_id),
        return_exceptions=True,
    )

    assert len(ledger.credits) == 1
    assert sum(isinstance(r, (WalkInputError, WalkNotFound)) for r in results) == 1


@pytest.mark.asyncio
async def test_walk_attempt_is_paid(persistence, ledger, walk_config):
    ledger.balances["alice"] = 10
    service = _service(persistence, ledger, walk_config, walk_attempt_cost=10)

    await service.start_walk("rex", "alice")

    assert ledger.balances["alice"] == 0
    assert ledger.debits == [("alice", 10, "Walk attempt")]


@pytest.mark.asyncio
async def test_walk_attempt_without_paws(persistence, ledger, walk_config):
    service = _service(persistence, ledger, walk_config, walk_attempt_cost=10)

    with pytest.raises(InsufficientPawsError):
        await service.start_walk("rex", "alice")
    assert service.active_walks() == []


@pytest.mark.asyncio
async def test_attempt_is_refunded_when_start_fails(persistence, ledger, walk_config):
    ledger.balances["alice"] = 10
    persistence.fail_save = 1
    service = _service(persistence, ledger, walk_config, walk_attempt_cost=10)

    with pytest.raises(PersistenceError):
        await service.start_walk("rex", "alice")

    assert ledger.balances["alice"] == 10
    assert ledger.credits == [("alice", 10, "Walk attempt refund")]
    await service.start_walk("rex", "alice")
