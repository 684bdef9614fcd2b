import asyncio
import time

import pytest

import tools.walks.orchestrator as orchestrator_module
from models.walk_enums import WalkStatus
from tools.territory.exceptions import (
    GeometryDegenerateError,
    PersistenceError,
    RewardCreditError,
    WalkInputError,
)
from tools.territory.models import Coordinate, Polygon, Territory
from tools.walks.locks import DogLockRegistry
from tools.walks.orchestrator import WalkSessionOrchestrator, paws_for_area


def _coords(pairs):
    return [Coordinate(latitude=lat, longitude=lon) for lat, lon in pairs]


def _make(persistence, ledger, walk_config, **kwargs):
    return WalkSessionOrchestrator(
        dog_id=kwargs.pop("dog_id", "rex"),
        owner_id=kwargs.pop("owner_id", "alice"),
        persistence=persistence,
        ledger=ledger,
        config=walk_config,
        **kwargs,
    )


async def _walk(orchestrator, points):
    await orchestrator.start_walk()
    for p in points:
        await orchestrator.add_walk_point(p)


def test_paws_are_one_per_square_metre():
    assert paws_for_area(0.0) == 0
    assert paws_for_area(0.0123921424) == 12392
    assert paws_for_area(1e-7) == 0


@pytest.mark.asyncio
async def test_idle_walk_rejects_everything(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)

    assert walk.status is None
    with pytest.raises(WalkInputError):
        await walk.add_walk_point(square[0])
    with pytest.raises(WalkInputError):
        await walk.end_walk()
    with pytest.raises(WalkInputError):
        await walk.cancel_walk()


@pytest.mark.asyncio
async def test_start_failure_leaves_walk_idle(persistence, ledger, walk_config):
    persistence.fail_save = 1
    walk = _make(persistence, ledger, walk_config)

    with pytest.raises(PersistenceError):
        await walk.start_walk()
    assert walk.status is None

    session = await walk.start_walk()
    assert session.status is WalkStatus.ACTIVE


@pytest.mark.asyncio
async def test_walk_cannot_be_started_twice(persistence, ledger, walk_config):
    walk = _make(persistence, ledger, walk_config)
    await walk.start_walk()

    with pytest.raises(WalkInputError):
        await walk.start_walk()


@pytest.mark.asyncio
async def test_preview_appears_from_third_point(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await walk.start_walk()

    assert await walk.add_walk_point(square[0]) is None
    assert await walk.add_walk_point(square[1]) is None
    preview = await walk.add_walk_point(square[2])

    assert preview is not None
    assert len(preview) == 3
    assert walk.session.points_count == 3
    assert walk.distance_km == pytest.approx(2 * 0.1112, rel=1e-2)
    assert len(persistence.points) == 3


@pytest.mark.asyncio
async def test_points_survive_a_failed_flush(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await walk.start_walk()
    persistence.fail_append = 1

    await walk.add_walk_point(square[0])
    assert persistence.points == []

    await walk.add_walk_point(square[1])
    assert [p.coordinate for p in persistence.points] == square[:2]


@pytest.mark.asyncio
async def test_short_walk_cannot_end_and_stays_active(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square[:2])

    with pytest.raises(WalkInputError):
        await walk.end_walk()
    assert walk.status is WalkStatus.ACTIVE

    await walk.add_walk_point(square[2])
    await walk.add_walk_point(square[3])
    result = await walk.end_walk()
    assert result.paws_earned > 0


@pytest.mark.asyncio
async def test_square_walk_conquers_territory_and_earns_paws(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)

    result = await walk.end_walk()

    assert walk.status is WalkStatus.COMPLETED
    assert result.territory_gained_km2 == pytest.approx(0.0123921424, rel=1e-6)
    assert result.paws_earned == 12392
    assert result.total_territory_km2 == pytest.approx(result.territory_gained_km2)
    assert result.merge_error is None
    assert ledger.credits == [("alice", 12392, "Territory conquered: 12392 m²")]
    assert persistence.territories["rex"].area_km2 == pytest.approx(0.0123921424, rel=1e-6)
    assert persistence.sessions[result.session_id].status is WalkStatus.COMPLETED
    assert walk.preview_polygon is None


@pytest.mark.asyncio
async def test_walk_inside_territory_earns_nothing(persistence, ledger, walk_config, square):
    first = _make(persistence, ledger, walk_config)
    await _walk(first, square)
    await first.end_walk()
    territory_before = persistence.territories["rex"]

    second = _make(persistence, ledger, walk_config, owner_id="bob")
    await _walk(second, _coords([(0.0002, 0.0002), (0.0002, 0.0008), (0.0008, 0.0008), (0.0008, 0.0002)]))
    result = await second.end_walk()

    assert result.territory_gained_km2 == 0.0
    assert result.paws_earned == 0
    assert persistence.territories["rex"] == territory_before
    assert [c[0] for c in ledger.credits] == ["alice"]


@pytest.mark.asyncio
async def test_degenerate_walk_is_rejected_unless_recorded(persistence, ledger, walk_config):
    line = _coords([(0.0, 0.0), (0.001, 0.001), (0.002, 0.002)])
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, line)

    with pytest.raises(GeometryDegenerateError):
        await walk.end_walk()
    assert walk.status is WalkStatus.ACTIVE

    result = await walk.end_walk(record_without_territory=True)

    assert walk.status is WalkStatus.COMPLETED
    assert result.territory_gained_km2 == 0.0
    assert result.paws_earned == 0
    assert result.distance_km > 0
    assert "rex" not in persistence.territories
    assert ledger.credits == []


@pytest.mark.asyncio
async def test_persistence_failure_keeps_walk_active_and_retry_reuses_merge(
    persistence, ledger, walk_config, square, monkeypatch
):
    calls = []
    real_merge = orchestrator_module.merge_territory

    def _counting_merge(existing, polygon):
        calls.append(polygon)
        return real_merge(existing, polygon)

    monkeypatch.setattr(orchestrator_module, "merge_territory", _counting_merge)

    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)
    persistence.fail_commit = 1

    with pytest.raises(PersistenceError):
        await walk.end_walk()
    assert walk.status is WalkStatus.ACTIVE
    assert ledger.credits == []

    result = await walk.end_walk()

    assert len(calls) == 1
    assert result.paws_earned == 12392
    assert persistence.commits == 1


@pytest.mark.asyncio
async def test_reward_failure_can_be_retried(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)
    ledger.fail_credit = 1

    with pytest.raises(RewardCreditError) as exc_info:
        await walk.end_walk()

    assert exc_info.value.amount == 12392
    assert walk.status is WalkStatus.COMPLETED
    assert walk.reward_pending
    assert persistence.territories["rex"].area_km2 > 0

    result = await walk.retry_reward()

    assert result.paws_earned == 12392
    assert not walk.reward_pending
    assert ledger.credits[0][1] == 12392
    with pytest.raises(WalkInputError):
        await walk.retry_reward()


@pytest.mark.asyncio
async def test_concurrent_reward_retries_credit_once(
    persistence, ledger, walk_config, square, monkeypatch
):
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)
    ledger.fail_credit = 1
    with pytest.raises(RewardCreditError):
        await walk.end_walk()

    real_credit = ledger.credit_currency

    def _slow_credit(owner_id, amount, reason="Earned paws"):
        time.sleep(0.05)
        return real_credit(owner_id, amount, reason)

    monkeypatch.setattr(ledger, "credit_currency", _slow_credit)

    results = await asyncio.gather(walk.retry_reward(), walk.retry_reward(), return_exceptions=True)

    assert len(ledger.credits) == 1
    assert ledger.balances["alice"] == 12392
    assert sum(isinstance(r, WalkInputError) for r in results) == 1
    assert [r.paws_earned for r in results if not isinstance(r, Exception)] == [12392]


@pytest.mark.asyncio
async def test_achievements_are_reported_and_their_failure_is_ignored(
    persistence, ledger, walk_config, square, make_achievements
):
    good = make_achievements(unlock=["First Walk"])
    walk = _make(persistence, ledger, walk_config, achievements=good)
    await _walk(walk, square)
    result = await walk.end_walk()

    assert result.unlocked_achievements == ("First Walk",)
    dog_id, owner_id, territory_km2, distance_km = good.calls[0]
    assert (dog_id, owner_id) == ("rex", "alice")
    assert territory_km2 == pytest.approx(result.total_territory_km2)
    assert distance_km == pytest.approx(result.distance_km)

    broken = _make(persistence, ledger, walk_config, achievements=make_achievements(fail=True))
    await _walk(broken, _coords([(1.0, 1.0), (1.0, 1.001), (1.001, 1.001)]))
    result = await broken.end_walk()
    assert result.unlocked_achievements == ()
    assert result.paws_earned > 0


@pytest.mark.asyncio
async def test_cancel_discards_points_and_is_final(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)

    session = await walk.cancel_walk()

    assert session.status is WalkStatus.CANCELLED
    assert walk.points == ()
    assert walk.preview_polygon is None
    assert persistence.sessions[session.id].status is WalkStatus.CANCELLED
    assert "rex" not in persistence.territories
    with pytest.raises(WalkInputError):
        await walk.add_walk_point(square[0])
    with pytest.raises(WalkInputError):
        await walk.end_walk()
    with pytest.raises(WalkInputError):
        await walk.cancel_walk()


@pytest.mark.asyncio
async def test_completed_walk_is_final(persistence, ledger, walk_config, square):
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)
    await walk.end_walk()

    with pytest.raises(WalkInputError):
        await walk.add_walk_point(square[0])
    with pytest.raises(WalkInputError):
        await walk.cancel_walk()


@pytest.mark.asyncio
async def test_concurrent_walks_of_one_dog_merge_one_after_another(persistence, ledger, walk_config, square):
    locks = DogLockRegistry()
    first = _make(persistence, ledger, walk_config, locks=locks)
    second = _make(persistence, ledger, walk_config, owner_id="bob", locks=locks)
    await _walk(first, square)
    await _walk(second, _coords([(1.0, 1.0), (1.0, 1.001), (1.001, 1.001), (1.001, 1.0)]))

    results = await asyncio.gather(first.end_walk(), second.end_walk())

    territory = persistence.territories["rex"]
    assert len(territory.polygons) == 2
    assert territory.area_km2 == pytest.approx(sum(r.territory_gained_km2 for r in results), rel=1e-9)
    assert isinstance(territory, Territory)


@pytest.mark.asyncio
async def test_concurrent_points_are_all_kept(persistence, ledger, walk_config):
    walk = _make(persistence, ledger, walk_config)
    await walk.start_walk()
    points = _coords([(0.0001 * i, 0.0001 * (i % 7)) for i in range(30)])

    await asyncio.gather(*(walk.add_walk_point(p) for p in points))

    assert len(walk.points) == 30
    assert walk.session.points_count == 30
    assert len(persistence.points) == 30


def _far_square(lon):
    return Territory.from_polygon(Polygon(tuple(_coords(
        [(1.0, lon), (1.0, lon + 0.001), (1.001, lon + 0.001), (1.001, lon)]
    ))))


@pytest.mark.asyncio
async def test_territory_written_elsewhere_during_merge_is_kept(
    persistence, ledger, walk_config, square
):
    # другой процесс успевает записать территорию между загрузкой и записью
    other = _far_square(1.0)
    persistence.interleave = lambda store: store.territories.__setitem__("rex", other)

    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)
    result = await walk.end_walk()

    assert persistence.conflicts == 1
    territory = persistence.territories["rex"]
    assert len(territory.polygons) == 2
    assert territory.area_km2 == pytest.approx(other.area_km2 + result.territory_gained_km2)
    assert result.paws_earned == 12392


@pytest.mark.asyncio
async def test_endless_conflicts_leave_walk_active(persistence, ledger, walk_config, square):
    shifts = iter(range(1, 100))

    def _rewrite(store):
        store.territories["rex"] = _far_square(float(next(shifts)))
        store.interleave = _rewrite

    persistence.interleave = _rewrite
    walk = _make(persistence, ledger, walk_config)
    await _walk(walk, square)

    with pytest.raises(PersistenceError):
        await walk.end_walk()

    assert persistence.conflicts == orchestrator_module.MERGE_CONFLICT_RETRIES
    assert walk.status is WalkStatus.ACTIVE
    assert ledger.credits == []
