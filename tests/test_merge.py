import math

import pytest
from shapely.errors import GEOSException

import tools.territory.merge as merge_module
from tools.territory.merge import merge_territory
from tools.territory.models import Coordinate, Polygon, Territory
from tools.walks.orchestrator import paws_for_area


def _square(side_deg, lat=0.0, lon=0.0):
    return Polygon(tuple(
        Coordinate(latitude=la, longitude=lo)
        for la, lo in [
            (lat, lon),
            (lat, lon + side_deg),
            (lat + side_deg, lon + side_deg),
            (lat + side_deg, lon),
        ]
    ))


def test_first_walk_becomes_the_territory():
    polygon = _square(0.001)
    result = merge_territory(None, polygon)

    assert not result.failed
    assert result.incremental_area_km2 == pytest.approx(polygon.area_km2)
    assert result.merged == Territory.from_polygon(polygon)


def test_empty_territory_behaves_like_none():
    polygon = _square(0.001)
    result = merge_territory(Territory.empty(), polygon)
    assert result.incremental_area_km2 == pytest.approx(polygon.area_km2)


def test_walk_inside_territory_gains_nothing():
    existing = Territory.from_polygon(_square(0.002))
    result = merge_territory(existing, _square(0.0005, lat=0.0005, lon=0.0005))

    assert result.incremental_area_km2 == 0.0
    assert result.merged is existing


def test_disjoint_walk_adds_a_second_part():
    first, second = _square(0.001), _square(0.001, lat=1.0, lon=1.0)
    existing = Territory.from_polygon(first)
    result = merge_territory(existing, second)

    assert len(result.merged.polygons) == 2
    assert result.incremental_area_km2 == pytest.approx(second.area_km2, rel=1e-9)
    assert result.merged.area_km2 == pytest.approx(first.area_km2 + second.area_km2, rel=1e-9)


def test_overlap_is_paid_only_once():
    existing = Territory.from_polygon(_square(0.001))
    # половина нового квадрата уже завоёвана
    result = merge_territory(existing, _square(0.001, lon=0.0005))

    assert result.incremental_area_km2 == pytest.approx(_square(0.001).area_km2 / 2, rel=1e-3)
    assert len(result.merged.polygons) == 1


def test_territory_never_shrinks():
    territory = Territory.empty()
    walks = [
        _square(0.001),
        _square(0.0004, lat=0.0002, lon=0.0002),
        _square(0.001, lat=0.0008, lon=0.0008),
        _square(0.002, lat=0.01),
    ]
    for polygon in walks:
        before = territory.area_km2
        result = merge_territory(territory, polygon)
        assert result.incremental_area_km2 >= 0.0
        assert result.merged.area_km2 >= before
        territory = result.merged


def test_union_failure_keeps_existing_territory(monkeypatch):
    def _broken_union(geoms):
        raise GEOSException("TopologyException: side location conflict")

    monkeypatch.setattr(merge_module, "unary_union", _broken_union)
    existing = Territory.from_polygon(_square(0.001))
    result = merge_territory(existing, _square(0.001, lat=1.0, lon=1.0))

    assert result.failed
    assert "side location conflict" in result.error
    assert result.merged is existing
    assert result.incremental_area_km2 == 0.0


def test_delta_reports_the_increment():
    polygon = _square(0.001)
    delta = merge_territory(None, polygon).delta(polygon)

    assert delta.new_polygon == polygon
    assert delta.incremental_area_km2 == pytest.approx(polygon.area_km2)


def _box(south, north, west, east):
    return Polygon(tuple(
        Coordinate(latitude=la, longitude=lo)
        for la, lo in [(south, west), (south, east), (north, east), (north, west)]
    ))


def test_high_latitude_sliver_south_pays_only_the_sliver():
    # квадрат ~0.6 км² на 60° с.ш., новая прогулка выходит за южный край на 1e-8°
    existing = Territory.from_polygon(_box(60.0, 60.01, 0.0, 0.01))
    result = merge_territory(existing, _box(60.0 - 1e-8, 60.005, 0.0, 0.01))

    sliver_km2 = 1e-8 * 0.01 * 111.32 * 111.32 * math.cos(math.radians(60.0))
    assert not result.failed
    assert result.incremental_area_km2 == pytest.approx(sliver_km2, abs=1e-7)
    assert paws_for_area(result.incremental_area_km2) == 0
    assert result.merged.area_km2 >= existing.area_km2


def test_high_latitude_sliver_north_is_not_reported_as_shrink():
    existing = Territory.from_polygon(_box(60.0, 60.01, 0.0, 0.01))
    result = merge_territory(existing, _box(60.005, 60.01 + 1e-8, 0.0, 0.01))

    assert not result.failed
    assert result.error is None
    assert paws_for_area(result.incremental_area_km2) == 0
    assert result.merged.area_km2 >= existing.area_km2


def test_increment_matches_the_uncovered_part():
    existing = Territory.from_polygon(_box(60.0, 60.01, 0.0, 0.01))
    result = merge_territory(existing, _box(60.005, 60.015, 0.0, 0.01))

    expected = Territory.from_polygon(_box(60.01, 60.015, 0.0, 0.01)).area_km2
    assert result.incremental_area_km2 == pytest.approx(expected, rel=1e-6)
