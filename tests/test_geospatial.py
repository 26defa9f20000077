import pytest

from pickup_routing.models.domain import Coordinate
from pickup_routing.services.geospatial import EARTH_RADIUS_M, distance_between, haversine_m

DEPOT = Coordinate(46.5240, -84.3170)


def test_distance_to_self_is_zero():
    assert haversine_m(46.5240, -84.3170, 46.5240, -84.3170) == 0.0
    assert distance_between(DEPOT, DEPOT) == 0.0


def test_distance_is_symmetric():
    other = Coordinate(46.55, -84.35)
    assert distance_between(DEPOT, other) == pytest.approx(distance_between(other, DEPOT), rel=1e-12)


def test_one_kilometre_north_of_depot():
    # 1 km of arc along a meridian is 1000 / R radians
    north = Coordinate(DEPOT.latitude + 1000.0 / EARTH_RADIUS_M * 180.0 / 3.141592653589793, DEPOT.longitude)
    assert distance_between(DEPOT, north) == pytest.approx(1000.0, abs=0.5)


def test_quarter_meridian_matches_sphere():
    expected = EARTH_RADIUS_M * 3.141592653589793 / 2
    assert haversine_m(0.0, 0.0, 90.0, 0.0) == pytest.approx(expected, rel=1e-9)
