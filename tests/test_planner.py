import httpx
import pytest

from pickup_routing.models.domain import Coordinate, Stop
from pickup_routing.services.geospatial import distance_between
from pickup_routing.services.routing import planner as planner_module
from pickup_routing.services.routing.models import TripResponse
from pickup_routing.services.routing.osrm_client import TripServiceError
from pickup_routing.services.routing.planner import (
    build_trip_coordinates,
    nearest_neighbor_route,
    plan_route,
)

DEPOT = Coordinate(46.5240, -84.3170)


def _stop(sid: str, lat: float, lon: float, kind: str = "pickup") -> Stop:
    return Stop(
        stop_id=sid,
        coordinate=Coordinate(lat, lon),
        kind=kind,
        name=f"Donor {sid}",
        address=f"{sid} Queen St E",
        city="Sault Ste. Marie",
        state="ON",
        items="Sofa, 2 chairs",
    )


class RecordingTripClient:
    def __init__(self, response: TripResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[list[Coordinate]] = []

    def trip(self, coordinates):
        self.calls.append(list(coordinates))
        if self.error is not None:
            raise self.error
        return self.response


def _scenario_stops() -> list[Stop]:
    return [_stop("A", 46.53, -84.32), _stop("B", 46.50, -84.30), _stop("C", 46.55, -84.35)]


def test_empty_stop_list_makes_no_call():
    client = RecordingTripClient(error=AssertionError("should not be called"))

    result = plan_route(DEPOT, [], client=client)

    assert result.ordered_stops == []
    assert result.geometry is None
    assert result.total_distance == 0
    assert result.total_duration == 0
    assert client.calls == []


def test_single_stop_is_returned_unchanged():
    stop = _stop("S", 46.53, -84.32)
    client = RecordingTripClient(error=AssertionError("should not be called"))

    result = plan_route(DEPOT, [stop], client=client)

    assert result.ordered_stops == [stop]
    assert result.ordered_stops[0] is stop
    assert result.geometry is None
    assert (result.total_distance, result.total_duration) == (0, 0)
    assert client.calls == []


def test_trip_coordinates_put_depot_first():
    stops = _scenario_stops()
    coords = build_trip_coordinates(DEPOT, stops)
    assert coords[0] == DEPOT
    assert coords[1:] == [stop.coordinate for stop in stops]


def test_trip_service_order_is_mapped_back_to_stops():
    stops = _scenario_stops()
    geometry = [DEPOT, Coordinate(46.55, -84.35)]
    # input positions sorted by optimized position: depot, C, A, B
    client = RecordingTripClient(
        TripResponse(order=[0, 3, 1, 2], distance=12345.6, duration=1500.0, geometry=geometry)
    )

    result = plan_route(DEPOT, stops, client=client)

    assert [stop.stop_id for stop in result.ordered_stops] == ["C", "A", "B"]
    assert result.total_distance == 12345.6
    assert result.total_duration == 1500.0
    assert result.geometry == geometry
    assert result.used_fallback is False
    assert result.fallback_reason is None
    assert client.calls == [build_trip_coordinates(DEPOT, stops)]


@pytest.mark.parametrize(
    "error",
    [
        ConnectionError("Failed to connect to OSRM service"),
        TripServiceError("OSRM trip request failed (NoTrips): no trips"),
        httpx.ReadTimeout("timed out"),
    ],
)
def test_trip_service_failure_falls_back_to_nearest_neighbor(error):
    stops = _scenario_stops()

    result = plan_route(DEPOT, stops, client=RecordingTripClient(error=error))
    expected = nearest_neighbor_route(DEPOT, stops)

    assert result.ordered_stops == expected.ordered_stops
    assert result.geometry is None
    assert result.total_distance == expected.total_distance
    assert result.total_duration == expected.total_duration
    assert result.used_fallback is True
    assert result.fallback_reason == str(error)


def test_unconfigured_trip_service_falls_back(monkeypatch):
    def _no_client():
        raise ValueError("OSRM base URL is not configured.")

    monkeypatch.setattr(planner_module, "OSRMClient", _no_client)
    stops = _scenario_stops()

    result = plan_route(DEPOT, stops)

    assert result.used_fallback is True
    assert [stop.stop_id for stop in result.ordered_stops] == ["A", "C", "B"]


def test_sault_ste_marie_scenario_with_trip_service_down():
    a, b, c = _scenario_stops()

    result = plan_route(DEPOT, [a, b, c], client=RecordingTripClient(error=ConnectionError("offline")))

    # A is ~0.7 km from the depot; from A, C (~3.2 km) beats B (~3.7 km)
    assert [stop.stop_id for stop in result.ordered_stops] == ["A", "C", "B"]
    expected_distance = (
        distance_between(DEPOT, a.coordinate)
        + distance_between(a.coordinate, c.coordinate)
        + distance_between(c.coordinate, b.coordinate)
    )
    assert result.total_distance == pytest.approx(expected_distance)
    assert result.total_duration == result.total_distance / 13.4
    assert result.geometry is None


def test_nearest_neighbor_is_deterministic_and_a_permutation():
    stops = [_stop(f"S{i}", 46.50 + (i * 7 % 11) * 0.004, -84.36 + (i * 5 % 13) * 0.003) for i in range(12)]

    first = nearest_neighbor_route(DEPOT, stops)
    second = nearest_neighbor_route(DEPOT, stops)

    assert [s.stop_id for s in first.ordered_stops] == [s.stop_id for s in second.ordered_stops]
    assert first.total_distance == second.total_distance
    assert sorted(s.stop_id for s in first.ordered_stops) == sorted(s.stop_id for s in stops)
    assert len(first.ordered_stops) == len(stops)
    assert first.total_distance > 0


def test_nearest_neighbor_ties_go_to_earliest_stop():
    first = _stop("first", 46.53, -84.3170)
    duplicate = _stop("duplicate", 46.53, -84.3170)

    result = nearest_neighbor_route(DEPOT, [first, duplicate])

    assert [s.stop_id for s in result.ordered_stops] == ["first", "duplicate"]


def test_nearest_neighbor_does_not_touch_coordinates():
    stops = _scenario_stops()
    before = [stop.coordinate for stop in stops]

    nearest_neighbor_route(DEPOT, stops)

    assert [stop.coordinate for stop in stops] == before


def test_nearest_neighbor_uses_configured_speed():
    stops = _scenario_stops()
    result = nearest_neighbor_route(DEPOT, stops, average_speed_mps=10.0)
    assert result.total_duration == result.total_distance / 10.0


def test_unroutable_stop_is_rejected():
    stops = [_stop("A", 46.53, -84.32), Stop(stop_id="X", geocode_failed=True)]
    with pytest.raises(ValueError, match="X"):
        plan_route(DEPOT, stops, client=RecordingTripClient(error=AssertionError("not called")))
