"""Route planning for a single day's stops.

The trip service is asked for an optimized one-way trip starting at the
depot. When it cannot be used, a greedy nearest-neighbour order over
great-circle distance is returned instead. The caller always gets a
RouteResult; ``used_fallback`` and ``fallback_reason`` record which path
produced it.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate, Stop
from ..geospatial import distance_between
from .models import RouteResult, TripResponse
from .osrm_client import OSRMClient, TripServiceError

logger = logging.getLogger(__name__)


class TripClient(Protocol):
    def trip(self, coordinates: Sequence[Coordinate]) -> TripResponse: ...


def build_trip_coordinates(depot: Coordinate, stops: Sequence[Stop]) -> list[Coordinate]:
    """Depot first, then each stop in input order."""
    return [depot, *(stop.coordinate for stop in stops)]


def plan_route(depot: Coordinate, stops: Sequence[Stop], client: TripClient | None = None) -> RouteResult:
    """Order ``stops`` into a one-way route that starts at ``depot``.

    Every stop must carry a routable coordinate; filter with
    ``routable_stops`` first. Zero or one stop is returned as-is with zero
    totals and no external call.
    """
    stops = list(stops)
    unroutable = [stop.stop_id for stop in stops if not stop.is_routable]
    if unroutable:
        raise ValueError(f"Stops without usable coordinates cannot be routed: {', '.join(unroutable)}")

    if len(stops) < 2:
        return RouteResult(ordered_stops=stops, geometry=None, total_distance=0.0, total_duration=0.0)

    if client is None:
        try:
            client = OSRMClient()
        except ValueError as e:
            logger.info(f"No trip service configured, using nearest-neighbour: {e}")
            return _fallback(depot, stops, str(e))

    try:
        trip = client.trip(build_trip_coordinates(depot, stops))
    except (TripServiceError, ConnectionError, httpx.HTTPError) as e:
        logger.warning(f"Trip service failed for {len(stops)} stops, falling back to nearest-neighbour: {e}")
        return _fallback(depot, stops, str(e))

    # order[0] is the depot itself
    ordered_stops = [stops[input_index - 1] for input_index in trip.order if input_index != 0]
    logger.info(
        f"Trip service ordered {len(ordered_stops)} stops: "
        f"{trip.distance / 1000.0:.1f} km, {trip.duration / 60.0:.0f} min"
    )
    return RouteResult(
        ordered_stops=ordered_stops,
        geometry=trip.geometry,
        total_distance=trip.distance,
        total_duration=trip.duration,
    )


def _fallback(depot: Coordinate, stops: Sequence[Stop], reason: str) -> RouteResult:
    result = nearest_neighbor_route(depot, stops)
    result.fallback_reason = reason
    return result


def nearest_neighbor_route(
    depot: Coordinate,
    stops: Sequence[Stop],
    average_speed_mps: float | None = None,
) -> RouteResult:
    """Greedy nearest-neighbour order starting from the depot.

    Ties go to the stop that comes first in the remaining pool, so the
    result depends only on the input order. No road geometry is produced.
    The duration is total distance divided by an assumed average speed
    (13.4 m/s by default); it is an approximation, not a measured estimate.
    """
    speed = average_speed_mps if average_speed_mps is not None else settings.fallback_average_speed_mps
    if speed <= 0:
        raise ValueError("Average speed must be positive.")

    remaining = list(stops)
    ordered: list[Stop] = []
    current = depot
    total_distance = 0.0

    while remaining:
        nearest_idx = 0
        nearest_dist = float("inf")
        for idx, stop in enumerate(remaining):
            dist = distance_between(current, stop.coordinate)
            if dist < nearest_dist:
                nearest_dist = dist
                nearest_idx = idx
        total_distance += nearest_dist
        nearest = remaining.pop(nearest_idx)
        ordered.append(nearest)
        current = nearest.coordinate

    return RouteResult(
        ordered_stops=ordered,
        geometry=None,
        total_distance=total_distance,
        total_duration=total_distance / speed,
        used_fallback=True,
    )
