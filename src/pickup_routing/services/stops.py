"""Selecting a day's stops and preparing them for routing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol, Sequence

from ..models.domain import Coordinate, Stop
from .geocoding import GeocodeError

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def geocode(self, address: str, city: str = "", state: str = "", zip_code: str = "") -> Coordinate | None: ...


@dataclass(slots=True)
class GeocodeBatchResult:
    stops: list[Stop]
    geocoded: int = 0
    failed: int = 0
    errors: dict[str, str] = field(default_factory=dict)


def stops_for_day(records: Iterable[Mapping[str, Any]], day: str) -> list[Stop]:
    """Build the stops booked on ``day`` (ISO date), skipping cancelled bookings."""
    return [
        Stop.from_record(record)
        for record in records
        if record.get("date") == day and record.get("status") != "cancelled"
    ]


def routable_stops(stops: Sequence[Stop]) -> list[Stop]:
    return [stop for stop in stops if stop.is_routable]


def unroutable_stops(stops: Sequence[Stop]) -> list[Stop]:
    return [stop for stop in stops if not stop.is_routable]


def geocode_missing(stops: Sequence[Stop], geocoder: Geocoder) -> GeocodeBatchResult:
    """Geocode, one at a time, every stop that has no coordinate yet.

    Stops are updated in place. A stop with no match is marked ``geocode_failed`` so it is not looked
    up again. A stop whose lookup errored is left as it was.
    """
    result = GeocodeBatchResult(stops=list(stops))
    pending = [stop for stop in result.stops if stop.needs_geocoding]
    for position, stop in enumerate(pending, start=1):
        logger.debug(f"Geocoding addresses... ({position}/{len(pending)})")
        try:
            coordinate = geocoder.geocode(stop.address, stop.city, stop.state, stop.zip_code)
        except GeocodeError as e:
            logger.error(f"Geocoding error for {stop.name or stop.stop_id}: {e}")
            result.errors[stop.stop_id] = str(e)
            continue
        if coordinate is None:
            stop.geocode_failed = True
            result.failed += 1
        else:
            stop.coordinate = coordinate
            result.geocoded += 1
    return result
