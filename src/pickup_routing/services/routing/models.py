"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...models.domain import Coordinate, Stop


@dataclass(slots=True)
class TripResponse:
    """Parsed answer from the trip service.

    ``order`` lists input positions (0 is the depot) sorted by their
    position in the optimized trip. ``geometry`` is latitude-first.
    """

    order: List[int]
    distance: float
    duration: float
    geometry: Optional[List[Coordinate]]


@dataclass(slots=True)
class RouteResult:
    """Ordered stops for one day plus travel totals.

    Distance is in metres, duration in seconds. ``geometry`` is the
    road path as latitude-first coordinates and is only present when the
    trip service produced it.
    """

    ordered_stops: List[Stop]
    geometry: Optional[List[Coordinate]]
    total_distance: float
    total_duration: float
    used_fallback: bool = False
    fallback_reason: Optional[str] = None
