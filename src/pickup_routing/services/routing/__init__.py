"""Route ordering: trip service client and nearest-neighbour fallback."""

from .models import RouteResult, TripResponse
from .planner import nearest_neighbor_route, plan_route

__all__ = ["RouteResult", "TripResponse", "plan_route", "nearest_neighbor_route"]
