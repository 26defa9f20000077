"""Serializers for route results."""

from __future__ import annotations

import math
from typing import Any, Dict, List

from ...models.domain import Depot, Stop
from ..routing.models import RouteResult


def format_distance(meters: float) -> str:
    return f"{meters / 1000.0:.1f} km"


def format_duration(seconds: float) -> str:
    # round to whole minutes first so 59.5+ minutes carries into the hour
    hours, minutes = divmod(math.floor(seconds / 60 + 0.5), 60)
    if hours == 0:
        return f"{minutes} min"
    return f"{hours}h {minutes}m"


def stop_to_json(stop: Stop, sequence: int | None = None) -> dict:
    payload = {
        "id": stop.stop_id,
        "type": stop.kind,
        "name": stop.name,
        "address": stop.address,
        "city": stop.city,
        "state": stop.state,
        "zip": stop.zip_code,
        "items": stop.items,
        "status": stop.status,
        "date": stop.date,
        "latitude": stop.coordinate.latitude if stop.coordinate else None,
        "longitude": stop.coordinate.longitude if stop.coordinate else None,
        "geocode_failed": stop.geocode_failed,
        "extra": dict(stop.raw),
    }
    if sequence is not None:
        payload["sequence"] = sequence
    return payload


def route_result_to_json(result: RouteResult) -> dict:
    return {
        "ordered_stops": [stop_to_json(stop, sequence) for sequence, stop in enumerate(result.ordered_stops, start=1)],
        "geometry": [list(point.as_tuple()) for point in result.geometry] if result.geometry else None,
        "total_distance_m": result.total_distance,
        "total_duration_s": result.total_duration,
        "used_fallback": result.used_fallback,
        "fallback_reason": result.fallback_reason,
        "summary": {
            "stop_count": len(result.ordered_stops),
            "distance": format_distance(result.total_distance),
            "duration": format_duration(result.total_duration),
        },
    }


def route_result_to_geojson(result: RouteResult, depot: Depot) -> Dict[str, Any]:
    """Convert a route into a GeoJSON FeatureCollection for map renderers.

    GeoJSON positions are [lon, lat]; the swap from the latitude-first
    route coordinates happens here.
    """
    features: List[Dict[str, Any]] = [
        {
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [depot.coordinate.longitude, depot.coordinate.latitude],
            },
            "properties": {"role": "depot", "name": depot.name, "address": depot.address},
        }
    ]
    for sequence, stop in enumerate(result.ordered_stops, start=1):
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "Point",
                    "coordinates": [stop.coordinate.longitude, stop.coordinate.latitude],
                },
                "properties": {
                    "role": "stop",
                    "id": stop.stop_id,
                    "sequence": sequence,
                    "kind": stop.kind,
                    "name": stop.name,
                    "address": stop.address,
                    "items": stop.items,
                },
            }
        )
    if result.geometry and len(result.geometry) >= 2:
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[point.longitude, point.latitude] for point in result.geometry],
                },
                "properties": {
                    "role": "path",
                    "total_distance_m": result.total_distance,
                    "total_duration_s": result.total_duration,
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}
