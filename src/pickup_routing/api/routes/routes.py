"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...models.domain import Coordinate, Depot, Stop, default_depot
from ...schemas.routing import DepotModel, RoutePlanRequest, RoutePlanResponse, StopModel
from ...services.outputs.route_formatter import route_result_to_geojson, route_result_to_json
from ...services.routing.models import RouteResult
from ...services.routing.planner import plan_route
from ...services.stops import routable_stops, unroutable_stops

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


def stop_from_model(model: StopModel) -> Stop:
    coordinate = None
    if model.latitude is not None and model.longitude is not None:
        coordinate = Coordinate(latitude=model.latitude, longitude=model.longitude)
    return Stop(
        stop_id=model.id,
        coordinate=coordinate,
        kind=model.type,
        name=model.name,
        address=model.address,
        city=model.city,
        state=model.state,
        zip_code=model.zip,
        items=model.items,
        status=model.status,
        date=model.date,
        geocode_failed=model.geocode_failed,
        raw=dict(model.extra),
    )


def _resolve_depot(payload: RoutePlanRequest) -> Depot:
    depot = default_depot()
    if payload.depot is not None:
        depot.coordinate = Coordinate(latitude=payload.depot.latitude, longitude=payload.depot.longitude)
    return depot


def _plan(payload: RoutePlanRequest, depot: Depot) -> tuple[RouteResult, list[str]]:
    stops = [stop_from_model(model) for model in payload.stops]
    excluded = [stop.stop_id for stop in unroutable_stops(stops)]
    if excluded:
        logger.info(f"Excluding {len(excluded)} stops without coordinates from routing")
    return plan_route(depot.coordinate, routable_stops(stops)), excluded


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    try:
        result, excluded = _plan(payload, _resolve_depot(payload))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return RoutePlanResponse(**route_result_to_json(result), excluded_stop_ids=excluded)


@router.post("/plan/geojson", status_code=status.HTTP_200_OK)
def plan_geojson(payload: RoutePlanRequest) -> dict:
    """Plan the route and return it as a GeoJSON FeatureCollection."""
    depot = _resolve_depot(payload)
    try:
        result, _ = _plan(payload, depot)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return route_result_to_geojson(result, depot)


depot_router = APIRouter(tags=["depot"])


@depot_router.get("/depot", response_model=DepotModel)
def get_depot() -> DepotModel:
    depot = default_depot()
    return DepotModel(
        name=depot.name,
        address=depot.address,
        latitude=depot.coordinate.latitude,
        longitude=depot.coordinate.longitude,
    )
