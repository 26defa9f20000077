"""Geocoding endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.geocoding import GeocodeRequest, GeocodeResponse, StopGeocodeRequest, StopGeocodeResponse
from ...schemas.routing import StopModel
from ...services.geocoding import GeocodeError, NominatimGeocoder, get_geocoder
from ...services.outputs.route_formatter import stop_to_json
from ...services.stops import geocode_missing
from .routes import stop_from_model

router = APIRouter(tags=["geocoding"])


@router.post("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
def geocode(payload: GeocodeRequest, geocoder: NominatimGeocoder = Depends(get_geocoder)) -> GeocodeResponse:
    try:
        coordinate = geocoder.geocode(payload.address, payload.city, payload.state, payload.zip)
    except GeocodeError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if coordinate is None:
        return GeocodeResponse(found=False)
    return GeocodeResponse(found=True, latitude=coordinate.latitude, longitude=coordinate.longitude)


@router.post("/stops/geocode", response_model=StopGeocodeResponse, status_code=status.HTTP_200_OK)
def geocode_stops(
    payload: StopGeocodeRequest,
    geocoder: NominatimGeocoder = Depends(get_geocoder),
) -> StopGeocodeResponse:
    """Fill in coordinates for stops that have none; unmatched addresses are flagged."""
    stops = [stop_from_model(model) for model in payload.stops]
    result = geocode_missing(stops, geocoder)
    return StopGeocodeResponse(
        stops=[StopModel(**stop_to_json(stop)) for stop in result.stops],
        geocoded=result.geocoded,
        failed=result.failed,
        errors=result.errors,
    )
