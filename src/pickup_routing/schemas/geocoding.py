"""Geocoding request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .routing import StopModel


class GeocodeRequest(BaseModel):
    address: str
    city: str = ""
    state: str = ""
    zip: str = ""


class GeocodeResponse(BaseModel):
    found: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class StopGeocodeRequest(BaseModel):
    stops: List[StopModel]


class StopGeocodeResponse(BaseModel):
    stops: List[StopModel]
    geocoded: int = Field(..., description="Stops that received a coordinate.")
    failed: int = Field(..., description="Stops whose address had no match.")
    errors: Dict[str, str] = Field(default_factory=dict, description="Stop id -> error for lookups that errored.")
