"""Routing request/response schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class StopModel(BaseModel):
    id: str
    type: Literal["pickup", "delivery"] = "pickup"
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    items: str = ""
    status: Optional[str] = None
    date: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    geocode_failed: bool = Field(default=False, description="Address was looked up and not found.")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Booking fields passed through unchanged.")
    sequence: Optional[int] = Field(default=None, description="1-based position in the planned route.")


class RoutePlanRequest(BaseModel):
    stops: List[StopModel]
    depot: Optional[CoordinateModel] = Field(
        default=None,
        description="Route start. Defaults to the configured depot.",
    )


class RouteSummaryModel(BaseModel):
    stop_count: int
    distance: str
    duration: str


class RoutePlanResponse(BaseModel):
    ordered_stops: List[StopModel]
    geometry: Optional[List[List[float]]] = Field(
        default=None,
        description="Road path as [latitude, longitude] pairs, present only when the trip service supplied it.",
    )
    total_distance_m: float
    total_duration_s: float
    used_fallback: bool
    fallback_reason: Optional[str] = None
    summary: RouteSummaryModel
    excluded_stop_ids: List[str] = Field(
        default_factory=list,
        description="Stops left out because they have no usable coordinate.",
    )


class DepotModel(BaseModel):
    name: str
    address: str
    latitude: float
    longitude: float
