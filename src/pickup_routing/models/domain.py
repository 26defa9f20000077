"""Domain models for stops and the depot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from ..config import settings

StopKind = Literal["pickup", "delivery"]

# Fields lifted out of a booking record; anything else is carried in ``raw``.
_RECORD_FIELDS = ("id", "lat", "lng", "type", "name", "address", "city", "state", "zip", "items", "status", "date")


@dataclass(frozen=True, slots=True)
class Coordinate:
    """WGS84 position in decimal degrees, latitude first."""

    latitude: float
    longitude: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class Stop:
    """One scheduled pickup or delivery.

    ``geocode_failed`` marks a stop whose address was looked up and not
    found; such a stop is neither routed nor geocoded again.
    """

    stop_id: str
    coordinate: Optional[Coordinate] = None
    kind: StopKind = "pickup"
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    items: str = ""
    status: Optional[str] = None
    date: Optional[str] = None
    geocode_failed: bool = False
    raw: dict = field(default_factory=dict)

    @property
    def is_routable(self) -> bool:
        return self.coordinate is not None and not self.geocode_failed

    @property
    def needs_geocoding(self) -> bool:
        return self.coordinate is None and not self.geocode_failed

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Stop":
        """Build a stop from a booking document.

        ``lat``/``lng`` stored as ``False`` is the failed-geocode marker;
        missing or ``None`` means the address has not been geocoded yet.
        """
        if "id" not in record:
            raise ValueError("Booking record is missing an 'id'.")

        lat = record.get("lat")
        lng = record.get("lng")
        geocode_failed = lat is False or lng is False
        coordinate = None
        if not geocode_failed and lat is not None and lng is not None:
            coordinate = Coordinate(latitude=float(lat), longitude=float(lng))

        kind = record.get("type") or "pickup"
        if kind not in ("pickup", "delivery"):
            raise ValueError(f"Unknown stop type '{kind}' for booking {record['id']}.")

        return cls(
            stop_id=str(record["id"]),
            coordinate=coordinate,
            kind=kind,
            name=str(record.get("name") or ""),
            address=str(record.get("address") or ""),
            city=str(record.get("city") or ""),
            state=str(record.get("state") or ""),
            zip_code=str(record.get("zip") or ""),
            items=str(record.get("items") or ""),
            status=record.get("status"),
            date=record.get("date"),
            geocode_failed=geocode_failed,
            raw={key: value for key, value in record.items() if key not in _RECORD_FIELDS},
        )


@dataclass(slots=True)
class Depot:
    """The organisation's home base: start and implicit end of every route."""

    name: str
    address: str
    coordinate: Coordinate


def default_depot() -> Depot:
    return Depot(
        name=settings.depot_name,
        address=settings.depot_address,
        coordinate=Coordinate(latitude=settings.depot_latitude, longitude=settings.depot_longitude),
    )
