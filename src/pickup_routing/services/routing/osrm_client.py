"""HTTP client for the OSRM trip service."""

from __future__ import annotations

import logging
import time
from typing import Any, Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate
from .models import TripResponse

logger = logging.getLogger(__name__)


class TripServiceError(RuntimeError):
    """The trip service answered, but not with a usable trip."""


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def trip(self, coordinates: Sequence[Coordinate]) -> TripResponse:
        """Request a one-way optimized trip that starts at the first coordinate.

        Args:
            coordinates: Depot first, then the stops, all latitude-first.

        Returns:
            TripResponse with the visiting order, totals and road geometry.

        Raises:
            TripServiceError: the service reported a non-"Ok" code or the body was malformed.
            ConnectionError: the service could not be reached after retries.
            httpx.HTTPStatusError: the service kept answering with an HTTP error.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for an OSRM trip.")

        # OSRM expects "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{point.longitude},{point.latitude}" for point in coordinates)
        params = {
            "roundtrip": "false",
            "source": "first",
            "overview": "full",
            "geometries": "geojson",
        }
        url = f"{self.base_url}/trip/v1/{self.profile}/{coordinate_str}"

        data = self._get_json(url, params)
        return parse_trip_response(data, expected_points=len(coordinates))

    def _get_json(self, url: str, params: dict) -> Any:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    if response.is_client_error:
                        # OSRM reports NoTrips/NoSegment/InvalidQuery as 4xx with a JSON "code"
                        error_body = _osrm_error_body(response)
                        if error_body is not None:
                            return error_body
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to OSRM service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
                except ValueError as e:
                    raise TripServiceError(f"OSRM returned a body that is not JSON: {e}") from e
        finally:
            client.close()


def _osrm_error_body(response: httpx.Response) -> dict | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and "code" in data:
        return data
    return None


def parse_trip_response(data: Any, expected_points: int) -> TripResponse:
    """Validate an OSRM trip body and convert it to a TripResponse.

    OSRM lists one waypoint per input coordinate, in input order, each with
    ``waypoint_index`` giving its position in the optimized trip. GeoJSON
    geometry is longitude-first and is swapped to latitude-first here.
    """
    if not isinstance(data, dict):
        raise TripServiceError("OSRM trip response is not a JSON object.")

    code = data.get("code")
    if code != "Ok":
        message = data.get("message", "Unknown OSRM trip error")
        raise TripServiceError(f"OSRM trip request failed ({code}): {message}")

    trips = data.get("trips")
    waypoints = data.get("waypoints")
    if not trips or not isinstance(trips, list):
        raise TripServiceError("OSRM trip response contains no trips.")
    if not isinstance(waypoints, list) or len(waypoints) != expected_points:
        raise TripServiceError(
            f"OSRM returned {len(waypoints) if isinstance(waypoints, list) else 0} waypoints, "
            f"expected {expected_points}."
        )

    try:
        positions = [int(waypoint["waypoint_index"]) for waypoint in waypoints]
        trip = trips[0]
        distance = float(trip["distance"])
        duration = float(trip["duration"])
    except (KeyError, TypeError, ValueError) as e:
        raise TripServiceError(f"Malformed OSRM trip response: {e}") from e

    if sorted(positions) != list(range(expected_points)):
        raise TripServiceError(f"OSRM waypoint order is not a permutation: {positions}")
    if positions[0] != 0:
        raise TripServiceError("OSRM trip does not start at the depot.")
    if distance < 0 or duration < 0:
        raise TripServiceError("OSRM trip reported negative distance or duration.")

    order = sorted(range(expected_points), key=lambda input_index: positions[input_index])
    return TripResponse(
        order=order,
        distance=distance,
        duration=duration,
        geometry=_geojson_to_coordinates(trip.get("geometry")),
    )


def _geojson_to_coordinates(geometry: Any) -> list[Coordinate] | None:
    if not geometry:
        return None
    try:
        return [Coordinate(latitude=float(lat), longitude=float(lon)) for lon, lat, *_ in geometry["coordinates"]]
    except (KeyError, TypeError, ValueError) as e:
        raise TripServiceError(f"Malformed OSRM trip geometry: {e}") from e


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check the trip service by planning a minimal two-point trip around the depot."""
    base = (base_url or settings.osrm_base_url or "").rstrip("/")
    if not base:
        return False
    depot = Coordinate(settings.depot_latitude, settings.depot_longitude)
    nearby = Coordinate(settings.depot_latitude + 0.01, settings.depot_longitude)
    try:
        client = OSRMClient(base_url=base, timeout=5.0, max_retries=0, transport=transport)
        client.trip([depot, nearby])
        return True
    except (TripServiceError, ConnectionError, httpx.HTTPError):
        return False
