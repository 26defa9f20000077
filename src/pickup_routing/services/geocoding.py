"""Rate-limited address geocoding against Nominatim."""

from __future__ import annotations

import logging
import threading
import time
from functools import lru_cache
from typing import Callable, Sequence

import httpx

from ..config import settings
from ..models.domain import Coordinate

logger = logging.getLogger(__name__)


class GeocodeError(Exception):
    pass


class RateLimiter:
    """Serializes callers so that permitted slots are at least ``min_interval_seconds`` apart.

    The lock is held while waiting, so concurrent callers queue up behind
    each other instead of firing inside the same window.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must be non-negative.")
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_request: float | None = None

    def wait(self) -> float:
        """Block until the next permitted slot and claim it. Returns seconds waited."""
        with self._lock:
            waited = 0.0
            now = self._clock()
            if self._last_request is not None:
                remaining = self.min_interval_seconds - (now - self._last_request)
                if remaining > 0:
                    self._sleep(remaining)
                    waited = remaining
                    now = self._clock()
            self._last_request = now
            return waited


class NominatimGeocoder:
    def __init__(
        self,
        base_url: str | None = None,
        country_codes: Sequence[str] | None = None,
        user_agent: str | None = None,
        rate_limiter: RateLimiter | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.nominatim_url
        self.country_codes = tuple(country_codes if country_codes is not None else settings.geocoder_country_codes)
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.rate_limiter = rate_limiter or RateLimiter(settings.geocoder_min_interval_seconds)
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self._transport = transport

    def geocode(self, address: str, city: str = "", state: str = "", zip_code: str = "") -> Coordinate | None:
        """Return the best-match coordinate for an address, or None when nothing matches.

        Raises GeocodeError when the service cannot be reached or answers
        with something unreadable.
        """
        if not (address or "").strip():
            return None

        query = f"{address}, {city}, {state} {zip_code}".strip()
        params = {"q": query, "format": "json", "limit": "1"}
        if self.country_codes:
            params["countrycodes"] = ",".join(self.country_codes)
        headers = {"User-Agent": self.user_agent}

        self.rate_limiter.wait()
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(self.base_url, params=params, headers=headers)
                response.raise_for_status()
                results = response.json()
        except httpx.HTTPError as e:
            raise GeocodeError(f"Geocoding request failed for '{query}': {e}") from e
        except ValueError as e:
            raise GeocodeError(f"Geocoder returned invalid JSON for '{query}': {e}") from e

        if not isinstance(results, list):
            raise GeocodeError(f"Unexpected geocoder response for '{query}'.")
        if not results:
            logger.info(f"No geocoding match for '{query}'")
            return None

        try:
            best = results[0]
            return Coordinate(latitude=float(best["lat"]), longitude=float(best["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodeError(f"Malformed geocoder result for '{query}': {e}") from e


@lru_cache(maxsize=1)
def get_geocoder() -> NominatimGeocoder:
    """Process-wide geocoder; its rate limiter is shared by every caller."""
    return NominatimGeocoder()
