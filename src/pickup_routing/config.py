"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PICKUP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Pickup Route Planner API"
    api_prefix: str = "/api"

    depot_name: str = Field(default="Habitat for Humanity ReStore", description="Display name of the home base.")
    depot_address: str = Field(
        default="44 Great Northern Rd, Sault Ste. Marie, ON",
        description="Display address of the home base.",
    )
    depot_latitude: float = Field(default=46.5240, ge=-90.0, le=90.0)
    depot_longitude: float = Field(default=-84.3170, ge=-180.0, le=180.0)

    osrm_base_url: Optional[str] = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM trip service. Leave empty to always use the local heuristic.",
    )
    osrm_profile: str = Field(default="driving", description="OSRM profile used for trip requests.")
    osrm_timeout_seconds: float = Field(default=30.0, gt=0.0)
    osrm_max_retries: int = Field(default=1, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)
    fallback_average_speed_mps: float = Field(
        default=13.4,
        gt=0.0,
        description="Assumed average speed (m/s, roughly 30 mph) for the nearest-neighbour duration estimate.",
    )

    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org/search",
        description="Nominatim search endpoint used for geocoding.",
    )
    geocoder_country_codes: tuple[str, ...] = Field(
        default=("ca",),
        description="ISO country codes that geocoding results are restricted to.",
    )
    geocoder_user_agent: str = Field(default="HabitatAdminDashboard/1.0")
    geocoder_min_interval_seconds: float = Field(
        default=1.1,
        ge=0.0,
        description="Minimum spacing between outbound geocoding requests, process-wide.",
    )
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("osrm_base_url", mode="before")
    @classmethod
    def _blank_url_disables(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip().rstrip("/")
        return text or None

    @field_validator("frontend_allowed_origins", "geocoder_country_codes", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
