"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSIT_REACH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Transit Reach API"
    api_prefix: str = "/api"

    # TravelTime credentials
    traveltime_app_id: Optional[str] = Field(
        default=None,
        description="TravelTime application id sent as X-Application-Id.",
    )
    traveltime_api_key: Optional[str] = Field(
        default=None,
        description="TravelTime API key sent as X-Api-Key.",
    )
    matrix_api_url: str = Field(
        default="https://api.traveltimeapp.com/v4/time-filter",
        description="Many-to-one travel time endpoint.",
    )
    routes_api_url: str = Field(
        default="https://api.traveltimeapp.com/v4/routes",
        description="Single origin route endpoint.",
    )
    request_timeout_seconds: float = Field(default=60.0, gt=0.0)

    # Fixed destination and arrival
    destination_id: str = "kennedy-station"
    destination_label: str = "Kennedy Station"
    destination_lat: float = Field(default=43.7324073, ge=-90.0, le=90.0)
    destination_lng: float = Field(default=-79.267185, ge=-180.0, le=180.0)
    arrival_time: str = Field(
        default="2025-11-03T08:00:00-05:00",
        description="ISO-8601 arrival timestamp used for every search.",
    )
    max_travel_time_seconds: int = Field(
        default=5400,
        ge=1,
        description="Search ceiling passed to the matrix endpoint, not a result filter.",
    )

    # Batching and retry
    default_batch_size: int = Field(default=100, ge=1)
    max_retry_attempts: int = Field(default=4, ge=1)
    base_retry_delay_seconds: float = Field(default=0.75, ge=0.0)
    search_id_prefix: str = "scarborough-summit"
    route_cache_prefix: str = "traveltime-route"

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @property
    def credentials_configured(self) -> bool:
        return bool(self.traveltime_app_id and self.traveltime_api_key)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
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
