"""Exceptions raised by the TravelTime pipeline."""

from __future__ import annotations


class TravelTimeError(Exception):
    """Base class for travel time pipeline failures."""


class CredentialsNotConfiguredError(TravelTimeError):
    def __init__(self) -> None:
        super().__init__(
            "TravelTime credentials are not configured. "
            "Set TRANSIT_REACH_TRAVELTIME_APP_ID and TRANSIT_REACH_TRAVELTIME_API_KEY."
        )


class InvalidStopError(TravelTimeError, ValueError):
    """Stop is missing an id or has non-finite coordinates."""


class TravelTimeHTTPError(TravelTimeError):
    """Non-success response from a TravelTime endpoint."""

    def __init__(self, endpoint: str, status_code: int, body: str = "") -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body
        super().__init__(f"TravelTime {endpoint} request failed with {status_code}: {body}")


class RateLimitError(TravelTimeHTTPError):
    """HTTP 429 from TravelTime."""


class RouteResponseError(TravelTimeError, ValueError):
    """Routes response did not contain a result/location/properties triple."""
