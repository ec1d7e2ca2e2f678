"""TravelTime matrix and route services."""

from .cache import RouteCache
from .classifier import TRAVEL_TIME_BUCKETS, classify_travel_time
from .errors import (
    CredentialsNotConfiguredError,
    InvalidStopError,
    RateLimitError,
    RouteResponseError,
    TravelTimeError,
    TravelTimeHTTPError,
)
from .geometry import decode_polyline, encode_polyline, normalize_route_coordinates, resolve_axis_order
from .matrix import BatchMatrixClient, fetch_travel_times_for_stops
from .routes import RouteClient, fetch_route_for_stop
from .stops import normalize_stops

__all__ = [
    "TRAVEL_TIME_BUCKETS",
    "BatchMatrixClient",
    "CredentialsNotConfiguredError",
    "InvalidStopError",
    "RateLimitError",
    "RouteCache",
    "RouteClient",
    "RouteResponseError",
    "TravelTimeError",
    "TravelTimeHTTPError",
    "classify_travel_time",
    "decode_polyline",
    "encode_polyline",
    "fetch_route_for_stop",
    "fetch_travel_times_for_stops",
    "normalize_route_coordinates",
    "normalize_stops",
    "resolve_axis_order",
]
