"""Per-stop route resolution against the TravelTime routes endpoint."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ...config import Settings, settings as default_settings
from ...models.domain import Destination, RouteSummary, Stop
from ...persistence.session import SessionStore
from .cache import RouteCache
from .classifier import is_finite_number
from .errors import InvalidStopError, RouteResponseError
from .route_geometry import build_route_feature_collection
from .traveltime_client import TravelTimeClient

logger = logging.getLogger(__name__)


def coerce_stop(stop: Any) -> Stop:
    """Validate a Stop or stop-like mapping before any I/O happens."""
    if isinstance(stop, Stop):
        stop_id, name, lat, lng = stop.id, stop.name, stop.lat, stop.lng
    elif isinstance(stop, Mapping):
        stop_id, name, lat, lng = stop.get("id"), stop.get("name"), stop.get("lat"), stop.get("lng")
    else:
        raise InvalidStopError("Invalid stop provided for route request.")

    if not stop_id or not is_finite_number(lat) or not is_finite_number(lng):
        raise InvalidStopError("Invalid stop provided for route request.")

    stop_id = str(stop_id)
    return Stop(id=stop_id, name=str(name) if name is not None else stop_id, lat=float(lat), lng=float(lng))


def build_route_payload(stop: Stop, destination: Destination, config: Settings) -> dict:
    return {
        "locations": [
            {"id": stop.id, "coords": {"lat": stop.lat, "lng": stop.lng}},
            {"id": destination.id, "coords": {"lat": destination.coords.lat, "lng": destination.coords.lng}},
        ],
        "arrival_searches": [
            {
                "id": f"route-{stop.id}",
                "arrival_location_id": destination.id,
                "departure_location_ids": [stop.id],
                "transportation": {"type": "public_transport"},
                "arrival_time": config.arrival_time,
                "properties": ["travel_time", "distance", "route"],
            }
        ],
    }


def _first_mapping(value: Any) -> Mapping | None:
    if isinstance(value, list) and value and isinstance(value[0], Mapping):
        return value[0]
    return None


def parse_route_response(data: Any, stop: Stop | None, destination: Destination) -> RouteSummary:
    """Turn a routes response into a RouteSummary with GeoJSON geometry.

    Raises RouteResponseError when the first result/location/properties
    triple is missing.
    """
    result = _first_mapping(data.get("results")) if isinstance(data, Mapping) else None
    location = _first_mapping(result.get("locations")) if result else None
    properties = _first_mapping(location.get("properties")) if location else None

    if not properties:
        raise RouteResponseError("Route properties missing from TravelTime response.")

    route = properties.get("route")
    if not isinstance(route, Mapping):
        route = {}
    parts = route.get("parts")
    if not isinstance(parts, list):
        parts = []

    arrival_time = route.get("arrival_time")
    if arrival_time is None:
        arrival_time = result.get("arrival_time")

    return RouteSummary(
        stop=stop,
        stop_id=stop.id if stop else None,
        travel_time_seconds=properties.get("travel_time"),
        distance_meters=properties.get("distance"),
        departure_time=route.get("departure_time"),
        arrival_time=arrival_time,
        parts=parts,
        geojson=build_route_feature_collection(route, stop, destination),
    )


class RouteClient:
    """Resolves the route for one stop, consulting the session cache first."""

    def __init__(
        self,
        config: Settings | None = None,
        client: TravelTimeClient | None = None,
        cache: RouteCache | None = None,
        destination: Destination | None = None,
    ) -> None:
        self.config = config or default_settings
        self.client = client or TravelTimeClient(self.config)
        self.cache = cache
        self.destination = destination or Destination.from_settings(self.config)

    def resolve(self, stop: Any) -> RouteSummary:
        stop = coerce_stop(stop)

        if self.cache is not None:
            cached = self.cache.get(stop.id)
            if cached is not None:
                logger.info(f"Route cache hit for stop '{stop.id}'")
                return cached

        payload = build_route_payload(stop, self.destination, self.config)
        data = self.client.routes(payload)
        summary = parse_route_response(data, stop, self.destination)

        if self.cache is not None:
            self.cache.set(stop.id, summary)
        return summary


# Process-lifetime store backing fetch_route_for_stop when no cache is given.
_session_store = SessionStore()


def fetch_route_for_stop(
    stop: Any,
    *,
    cache: RouteCache | None = None,
    config: Settings | None = None,
) -> RouteSummary:
    if cache is None:
        cache = RouteCache.from_settings(_session_store, config)
    return RouteClient(config, cache=cache).resolve(stop)
