"""GeoJSON construction for resolved TravelTime routes."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from ...models.domain import Destination, Stop
from .classifier import is_finite_number
from .geometry import Coordinate, normalize_route_coordinates

MIN_LINE_POINTS = 2

PART_CANDIDATE_PATHS: tuple[tuple[str, ...], ...] = (
    ("polyline",),
    ("coordinates",),
    ("coords",),
    ("path",),
    ("points",),
    ("geometry",),
    ("geometry", "coordinates"),
    ("line", "geometry"),
    ("line", "polyline"),
    ("directions", "geometry"),
    ("directions", "path"),
    ("directions", "points"),
)
DIRECTION_PART_KEYS = ("polyline", "path", "points", "coordinates", "coords", "geometry")
ROUTE_CANDIDATE_PATHS: tuple[tuple[str, ...], ...] = (
    ("polyline",),
    ("path",),
    ("coordinates",),
    ("coords",),
    ("points",),
    ("geometry",),
    ("geometry", "coordinates"),
    ("lineString",),
)


def empty_feature_collection() -> dict:
    return {"type": "FeatureCollection", "features": []}


def line_feature(coordinates: Sequence[Coordinate], properties: dict) -> dict:
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": [list(point) for point in coordinates]},
        "properties": properties,
    }


def _dig(source: Any, path: Sequence[str]) -> Any:
    value = source
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _first_not_none(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def collect_coordinate_candidates(part: Any) -> list[Any]:
    """Geometry-bearing fields of a route part, in probing order."""
    candidates = [_dig(part, path) for path in PART_CANDIDATE_PATHS]

    direction_parts = _dig(part, ("directions", "parts"))
    if isinstance(direction_parts, list):
        for direction_part in direction_parts:
            candidates.extend(_dig(direction_part, (key,)) for key in DIRECTION_PART_KEYS)

    return candidates


def first_line_coordinates(candidates: Iterable[Any]) -> list[Coordinate]:
    for candidate in candidates:
        coordinates = normalize_route_coordinates(candidate)
        if len(coordinates) >= MIN_LINE_POINTS:
            return coordinates
    return []


def normalize_route_parts(parts: Any) -> list[dict]:
    """One LineString feature per route part that carries usable geometry."""
    if not isinstance(parts, list):
        return []

    features: list[dict] = []
    for index, part in enumerate(parts):
        coordinates = first_line_coordinates(collect_coordinate_candidates(part))
        if not coordinates:
            continue

        part_map = part if isinstance(part, Mapping) else {}
        features.append(
            line_feature(
                coordinates,
                {
                    "index": index,
                    "mode": _first_not_none(part_map.get("mode"), part_map.get("type"), "unknown"),
                    "type": _first_not_none(part_map.get("type"), "unknown"),
                    "travelTimeSeconds": _first_not_none(part_map.get("travel_time"), part_map.get("duration")),
                    "distanceMeters": part_map.get("distance"),
                },
            )
        )
    return features


def build_route_features(
    route: Any,
    parts_features: list[dict],
    stop: Stop | None,
    destination: Destination,
) -> list[dict]:
    if parts_features:
        return parts_features

    route_map = route if isinstance(route, Mapping) else {}
    travel_time = _first_not_none(route_map.get("travel_time"), route_map.get("duration"))
    distance = route_map.get("distance")

    coordinates = first_line_coordinates(_dig(route_map, path) for path in ROUTE_CANDIDATE_PATHS)
    if coordinates:
        return [
            line_feature(
                coordinates,
                {
                    "index": 0,
                    "mode": _first_not_none(route_map.get("mode"), "route"),
                    "type": _first_not_none(route_map.get("type"), "route"),
                    "travelTimeSeconds": travel_time,
                    "distanceMeters": distance,
                },
            )
        ]

    if stop is not None and is_finite_number(stop.lng) and is_finite_number(stop.lat):
        return [
            line_feature(
                [[stop.lng, stop.lat], [destination.coords.lng, destination.coords.lat]],
                {
                    "index": 0,
                    "mode": "fallback",
                    "type": "fallback",
                    "travelTimeSeconds": travel_time,
                    "distanceMeters": distance,
                    "fallback": True,
                },
            )
        ]

    return []


def build_route_feature_collection(
    route: Any,
    stop: Stop | None,
    destination: Destination,
) -> dict:
    """GeoJSON FeatureCollection for a route, falling back to a straight line to the destination."""
    parts = route.get("parts") if isinstance(route, Mapping) else None
    features = build_route_features(route, normalize_route_parts(parts), stop, destination)
    if not features:
        return empty_feature_collection()
    return {"type": "FeatureCollection", "features": features}
