"""Polyline decoding and coordinate extraction from loosely shaped route geometry.

TravelTime route parts do not agree on a geometry shape: some carry an encoded
polyline, some nested coordinate arrays, some lists of ``{lat, lng}`` objects
and some wrap any of those in a sub-object. Everything here returns
coordinates in GeoJSON ``[lng, lat]`` order and never raises for bad input.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Sequence

from .classifier import is_finite_number

POLYLINE_PRECISION = 1e5
# Bound on nested array/object recursion for pathological payloads.
MAX_GEOMETRY_DEPTH = 32

LAT_KEYS = ("lat", "latitude", "y")
LNG_KEYS = ("lng", "lon", "longitude", "x")
CONTAINER_KEYS = ("coordinates", "path", "points", "coords")

Coordinate = list[float]
Extractor = Callable[[Any, int], Optional[list[Coordinate]]]


def _decode_value(polyline: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        b = ord(polyline[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(polyline: Any) -> list[Coordinate]:
    """Decode an encoded polyline string to a list of [lng, lat] pairs.

    Empty or non-string input yields an empty list. A truncated trailing
    point is discarded and the points decoded before it are kept.
    """
    if not isinstance(polyline, str) or not polyline:
        return []

    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(polyline):
        try:
            delta_lat, index = _decode_value(polyline, index)
            delta_lng, index = _decode_value(polyline, index)
        except IndexError:
            break
        lat += delta_lat
        lng += delta_lng
        coordinates.append([lng / POLYLINE_PRECISION, lat / POLYLINE_PRECISION])

    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(coordinates: Sequence[Sequence[float]]) -> str:
    """Encode [lng, lat] pairs with the same scheme ``decode_polyline`` reads."""
    encoded = []
    prev_lat = 0
    prev_lng = 0
    for lng, lat in coordinates:
        lat_e5 = int(round(lat * POLYLINE_PRECISION))
        lng_e5 = int(round(lng * POLYLINE_PRECISION))
        encoded.append(_encode_value(lat_e5 - prev_lat))
        encoded.append(_encode_value(lng_e5 - prev_lng))
        prev_lat, prev_lng = lat_e5, lng_e5
    return "".join(encoded)


def resolve_axis_order(a: float, b: float) -> tuple[float, float]:
    """Return ``(lat, lng)`` for a numeric pair of unknown axis order.

    Best effort: latitude is bounded to [-90, 90], so when exactly one value is
    outside that range it is taken as longitude. When both (or neither) are in
    range the first value is assumed to be latitude.
    """
    a_outside = abs(a) > 90
    b_outside = abs(b) > 90
    if a_outside and not b_outside:
        return b, a
    return a, b


def _pair_to_coordinate(first: Any, second: Any) -> Coordinate | None:
    if not is_finite_number(first) or not is_finite_number(second):
        return None
    lat, lng = resolve_axis_order(first, second)
    return [lng, lat]


def _lookup(point: Mapping[Any, Any], keys: Sequence[str], position: int) -> Any:
    for key in keys:
        value = point.get(key)
        if value is not None:
            return value
    value = point.get(position)
    if value is None:
        value = point.get(str(position))
    return value


def _point_from_mapping(point: Mapping[Any, Any]) -> Coordinate | None:
    lat = _lookup(point, LAT_KEYS, 0)
    lng = _lookup(point, LNG_KEYS, 1)
    if is_finite_number(lat) and is_finite_number(lng):
        return [lng, lat]
    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _from_encoded_string(fragment: Any, depth: int) -> list[Coordinate] | None:
    if isinstance(fragment, str):
        return decode_polyline(fragment)
    return None


def _from_numeric_pair(fragment: Any, depth: int) -> list[Coordinate] | None:
    if not _is_sequence(fragment) or not all(is_finite_number(value) for value in fragment):
        return None
    if len(fragment) < 2:
        return []
    coordinate = _pair_to_coordinate(fragment[0], fragment[1])
    return [coordinate] if coordinate else []


def _from_nested_arrays(fragment: Any, depth: int) -> list[Coordinate] | None:
    if not _is_sequence(fragment) or not _is_sequence(fragment[0]):
        return None
    flattened: list[Coordinate] = []
    for entry in fragment:
        flattened.extend(normalize_route_coordinates(entry, _depth=depth + 1))
    # Nothing usable: let the per-entry strategy have a go.
    return flattened or None


def _from_point_list(fragment: Any, depth: int) -> list[Coordinate] | None:
    if not _is_sequence(fragment):
        return None
    coordinates: list[Coordinate] = []
    for entry in fragment:
        if not entry:
            continue
        coordinate = None
        if _is_sequence(entry) and len(entry) >= 2:
            coordinate = _pair_to_coordinate(entry[0], entry[1])
        elif isinstance(entry, Mapping):
            coordinate = _point_from_mapping(entry)
        if coordinate:
            coordinates.append(coordinate)
    return coordinates


def _from_container(fragment: Any, depth: int) -> list[Coordinate] | None:
    if not isinstance(fragment, Mapping):
        return None
    for key in CONTAINER_KEYS:
        if _is_sequence(fragment.get(key)):
            return normalize_route_coordinates(fragment[key], _depth=depth + 1)
    if isinstance(fragment.get("polyline"), str):
        return normalize_route_coordinates(fragment["polyline"], _depth=depth + 1)
    return None


def _from_point_object(fragment: Any, depth: int) -> list[Coordinate] | None:
    if not isinstance(fragment, Mapping):
        return None
    coordinate = _point_from_mapping(fragment)
    return [coordinate] if coordinate else None


COORDINATE_EXTRACTORS: tuple[Extractor, ...] = (
    _from_encoded_string,
    _from_numeric_pair,
    _from_nested_arrays,
    _from_point_list,
    _from_container,
    _from_point_object,
)


def normalize_route_coordinates(fragment: Any, *, _depth: int = 0) -> list[Coordinate]:
    """Extract [lng, lat] coordinates from a geometry fragment of unknown shape."""
    if not fragment or _depth > MAX_GEOMETRY_DEPTH:
        return []
    for extractor in COORDINATE_EXTRACTORS:
        coordinates = extractor(fragment, _depth)
        if coordinates is not None:
            return coordinates
    return []
