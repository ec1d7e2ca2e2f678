"""Normalization of raw location features into canonical stops."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from ...models.domain import Stop
from .classifier import is_finite_number

logger = logging.getLogger(__name__)


def _first_present(properties: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = properties.get(key)
        if value is not None:
            return value
    return None


def _iter_features(features: Any) -> Iterable[Any]:
    if features is None:
        return ()
    if isinstance(features, Mapping):
        # Accept a full FeatureCollection as well as a bare feature list.
        return features.get("features") or ()
    return features


def normalize_stop(feature: Any) -> Stop | None:
    """Build a Stop from one GeoJSON-like feature, or None when it is unusable."""
    if not isinstance(feature, Mapping):
        return None
    properties = feature.get("properties")
    geometry = feature.get("geometry")
    if not isinstance(properties, Mapping) or not isinstance(geometry, Mapping):
        return None

    stop_id = _first_present(properties, "id", "stop_id")
    if not stop_id:
        return None

    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None

    lng, lat = coords[0], coords[1]
    if not is_finite_number(lat) or not is_finite_number(lng):
        return None

    stop_id = str(stop_id)
    name = _first_present(properties, "name", "stop_name")
    return Stop(
        id=stop_id,
        name=str(name) if name is not None else stop_id,
        lat=float(lat),
        lng=float(lng),
    )


def normalize_stops(features: Any) -> list[Stop]:
    """Convert raw features into stops, silently dropping malformed records."""
    normalized: list[Stop] = []
    dropped = 0

    for feature in _iter_features(features):
        stop = normalize_stop(feature)
        if stop is None:
            dropped += 1
            continue
        normalized.append(stop)

    if dropped:
        logger.debug(f"Dropped {dropped} malformed stop feature(s) during normalization")
    return normalized
