"""Domain models for stops, travel time results and resolved routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from ..config import Settings, settings as default_settings

TravelStatus = Literal["reachable", "unreachable"]
ProgressStage = Literal["requesting", "completed"]


@dataclass(slots=True, frozen=True)
class Stop:
    """A canonical transit stop. Only built by the stop normalizer or after validation."""

    id: str
    name: str
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "lat": self.lat, "lng": self.lng}


@dataclass(slots=True, frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(slots=True, frozen=True)
class Destination:
    """Fixed arrival point shared by every search."""

    id: str
    coords: Coordinates
    label: str

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "Destination":
        config = config or default_settings
        return cls(
            id=config.destination_id,
            coords=Coordinates(lat=config.destination_lat, lng=config.destination_lng),
            label=config.destination_label,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "coords": {"lat": self.coords.lat, "lng": self.coords.lng},
            "label": self.label,
        }


@dataclass(slots=True, frozen=True)
class TravelTimeRecord:
    status: TravelStatus
    travel_time_seconds: Optional[float] = None
    travel_time_minutes: Optional[float] = None
    bucket: Optional[str] = None

    @classmethod
    def unreachable(cls) -> "TravelTimeRecord":
        return cls(status="unreachable")

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "travelTimeSeconds": self.travel_time_seconds,
            "travelTimeMinutes": self.travel_time_minutes,
            "bucket": self.bucket,
        }


@dataclass(slots=True, frozen=True)
class BatchProgress:
    batch_index: int
    completed_batches: int
    total_batches: int
    stage: ProgressStage


@dataclass(slots=True, frozen=True)
class BatchResult:
    """Reachability map for one full matrix run."""

    records: Mapping[str, TravelTimeRecord]
    unreachable: tuple[str, ...]
    total_stops: int
    reachable: int
    requested_at: str
    arrival_time: str
    destination: Destination

    def to_dict(self) -> dict:
        return {
            "records": {stop_id: record.to_dict() for stop_id, record in self.records.items()},
            "unreachable": list(self.unreachable),
            "totalStops": self.total_stops,
            "reachable": self.reachable,
            "requestedAt": self.requested_at,
            "arrivalTime": self.arrival_time,
            "destination": self.destination.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class RouteSummary:
    """Resolved route between one stop and the destination."""

    stop: Optional[Stop]
    stop_id: Optional[str]
    travel_time_seconds: Optional[float]
    distance_meters: Optional[float]
    departure_time: Optional[str]
    arrival_time: Optional[str]
    parts: list[Any] = field(default_factory=list)
    geojson: dict = field(default_factory=lambda: {"type": "FeatureCollection", "features": []})

    def to_dict(self) -> dict:
        return {
            "stop": self.stop.to_dict() if self.stop else None,
            "stopId": self.stop_id,
            "travelTimeSeconds": self.travel_time_seconds,
            "distanceMeters": self.distance_meters,
            "departureTime": self.departure_time,
            "arrivalTime": self.arrival_time,
            "parts": self.parts,
            "geojson": self.geojson,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RouteSummary":
        stop_payload = payload.get("stop")
        stop = None
        if stop_payload:
            stop = Stop(
                id=str(stop_payload["id"]),
                name=str(stop_payload.get("name") or stop_payload["id"]),
                lat=float(stop_payload["lat"]),
                lng=float(stop_payload["lng"]),
            )
        geojson = payload.get("geojson")
        if not isinstance(geojson, dict) or geojson.get("type") != "FeatureCollection":
            raise ValueError("Route payload is missing a FeatureCollection.")
        return cls(
            stop=stop,
            stop_id=payload.get("stopId"),
            travel_time_seconds=payload.get("travelTimeSeconds"),
            distance_meters=payload.get("distanceMeters"),
            departure_time=payload.get("departureTime"),
            arrival_time=payload.get("arrivalTime"),
            parts=list(payload.get("parts") or []),
            geojson=geojson,
        )
