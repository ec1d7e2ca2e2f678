"""Batched many-to-one travel time queries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import BatchProgress, BatchResult, Destination, Stop, TravelTimeRecord
from .classifier import classify_travel_time, is_finite_number
from .stops import normalize_stops
from .traveltime_client import TravelTimeClient

ProgressCallback = Callable[[BatchProgress], None]

logger = logging.getLogger(__name__)


@dataclass
class _Accumulator:
    records: dict[str, TravelTimeRecord] = field(default_factory=dict)
    # dict keys keep first-seen order for the unreachable id set
    unreachable: dict[str, None] = field(default_factory=dict)


def _all_stops(stops: Any) -> bool:
    return isinstance(stops, (list, tuple)) and all(isinstance(stop, Stop) for stop in stops)


def chunk_stops(stops: Sequence[Stop], batch_size: int) -> list[list[Stop]]:
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [list(stops[i : i + batch_size]) for i in range(0, len(stops), batch_size)]


def _location(location_id: str, lat: float, lng: float) -> dict:
    return {"id": location_id, "coords": {"lat": lat, "lng": lng}}


def build_locations_payload(stops_chunk: Sequence[Stop], destination: Destination) -> list[dict]:
    locations = [_location(destination.id, destination.coords.lat, destination.coords.lng)]
    locations.extend(_location(stop.id, stop.lat, stop.lng) for stop in stops_chunk)
    return locations


def build_arrival_search(
    stops_chunk: Sequence[Stop],
    batch_index: int,
    destination: Destination,
    config: Settings,
) -> dict:
    return {
        "id": f"{config.search_id_prefix}-{batch_index}",
        "arrival_location_id": destination.id,
        "departure_location_ids": [stop.id for stop in stops_chunk],
        "transportation": {"type": "public_transport"},
        "arrival_time": config.arrival_time,
        "travel_time": config.max_travel_time_seconds,
        "properties": ["travel_time"],
    }


def build_matrix_payload(
    stops_chunk: Sequence[Stop],
    batch_index: int,
    destination: Destination,
    config: Settings,
) -> dict:
    return {
        "locations": build_locations_payload(stops_chunk, destination),
        "arrival_searches": [build_arrival_search(stops_chunk, batch_index, destination, config)],
    }


def reachable_record(travel_time_seconds: Any) -> TravelTimeRecord:
    finite = is_finite_number(travel_time_seconds)
    return TravelTimeRecord(
        status="reachable",
        travel_time_seconds=travel_time_seconds if finite else None,
        travel_time_minutes=travel_time_seconds / 60 if finite else None,
        bucket=classify_travel_time(travel_time_seconds),
    )


def _first_travel_time(location: Mapping[str, Any]) -> Any:
    properties = location.get("properties")
    if isinstance(properties, list) and properties and isinstance(properties[0], Mapping):
        return properties[0].get("travel_time")
    return None


def merge_batch_result(
    batch_response: Any,
    records: dict[str, TravelTimeRecord],
    unreachable: dict[str, None],
) -> None:
    """Fold one time-filter response into the running records.

    Malformed entries are skipped. A later write for the same id replaces the
    earlier one.
    """
    results = batch_response.get("results") if isinstance(batch_response, Mapping) else None
    for result in results or []:
        if not isinstance(result, Mapping):
            continue

        for location in result.get("locations") or []:
            if not isinstance(location, Mapping) or not location.get("id"):
                continue
            records[str(location["id"])] = reachable_record(_first_travel_time(location))

        for unreachable_id in result.get("unreachable") or []:
            if not unreachable_id:
                continue
            stop_id = str(unreachable_id)
            records[stop_id] = TravelTimeRecord.unreachable()
            unreachable[stop_id] = None


class BatchMatrixClient:
    """Runs sequential time-filter batches for a set of stops.

    One request is in flight at a time so that large runs stay under the
    TravelTime rate limit.
    """

    def __init__(
        self,
        config: Settings | None = None,
        client: TravelTimeClient | None = None,
        destination: Destination | None = None,
    ) -> None:
        self.config = config or default_settings
        self.client = client or TravelTimeClient(self.config)
        self.destination = destination or Destination.from_settings(self.config)

    def _empty_result(self) -> BatchResult:
        return BatchResult(
            records={},
            unreachable=(),
            total_stops=0,
            reachable=0,
            requested_at=datetime.now(timezone.utc).isoformat(),
            arrival_time=self.config.arrival_time,
            destination=self.destination,
        )

    def run(
        self,
        stops: Any,
        *,
        batch_size: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Fetch travel times for every stop; raw features are normalized first."""
        normalized_stops = normalize_stops(stops) if not _all_stops(stops) else list(stops)
        if not normalized_stops:
            return self._empty_result()

        if batch_size is None:
            batch_size = self.config.default_batch_size
        chunks = chunk_stops(normalized_stops, batch_size)
        accumulator = _Accumulator()
        start_time = time.time()
        logger.info(
            f"Requesting travel times for {len(normalized_stops)} stops in {len(chunks)} batch(es)"
        )

        for index, chunk in enumerate(chunks):
            if on_progress is not None:
                on_progress(BatchProgress(index, index, len(chunks), "requesting"))

            payload = build_matrix_payload(chunk, index, self.destination, self.config)
            response = self.client.time_filter(payload)
            merge_batch_result(response, accumulator.records, accumulator.unreachable)

            if on_progress is not None:
                on_progress(BatchProgress(index, index + 1, len(chunks), "completed"))

        reachable_count = sum(1 for record in accumulator.records.values() if record.status == "reachable")
        logger.info(
            f"Completed travel time run: {reachable_count}/{len(normalized_stops)} reachable "
            f"in {time.time() - start_time:.2f}s"
        )

        return BatchResult(
            records=dict(accumulator.records),
            unreachable=tuple(accumulator.unreachable),
            total_stops=len(normalized_stops),
            reachable=reachable_count,
            requested_at=datetime.now(timezone.utc).isoformat(),
            arrival_time=self.config.arrival_time,
            destination=self.destination,
        )


def fetch_travel_times_for_stops(
    features: Any,
    *,
    batch_size: int | None = None,
    on_progress: ProgressCallback | None = None,
    config: Settings | None = None,
) -> BatchResult:
    return BatchMatrixClient(config).run(features, batch_size=batch_size, on_progress=on_progress)
