import json

import httpx
import pytest

from transit_reach.config import Settings
from transit_reach.models.domain import Stop, TravelTimeRecord
from transit_reach.services.traveltime.errors import (
    CredentialsNotConfiguredError,
    RateLimitError,
    TravelTimeHTTPError,
)
from transit_reach.services.traveltime.matrix import BatchMatrixClient, chunk_stops, merge_batch_result
from transit_reach.services.traveltime.traveltime_client import TravelTimeClient


def _settings(**overrides) -> Settings:
    values = {"traveltime_app_id": "app-id", "traveltime_api_key": "api-key"}
    values.update(overrides)
    return Settings(**values)


def _feature(stop_id: str, lng: float, lat: float) -> dict:
    return {"type": "Feature", "properties": {"id": stop_id}, "geometry": {"type": "Point", "coordinates": [lng, lat]}}


def _echo_response(payload: dict) -> dict:
    """Every departure is reachable in 10 minutes except ids ending in 'X'."""
    search = payload["arrival_searches"][0]
    reachable = [stop_id for stop_id in search["departure_location_ids"] if not stop_id.endswith("X")]
    unreachable = [stop_id for stop_id in search["departure_location_ids"] if stop_id.endswith("X")]
    return {
        "results": [
            {
                "search_id": search["id"],
                "locations": [{"id": stop_id, "properties": [{"travel_time": 600}]} for stop_id in reachable],
                "unreachable": unreachable,
            }
        ]
    }


class RecordingTransport:
    def __init__(self, responder):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request, len(self.requests))

    def payloads(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]


def _matrix_client(responder, config=None, sleeps=None):
    config = config or _settings()
    transport = RecordingTransport(responder)
    http_client = httpx.Client(transport=httpx.MockTransport(transport))
    sleep = sleeps.append if sleeps is not None else (lambda seconds: None)
    client = TravelTimeClient(config, http_client=http_client, sleep=sleep)
    return BatchMatrixClient(config, client=client), transport


def _ok(request, call_number):
    return httpx.Response(200, json=_echo_response(json.loads(request.content)))


def test_merge_batch_result_example():
    records: dict[str, TravelTimeRecord] = {}
    unreachable: dict[str, None] = {}

    merge_batch_result(
        {"results": [{"locations": [{"id": "A", "properties": [{"travel_time": 900}]}], "unreachable": ["B"]}]},
        records,
        unreachable,
    )

    assert records["A"] == TravelTimeRecord("reachable", 900, 15.0, "0-15 min")
    assert records["B"] == TravelTimeRecord("unreachable", None, None, None)
    assert list(unreachable) == ["B"]


def test_merge_batch_result_skips_malformed_entries():
    records: dict[str, TravelTimeRecord] = {}
    unreachable: dict[str, None] = {}

    merge_batch_result(
        {
            "results": [
                None,
                {"locations": [{"properties": [{"travel_time": 60}]}, "junk", {"id": "C"}], "unreachable": [None, ""]},
            ]
        },
        records,
        unreachable,
    )
    merge_batch_result(None, records, unreachable)
    merge_batch_result({"results": "nope"}, records, unreachable)

    assert records == {"C": TravelTimeRecord("reachable", None, None, None)}
    assert unreachable == {}


def test_chunk_stops_preserves_order():
    stops = [Stop(id=str(i), name=str(i), lat=43.7, lng=-79.3) for i in range(5)]

    chunks = chunk_stops(stops, 2)

    assert [[stop.id for stop in chunk] for chunk in chunks] == [["0", "1"], ["2", "3"], ["4"]]
    with pytest.raises(ValueError):
        chunk_stops(stops, 0)


def test_run_batches_sequentially_and_reports_progress():
    features = [_feature(f"S{i}", -79.3 + i * 0.01, 43.7) for i in range(4)] + [_feature("S4X", -79.25, 43.75)]
    matrix, transport = _matrix_client(_ok)
    events = []

    result = matrix.run(features, batch_size=2, on_progress=events.append)

    payloads = transport.payloads()
    assert [payload["arrival_searches"][0]["id"] for payload in payloads] == [
        "scarborough-summit-0",
        "scarborough-summit-1",
        "scarborough-summit-2",
    ]
    assert [payload["arrival_searches"][0]["departure_location_ids"] for payload in payloads] == [
        ["S0", "S1"],
        ["S2", "S3"],
        ["S4X"],
    ]
    assert [(event.batch_index, event.completed_batches, event.stage) for event in events] == [
        (0, 0, "requesting"),
        (0, 1, "completed"),
        (1, 1, "requesting"),
        (1, 2, "completed"),
        (2, 2, "requesting"),
        (2, 3, "completed"),
    ]
    assert all(event.total_batches == 3 for event in events)

    assert result.total_stops == 5
    assert result.reachable == 4
    assert result.unreachable == ("S4X",)
    assert result.records["S0"].bucket == "0-15 min"
    assert result.records["S4X"].status == "unreachable"
    assert result.arrival_time == "2025-11-03T08:00:00-05:00"
    assert result.destination.id == "kennedy-station"


def test_run_builds_public_transport_payload_with_destination_first():
    matrix, transport = _matrix_client(_ok)

    matrix.run([_feature("S1", -79.279, 43.711)])

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.traveltimeapp.com/v4/time-filter"
    assert request.headers["X-Application-Id"] == "app-id"
    assert request.headers["X-Api-Key"] == "api-key"
    payload = transport.payloads()[0]
    assert payload["locations"] == [
        {"id": "kennedy-station", "coords": {"lat": 43.7324073, "lng": -79.267185}},
        {"id": "S1", "coords": {"lat": 43.711, "lng": -79.279}},
    ]
    search = payload["arrival_searches"][0]
    assert search["arrival_location_id"] == "kennedy-station"
    assert search["transportation"] == {"type": "public_transport"}
    assert search["arrival_time"] == "2025-11-03T08:00:00-05:00"
    assert search["travel_time"] == 5400
    assert search["properties"] == ["travel_time"]


def test_run_with_no_valid_stops_makes_no_requests():
    matrix, transport = _matrix_client(_ok)

    result = matrix.run([{"properties": {}}, None])

    assert transport.requests == []
    assert result.records == {}
    assert result.total_stops == 0
    assert result.reachable == 0
    assert result.unreachable == ()


def test_rate_limited_batch_retries_with_linear_backoff():
    def responder(request, call_number):
        if call_number <= 3:
            return httpx.Response(429, text="slow down")
        return _ok(request, call_number)

    sleeps: list[float] = []
    matrix, transport = _matrix_client(responder, sleeps=sleeps)

    result = matrix.run([_feature("S1", -79.279, 43.711)])

    assert len(transport.requests) == 4
    assert sleeps == [0.75, 1.5, 2.25]
    assert sum(sleeps) == pytest.approx(4.5)
    assert result.reachable == 1


def test_rate_limit_after_final_attempt_fails_the_run():
    sleeps: list[float] = []
    matrix, transport = _matrix_client(lambda request, n: httpx.Response(429, text="slow down"), sleeps=sleeps)

    with pytest.raises(RateLimitError) as excinfo:
        matrix.run([_feature("S1", -79.279, 43.711)])

    assert len(transport.requests) == 4
    assert sleeps == [0.75, 1.5, 2.25]
    assert excinfo.value.status_code == 429
    assert "slow down" in str(excinfo.value)


def test_http_error_aborts_run_after_earlier_progress():
    def responder(request, call_number):
        if call_number == 2:
            return httpx.Response(500, text="upstream exploded")
        return _ok(request, call_number)

    matrix, transport = _matrix_client(responder)
    events = []
    features = [_feature(f"S{i}", -79.3, 43.7) for i in range(3)]

    with pytest.raises(TravelTimeHTTPError) as excinfo:
        matrix.run(features, batch_size=1, on_progress=events.append)

    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "upstream exploded"
    assert "500" in str(excinfo.value)
    assert not isinstance(excinfo.value, RateLimitError)
    assert len(transport.requests) == 2
    assert [(event.batch_index, event.stage) for event in events] == [
        (0, "requesting"),
        (0, "completed"),
        (1, "requesting"),
    ]


def test_missing_credentials_fail_before_any_request():
    config = _settings(traveltime_app_id=None, traveltime_api_key=None)
    matrix, transport = _matrix_client(_ok, config=config)

    with pytest.raises(CredentialsNotConfiguredError):
        matrix.run([_feature("S1", -79.279, 43.711)])

    assert transport.requests == []


def test_duplicate_ids_across_batches_keep_last_write():
    def responder(request, call_number):
        if call_number == 1:
            return httpx.Response(200, json={"results": [{"locations": [{"id": "A", "properties": [{"travel_time": 300}]}], "unreachable": []}]})
        return httpx.Response(200, json={"results": [{"locations": [], "unreachable": ["A"]}]})

    matrix, _ = _matrix_client(responder)
    stops = [Stop(id="A", name="A", lat=43.7, lng=-79.3), Stop(id="A", name="A", lat=43.7, lng=-79.3)]

    result = matrix.run(stops, batch_size=1)

    assert result.records["A"].status == "unreachable"
    assert result.reachable == 0
    assert result.total_stops == 2


def test_batch_result_serializes_to_camel_case():
    matrix, _ = _matrix_client(_ok)

    payload = matrix.run([_feature("S1", -79.279, 43.711)]).to_dict()

    assert payload["records"]["S1"] == {
        "status": "reachable",
        "travelTimeSeconds": 600,
        "travelTimeMinutes": 10.0,
        "bucket": "0-15 min",
    }
    assert payload["totalStops"] == 1
    assert payload["reachable"] == 1
    assert payload["destination"]["label"] == "Kennedy Station"
