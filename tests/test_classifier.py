import math

import pytest

from transit_reach.services.traveltime.classifier import TRAVEL_TIME_BUCKETS, classify_travel_time


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0-15 min"),
        (900, "0-15 min"),
        (901, "15-30 min"),
        (1800, "15-30 min"),
        (2700, "30-45 min"),
        (3600, "45-60 min"),
        (4500, "60-75 min"),
        (5400, "75-90 min"),
        (5401, "> 90 min"),
        (9000.5, "> 90 min"),
    ],
)
def test_classify_travel_time_upper_bounds_are_inclusive(seconds, expected):
    assert classify_travel_time(seconds) == expected


@pytest.mark.parametrize("seconds", [None, math.nan, math.inf, -math.inf, "900", True, [900]])
def test_classify_travel_time_rejects_non_finite_input(seconds):
    assert classify_travel_time(seconds) is None


def test_bucket_labels_are_ordered():
    assert TRAVEL_TIME_BUCKETS[0] == "0-15 min"
    assert TRAVEL_TIME_BUCKETS[-1] == "> 90 min"
    assert len(TRAVEL_TIME_BUCKETS) == 7
