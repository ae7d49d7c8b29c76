import math
from datetime import timedelta

import pytest

from database import DeviceSnapshot
from stats import (
    MILLISECOND,
    SECOND,
    AverageUpload,
    compute_avg_upload,
    compute_uptime,
    format_duration,
    minutes_between_first_and_last,
    round2,
    unique_minute_count,
)
from validation import parse_timestamp as ts


def _heartbeats(*values: str) -> DeviceSnapshot:
    return DeviceSnapshot(device_id="dev", heartbeats=tuple(ts(v) for v in values))


def _uploads(*values: int) -> DeviceSnapshot:
    return DeviceSnapshot(device_id="dev", upload_samples=tuple(values))


def test_unique_minute_count_buckets_by_minute():
    times = [
        ts("2025-10-25T10:00:01Z"),
        ts("2025-10-25T10:00:50Z"),
        ts("2025-10-25T10:01:00Z"),
    ]
    assert unique_minute_count(times) == 2


def test_unique_minute_count_ignores_order_and_duplicates():
    times = [
        ts("2025-10-25T10:03:00Z"),
        ts("2025-10-25T10:00:10Z"),
        ts("2025-10-25T10:03:59Z"),
        ts("2025-10-25T10:00:10Z"),
    ]
    assert unique_minute_count(times) == 2
    assert unique_minute_count(list(reversed(times))) == 2


def test_unique_minute_count_uses_utc_minutes():
    # Same instant written with two offsets lands in one bucket
    times = [ts("2025-10-25T12:00:30+02:00"), ts("2025-10-25T10:00:10Z")]
    assert unique_minute_count(times) == 1


def test_unique_minute_count_empty():
    assert unique_minute_count([]) == 0


def test_minutes_between_first_and_last_is_inclusive():
    times = [
        ts("2025-10-25T10:00:00Z"),
        ts("2025-10-25T10:02:00Z"),
        ts("2025-10-25T10:01:00Z"),
    ]
    assert minutes_between_first_and_last(times) == 3


def test_minutes_between_first_and_last_floors_partial_minutes():
    times = [ts("2025-10-25T10:00:30Z"), ts("2025-10-25T10:02:10Z")]
    # 1m40s apart → floor(1) + 1
    assert minutes_between_first_and_last(times) == 2


@pytest.mark.parametrize(
    "times",
    [
        [],
        ["2025-10-25T10:00:00Z"],
        ["2025-10-25T10:00:00Z", "2025-10-25T10:00:00Z"],
    ],
)
def test_minutes_between_first_and_last_needs_a_window(times):
    with pytest.raises(ValueError):
        minutes_between_first_and_last([ts(t) for t in times])


def test_uptime_with_one_missing_minute():
    snapshot = _heartbeats("2025-10-25T10:00:00Z", "2025-10-25T10:02:00Z")
    assert math.isclose(compute_uptime(snapshot), 200 / 3)
    assert round2(compute_uptime(snapshot)) == 66.67


def test_uptime_with_two_missing_minutes():
    snapshot = _heartbeats("2025-10-25T10:00:00Z", "2025-10-25T10:03:00Z")
    assert compute_uptime(snapshot) == 50.0


def test_uptime_inside_a_single_minute_is_full():
    snapshot = _heartbeats("2025-10-25T10:00:05Z", "2025-10-25T10:00:50Z")
    assert compute_uptime(snapshot) == 100.0


def test_uptime_single_heartbeat_is_full():
    assert compute_uptime(_heartbeats("2025-10-25T10:00:05Z")) == 100.0


def test_uptime_identical_heartbeats_is_full():
    snapshot = _heartbeats("2025-10-25T10:00:05Z", "2025-10-25T10:00:05Z")
    assert compute_uptime(snapshot) == 100.0


@pytest.mark.parametrize("gap", [1, 2, 5, 59, 240])
def test_uptime_for_two_heartbeats_n_minutes_apart(gap):
    start = ts("2025-10-25T10:00:00Z")
    snapshot = DeviceSnapshot(device_id="dev", heartbeats=(start, start + timedelta(minutes=gap)))
    assert math.isclose(compute_uptime(snapshot), 2 / (gap + 1) * 100)


def test_uptime_is_order_independent():
    values = ["2025-10-25T10:04:00Z", "2025-10-25T10:00:00Z", "2025-10-25T10:01:30Z"]
    forward = compute_uptime(_heartbeats(*values))
    backward = compute_uptime(_heartbeats(*reversed(values)))
    assert forward == backward == 60.0


def test_uptime_is_capped_at_full_when_buckets_outnumber_window():
    # 2 buckets, 2 seconds apart: the inclusive window is a single minute
    snapshot = _heartbeats("2025-10-25T10:00:59Z", "2025-10-25T10:01:01Z")
    assert compute_uptime(snapshot) == 100.0


def test_uptime_without_heartbeats_is_zero():
    assert compute_uptime(DeviceSnapshot(device_id="dev")) == 0.0
    assert compute_uptime(None) == 0.0


def test_avg_upload_truncates():
    assert compute_avg_upload(_uploads(4, 6)) == AverageUpload("5ns", True)
    assert compute_avg_upload(_uploads(5, 6, 5)) == AverageUpload("5ns", True)


def test_avg_upload_truncates_negative_toward_zero():
    assert compute_avg_upload(_uploads(-3, -4)).duration == "-3ns"


def test_avg_upload_formats_larger_units():
    result = compute_avg_upload(_uploads(3 * SECOND, 2 * SECOND))
    assert result == AverageUpload("2.5s", True)


def test_avg_upload_without_samples_flags_no_data():
    assert compute_avg_upload(DeviceSnapshot(device_id="dev")) == AverageUpload("0s", False)
    assert compute_avg_upload(None) == AverageUpload("0s", False)


def test_avg_upload_zero_mean_still_has_data():
    result = compute_avg_upload(_uploads(0, 0))
    assert result.duration == "0s"
    assert result.has_data is True


@pytest.mark.parametrize(
    "nanoseconds, expected",
    [
        (0, "0s"),
        (1, "1ns"),
        (999, "999ns"),
        (1_000, "1µs"),
        (1_500, "1.5µs"),
        (1_100 * MILLISECOND // 1_000, "1.1ms"),
        (2_500_000, "2.5ms"),
        (SECOND, "1s"),
        (1_500_000_000, "1.5s"),
        (60 * SECOND, "1m0s"),
        (123 * SECOND, "2m3s"),
        (61 * SECOND + 500 * MILLISECOND, "1m1.5s"),
        (3600 * SECOND, "1h0m0s"),
        (3 * 3600 * SECOND + 25 * 60 * SECOND + 45 * SECOND + 1, "3h25m45.000000001s"),
        (-1_500, "-1.5µs"),
        (-90 * SECOND, "-1m30s"),
    ],
)
def test_format_duration(nanoseconds, expected):
    assert format_duration(nanoseconds) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (66.665, 66.67),
        (66.66666666666667, 66.67),
        (50.0, 50.0),
        (12.344, 12.34),
        (0.005, 0.01),
        (100.0, 100.0),
    ],
)
def test_round2_rounds_half_up(value, expected):
    assert round2(value) == expected
