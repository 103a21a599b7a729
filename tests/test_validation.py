"""
Reading payload validation tests.
"""

import pytest

from hive_api.core.errors import ValidationError
from hive_api.core.validation import is_canonical_timestamp, validate_reading


def test_valid_payload_returns_reading():
    reading = validate_reading(
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z", "metrics": [1, 2]}
    )

    assert reading.device_id == "abcd"
    assert reading.timestamp == "2024-01-01T00:00:00Z"
    assert reading.metrics == [1, 2]


def test_empty_metrics_are_accepted():
    reading = validate_reading(
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z", "metrics": []}
    )

    assert reading.metrics == []


def test_extra_fields_are_kept():
    """Producer fields outside the reading shape survive into the document."""
    reading = validate_reading(
        {
            "device_id": "abcd",
            "timestamp": "2024-01-01T00:00:00Z",
            "metrics": [],
            "firmware": "1.2.0",
        }
    )

    assert reading.model_dump()["firmware"] == "1.2.0"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"timestamp": "2024-01-01T00:00:00Z", "metrics": []},
        {"device_id": "abcd", "metrics": []},
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z"},
        {"device_id": "", "timestamp": "2024-01-01T00:00:00Z", "metrics": []},
        {"device_id": "abcd", "timestamp": "", "metrics": []},
        {"device_id": 42, "timestamp": "2024-01-01T00:00:00Z", "metrics": []},
        {"device_id": "abcd", "timestamp": 1704067200, "metrics": []},
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z", "metrics": None},
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z", "metrics": 3},
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z", "metrics": "abc"},
        {"device_id": "abcd", "timestamp": "2024-01-01T00:00:00Z", "metrics": {}},
    ],
)
def test_malformed_payload_raises(payload):
    with pytest.raises(ValidationError) as exc_info:
        validate_reading(payload)

    assert exc_info.value.payload is payload


@pytest.mark.parametrize("payload", [None, [], "abcd", 12])
def test_non_object_payload_raises(payload):
    with pytest.raises(ValidationError):
        validate_reading(payload)


def test_canonical_timestamps_reject_other_formats():
    payload = {
        "device_id": "abcd",
        "timestamp": "Mon Jan 01 2024 00:00:00 GMT+0000",
        "metrics": [],
    }

    assert validate_reading(payload).timestamp == payload["timestamp"]
    with pytest.raises(ValidationError):
        validate_reading(payload, canonical_timestamps=True)


def test_canonical_timestamp_detection():
    assert is_canonical_timestamp("2024-01-01T00:00:00Z")
    assert not is_canonical_timestamp("2024-1-01T00:00:00Z")
    assert not is_canonical_timestamp("2024-13-01T00:00:00Z")
    assert not is_canonical_timestamp("2024-01-01T00:00:00.500Z")
    assert not is_canonical_timestamp("2024-01-01T00:00:00+02:00")
