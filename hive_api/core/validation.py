import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import pydantic

from hive_api.core.errors import ValidationError
from hive_api.models.reading import Reading

CANONICAL_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_CANONICAL_TIMESTAMP = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z")


def is_canonical_timestamp(value: str) -> bool:
    """True for zero-padded UTC second-precision ISO-8601, e.g. 2024-01-01T00:00:00Z.

    Only this form sorts lexicographically in time order.
    """
    if not _CANONICAL_TIMESTAMP.fullmatch(value):
        return False
    try:
        datetime.strptime(value, CANONICAL_TIMESTAMP_FORMAT)
    except ValueError:
        return False
    return True


def validate_reading(payload: Any, canonical_timestamps: bool = False) -> Reading:
    if not isinstance(payload, Mapping):
        raise ValidationError(f"Read {payload!r} is malformed: not an object", payload)

    try:
        reading = Reading.model_validate(dict(payload))
    except pydantic.ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValidationError(
            f"Read {payload!r} is malformed: invalid {', '.join(fields)}", payload
        ) from e

    if canonical_timestamps and not is_canonical_timestamp(reading.timestamp):
        raise ValidationError(
            f"Read {payload!r} is malformed: timestamp is not {CANONICAL_TIMESTAMP_FORMAT}",
            payload,
        )

    return reading
