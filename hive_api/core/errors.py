from typing import Any


class HiveApiError(Exception):
    pass


class ValidationError(HiveApiError):
    """Raised when an ingestion payload does not have the reading shape."""

    def __init__(self, message: str, payload: Any):
        super().__init__(message)
        self.payload = payload


class RevisionConflictError(HiveApiError):
    """The stored revision changed between read and write."""

    def __init__(self, identity: str, expected: int):
        super().__init__(
            f"Revision conflict on {identity} (expected revision {expected})"
        )
        self.identity = identity
        self.expected = expected


class StorageConflictError(HiveApiError):
    def __init__(self, identity: str):
        super().__init__(f"Concurrent writers kept conflicting on {identity}")
        self.identity = identity


class StorageUnavailableError(HiveApiError):
    pass


class AggregateQueryError(HiveApiError):
    def __init__(self, device_id: str, cause: BaseException):
        super().__init__(f"Query for hive {device_id} failed: {cause}")
        self.device_id = device_id
        self.cause = cause
