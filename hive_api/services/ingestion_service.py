import logging
from typing import Any

from hive_api.core.errors import RevisionConflictError, StorageConflictError
from hive_api.core.identity import build_identity
from hive_api.core.validation import validate_reading
from hive_api.storage.reading_store import ReadingStore

logger = logging.getLogger(__name__)


class IngestionService:
    def __init__(self, store: ReadingStore, canonical_timestamps: bool = False):
        self.store = store
        self.canonical_timestamps = canonical_timestamps

    async def ingest(self, payload: Any) -> str:
        """Validate ``payload`` and upsert it under its identity.

        A revision conflict is retried once against a freshly read revision;
        a second conflict means another writer keeps racing on the same
        identity and is raised as StorageConflictError.
        """
        reading = validate_reading(payload, self.canonical_timestamps)
        identity = build_identity(reading.device_id, reading.timestamp)
        document = reading.model_dump_json()

        try:
            await self._write(identity, reading.device_id, document)
            return identity
        except RevisionConflictError:
            logger.warning(f"Revision conflict on {identity}, retrying once")

        try:
            await self._write(identity, reading.device_id, document)
        except RevisionConflictError as e:
            raise StorageConflictError(identity) from e
        return identity

    async def _write(self, identity: str, device_id: str, document: str) -> None:
        revision = await self.store.get_revision(identity)
        await self.store.put(identity, device_id, document, revision)
