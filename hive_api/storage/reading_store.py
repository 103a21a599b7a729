import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError

from hive_api.core.errors import RevisionConflictError, StorageUnavailableError

logger = logging.getLogger(__name__)


class ReadingStore:
    """Redis-backed document store for hive readings.

    Each reading lives in a hash at ``reading:doc:{identity}`` holding the JSON
    document and an integer revision (0 means the document does not exist).
    Identities of a device are kept in ``reading:idx:{device_id}``, a sorted
    set with every score at 0 so members order lexicographically. The two
    prefixes differ, so no identity can land on an index key.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    @staticmethod
    def _document_key(identity: str) -> str:
        return f"reading:doc:{identity}"

    @staticmethod
    def _index_key(device_id: str) -> str:
        return f"reading:idx:{device_id}"

    async def get_revision(self, identity: str) -> int:
        try:
            revision = await self.redis.hget(self._document_key(identity), "rev")
        except RedisError as e:
            raise StorageUnavailableError(f"Cannot read revision of {identity}: {e}") from e
        return int(revision) if revision else 0

    async def put(
        self, identity: str, device_id: str, document: str, expected_revision: int
    ) -> int:
        """Write ``document`` only if the stored revision is still ``expected_revision``.

        Returns the new revision. Raises RevisionConflictError when another
        writer got there first, including between the check and the commit.
        """
        key = self._document_key(identity)
        new_revision = expected_revision + 1

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                current = await pipe.hget(key, "rev")
                if (int(current) if current else 0) != expected_revision:
                    raise RevisionConflictError(identity, expected_revision)

                pipe.multi()
                pipe.hset(key, mapping={"rev": new_revision, "doc": document})
                pipe.zadd(self._index_key(device_id), {identity: 0})
                await pipe.execute()
        except WatchError as e:
            raise RevisionConflictError(identity, expected_revision) from e
        except RedisError as e:
            raise StorageUnavailableError(f"Cannot write {identity}: {e}") from e

        return new_revision

    async def query(self, device_id: str, limit: int) -> list[dict]:
        """Documents of ``device_id``, identity descending, at most ``limit``."""
        try:
            identities = await self.redis.zrevrangebylex(
                self._index_key(device_id), "+", "-", start=0, num=limit
            )
            if not identities:
                return []

            async with self.redis.pipeline(transaction=False) as pipe:
                for identity in identities:
                    pipe.hget(self._document_key(identity.decode()), "doc")
                documents = await pipe.execute()
        except RedisError as e:
            raise StorageUnavailableError(f"Cannot query hive {device_id}: {e}") from e

        results = []
        for identity, document in zip(identities, documents):
            if document is None:
                logger.warning(f"Index entry without document: {identity.decode()}")
                continue
            results.append(json.loads(document))
        return results
