import asyncio
import logging
from collections.abc import Iterable
from typing import Optional

from hive_api.core.errors import AggregateQueryError
from hive_api.storage.reading_store import ReadingStore

logger = logging.getLogger(__name__)


class QueryService:
    def __init__(self, store: ReadingStore, default_limit: int = 100):
        self.store = store
        self.default_limit = default_limit

    def _resolve_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        if limit <= 0:
            raise ValueError(f"Query limit must be positive, got {limit}")
        return limit

    async def query_one(self, device_id: str, limit: Optional[int] = None) -> list[dict]:
        return await self.store.query(device_id, self._resolve_limit(limit))

    async def query_many(
        self, device_ids: Iterable[str], limit: Optional[int] = None
    ) -> dict[str, list[dict]]:
        """Query every hive concurrently and wait for all of them.

        Every failed sub-query is logged; the first one in request order is
        raised wrapped in AggregateQueryError.
        """
        limit = self._resolve_limit(limit)
        hives = list(dict.fromkeys(device_ids))

        results = await asyncio.gather(
            *(self.query_one(hive, limit) for hive in hives),
            return_exceptions=True,
        )

        failures = [
            (hive, result)
            for hive, result in zip(hives, results)
            if isinstance(result, BaseException)
        ]
        for hive, error in failures:
            logger.error(f"Query for hive {hive} failed: {error!r}")
        if failures:
            hive, error = failures[0]
            raise AggregateQueryError(hive, error) from error

        return dict(zip(hives, results))
