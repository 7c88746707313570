"""Redis cursor store (CURSOR_BACKEND=redis).

Shared by every node of a cluster, so a node that takes over the listing
role continues from the last committed cursor.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError

from listing_agent.core.exceptions import CursorConflictError, CursorPersistenceError
from listing_agent.domains.listing.cursor_store import (
    CursorRecord,
    CursorStore,
    decode_record,
    next_committed,
)
from listing_agent.models import ListingCursor


class RedisCursorStore(CursorStore):
    """Cursor kept as one JSON string under a single Redis key."""

    def __init__(self, redis_url: str, key: str, client: Optional[redis.Redis] = None) -> None:
        self._client = client if client is not None else redis.Redis.from_url(
            redis_url, decode_responses=True
        )
        self._key = key

    def scoped(self, scope: str) -> "RedisCursorStore":
        """Stored under <key>:<scope>; shares this store's connection."""
        return RedisCursorStore("", f"{self._key}:{scope}", client=self._client)

    async def load(self) -> ListingCursor:
        try:
            raw = await self._client.get(self._key)
        except RedisError as e:
            raise CursorPersistenceError(f"Failed to load cursor {self._key}: {e}") from e
        if raw is None:
            return ListingCursor()
        return decode_record(raw)

    async def save(self, cursor: ListingCursor) -> ListingCursor:
        """Optimistic transaction: WATCH the key, check the revision, MULTI/EXEC the write."""
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                await pipe.watch(self._key)
                raw = await pipe.get(self._key)
                stored = decode_record(raw) if raw is not None else None

                committed = next_committed(stored, cursor)
                if committed is None:
                    await pipe.unwatch()
                    logging.debug(f"Cursor revision {stored.revision} already stored in {self._key}")
                    return stored

                pipe.multi()
                pipe.set(self._key, CursorRecord.from_cursor(committed).to_json())
                await pipe.execute()
        except WatchError as e:
            raise CursorConflictError(cursor.revision, -1) from e
        except RedisError as e:
            raise CursorPersistenceError(f"Failed to save cursor {self._key}: {e}") from e

        logging.debug(f"Cursor revision {committed.revision} stored in {self._key}")
        return committed

    async def reset(self) -> ListingCursor:
        try:
            await self._client.delete(self._key)
        except RedisError as e:
            raise CursorPersistenceError(f"Failed to reset cursor {self._key}: {e}") from e
        logging.info(f"Cursor {self._key} removed")
        return ListingCursor()

    async def close(self) -> None:
        await self._client.aclose()
