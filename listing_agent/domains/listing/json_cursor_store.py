"""JSON file cursor store for single-node deployments."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from listing_agent.core.exceptions import CursorPersistenceError
from listing_agent.domains.listing.cursor_store import (
    CursorRecord,
    CursorStore,
    decode_record,
    next_committed,
)
from listing_agent.models import ListingCursor


class JsonFileCursorStore(CursorStore):
    """
    Keeps the cursor in one JSON file.

    Writes go to a temporary file that is fsynced and then renamed over the
    previous one, so a crash leaves either the old or the new cursor.
    """

    def __init__(self, file_path: str):
        self._path = Path(file_path).expanduser()
        self._tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def scoped(self, scope: str) -> "JsonFileCursorStore":
        """cursor.json becomes cursor.<scope>.json in the same directory."""
        return JsonFileCursorStore(str(self._path.with_name(f"{self._path.stem}.{scope}{self._path.suffix}")))

    async def _read(self) -> Optional[ListingCursor]:
        if not await aiofiles.os.path.exists(self._path):
            return None
        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise CursorPersistenceError(f"Failed to read cursor file {self._path}: {e}") from e
        return decode_record(raw)

    async def load(self) -> ListingCursor:
        async with self._lock:
            stored = await self._read()
            return stored if stored is not None else ListingCursor()

    async def save(self, cursor: ListingCursor) -> ListingCursor:
        async with self._lock:
            stored = await self._read()
            committed = next_committed(stored, cursor)
            if committed is None:
                logging.debug(f"Cursor revision {stored.revision} already in {self._path}")
                return stored

            payload = CursorRecord.from_cursor(committed).to_json()
            try:
                await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
                async with aiofiles.open(self._tmp_path, "w", encoding="utf-8") as f:
                    await f.write(payload)
                    await f.flush()
                    await asyncio.to_thread(os.fsync, f.fileno())
                await aiofiles.os.replace(self._tmp_path, self._path)
            except OSError as e:
                raise CursorPersistenceError(f"Failed to write cursor file {self._path}: {e}") from e

            logging.debug(f"Cursor revision {committed.revision} written to {self._path}")
            return committed

    async def reset(self) -> ListingCursor:
        async with self._lock:
            try:
                if await aiofiles.os.path.exists(self._path):
                    await aiofiles.os.remove(self._path)
            except OSError as e:
                raise CursorPersistenceError(f"Failed to remove cursor file {self._path}: {e}") from e
            logging.info(f"Cursor file {self._path} removed")
            return ListingCursor()
