"""
Downstream handoff of listing records.

deliver() returns only once the whole batch is accepted; any failure raises
EmissionError and the orchestrator keeps the cursor where it was.
"""
import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from listing_agent.config import Settings
from listing_agent.core.exceptions import ConfigurationError, EmissionError
from listing_agent.models import ListingRecord


class RecordSink(ABC):
    @abstractmethod
    async def deliver(self, records: List[ListingRecord]) -> None:
        """Hand off every record of a cycle, in order."""

    async def close(self) -> None:
        return None


class JsonLinesRecordSink(RecordSink):
    """Appends one JSON object per record to a file, fsynced before deliver() returns."""

    def __init__(self, output_path: str):
        self._path = Path(output_path).expanduser()
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def deliver(self, records: List[ListingRecord]) -> None:
        if not records:
            return
        lines = "".join(
            json.dumps(record.model_dump(by_alias=True)) + "\n" for record in records
        )
        async with self._lock:
            try:
                await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
                async with aiofiles.open(self._path, "a", encoding="utf-8") as f:
                    await f.write(lines)
                    await f.flush()
                    await asyncio.to_thread(os.fsync, f.fileno())
            except OSError as e:
                raise EmissionError(f"Failed to write records to {self._path}: {e}") from e
        logging.debug(f"Appended {len(records)} record(s) to {self._path}")


class QueueRecordSink(RecordSink):
    """Puts records on an asyncio.Queue for an in-process consumer."""

    def __init__(self, queue: Optional[asyncio.Queue] = None):
        self.queue: asyncio.Queue = queue if queue is not None else asyncio.Queue()

    async def deliver(self, records: List[ListingRecord]) -> None:
        for record in records:
            await self.queue.put(record)


def create_record_sink(settings: Settings) -> RecordSink:
    """Instantiate the configured sink backend."""
    if settings.sink_backend == "jsonl":
        return JsonLinesRecordSink(settings.record_output_path)
    if settings.sink_backend == "queue":
        return QueueRecordSink()
    raise ConfigurationError(f"Unsupported sink backend: {settings.sink_backend!r}")
