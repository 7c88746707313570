"""
Fetch Service
Reads the full content of one remote file, typically one that was listed.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple

from listing_agent.models import ListingRecord
from listing_agent.remote.client import RemoteFileSystemClient
from listing_agent.utils.path_utils import combine_path
from listing_agent.domains.transfer.models import TransferResult


def default_fetch_path(record: ListingRecord) -> str:
    """Remote path of a listed file: its directory joined with its name."""
    return combine_path(record.absolute_path, record.name)


class FetchService:
    def __init__(self, client: RemoteFileSystemClient, chunk_size: int = 4 * 1024 * 1024):
        self._client = client
        self._chunk_size = chunk_size

    async def fetch(self, remote_path: str) -> Tuple[bytes, TransferResult]:
        """
        Read remote_path completely.

        Raises:
            RemoteAccessError: file missing or store unreachable. Nothing is
            returned for a partial read.
        """
        logging.debug(f"Fetch started for {remote_path}")
        start_time = datetime.now()

        chunks = []
        async for chunk in self._client.open_for_read(remote_path, self._chunk_size):
            chunks.append(chunk)
        content = b"".join(chunks)

        end_time = datetime.now()
        result = TransferResult(
            remote_path=remote_path,
            bytes_transferred=len(content),
            elapsed_seconds=(end_time - start_time).total_seconds(),
            start_time=start_time,
            end_time=end_time,
        )
        logging.info(f"Fetched {result.get_summary()}")
        return content, result

    async def fetch_record(
        self, record: ListingRecord, remote_path: Optional[str] = None
    ) -> Tuple[bytes, TransferResult]:
        return await self.fetch(remote_path or default_fetch_path(record))
