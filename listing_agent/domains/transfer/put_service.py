"""
Put Service
Writes content to the data lake under a directory rendered per record.
"""
import logging
from datetime import datetime
from typing import Mapping, Optional

from listing_agent.core.exceptions import RemoteAccessError
from listing_agent.remote.client import RemoteFileSystemClient
from listing_agent.utils.path_template import render_path_template
from listing_agent.domains.transfer.models import TransferResult


def resolve_put_path(directory_template: str, filename: str, attributes: Mapping[str, str]) -> str:
    """
    Render the target directory against attributes and append filename.

    A directory without a trailing "/" gets one.
    """
    directory = render_path_template(directory_template, attributes)
    if not directory.endswith("/"):
        directory = directory + "/"
    return directory + filename


class PutService:
    def __init__(
        self,
        client: RemoteFileSystemClient,
        directory_template: str,
        chunk_size: int = 4 * 1024 * 1024,
    ):
        self._client = client
        self._directory_template = directory_template
        self._chunk_size = chunk_size

    async def put(
        self,
        content: bytes,
        filename: str,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> TransferResult:
        """
        Create an empty file at the rendered path, then append content in chunks.

        Raises:
            ConfigurationError: the directory template uses an unknown variable.
            RemoteAccessError: the store rejected the write.
        """
        out_path = resolve_put_path(self._directory_template, filename, attributes or {})
        logging.debug(f"Put started for {out_path}")
        start_time = datetime.now()

        await self._client.create_empty(out_path)
        try:
            for offset in range(0, len(content), self._chunk_size):
                await self._client.append(out_path, content[offset:offset + self._chunk_size])
        except RemoteAccessError as e:
            logging.error(f"Error writing to {out_path}: {e}")
            raise

        end_time = datetime.now()
        result = TransferResult(
            remote_path=out_path,
            bytes_transferred=len(content),
            elapsed_seconds=(end_time - start_time).total_seconds(),
            start_time=start_time,
            end_time=end_time,
        )
        logging.info(f"Transferred {filename} to {result.get_summary()}")
        return result
