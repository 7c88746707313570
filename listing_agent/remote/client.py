"""
Remote file system capability set.

The listing engine only needs list_children; fetch and put use the rest.
Implementations raise RemoteAccessError for any failed call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List

from listing_agent.models import EntryKind


@dataclass(frozen=True)
class RemoteChild:
    """Status of one child path as returned by a directory listing."""

    name: str
    kind: EntryKind
    modification_time: int = 0
    access_time: int = 0
    length: int = 0
    block_size: int = 0
    children_num: int = 0
    owner: str = ""
    group: str = ""
    permission: str = ""

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


class RemoteFileSystemClient(ABC):
    """Injected client for a hierarchical object store."""

    @abstractmethod
    async def list_children(self, path: str) -> List[RemoteChild]:
        """List the immediate children of a directory."""

    @abstractmethod
    def open_for_read(self, path: str, chunk_size: int = 1024 * 1024) -> AsyncIterator[bytes]:
        """Stream the content of a file in chunks."""

    @abstractmethod
    async def create_empty(self, path: str) -> None:
        """Create (or truncate) a file with no content."""

    @abstractmethod
    async def append(self, path: str, data: bytes) -> None:
        """Append bytes to an existing file."""

    @abstractmethod
    async def concat(self, src_paths: List[str], dest_path: str) -> None:
        """Concatenate src_paths into dest_path. The sources are removed."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a file."""

    async def close(self) -> None:
        return None
