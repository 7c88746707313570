"""
In-memory remote file system.

Keeps a tree of directories and files in dictionaries. Listing order is the
insertion order of the children, which keeps walks deterministic in tests.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from typing import AsyncIterator, Dict, List, Optional, Set

from listing_agent.core.exceptions import RemoteAccessError
from listing_agent.models import EntryKind
from listing_agent.remote.client import RemoteChild, RemoteFileSystemClient
from listing_agent.utils.path_utils import normalize_remote_path, split_remote_path


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class _Node:
    status: RemoteChild
    content: bytearray = field(default_factory=bytearray)
    children: Dict[str, "_Node"] = field(default_factory=dict)


class InMemoryFileSystemClient(RemoteFileSystemClient):
    def __init__(
        self,
        block_size: int = 256 * 1024 * 1024,
        owner: str = "owner",
        group: str = "group",
        record_calls: bool = False,
    ):
        self._block_size = block_size
        self._owner = owner
        self._group = group
        self._root = _Node(RemoteChild(name="", kind=EntryKind.DIRECTORY))
        self._failing_paths: Set[str] = set()
        self._lock = asyncio.Lock()
        # Listed paths, in call order; only kept when record_calls is set
        self._record_calls = record_calls
        self.list_calls: List[str] = []

    # --- test helpers ---

    def add_directory(self, path: str) -> None:
        self._ensure_directory(normalize_remote_path(path))

    def add_file(
        self,
        path: str,
        content: bytes = b"",
        modification_time: Optional[int] = None,
        access_time: Optional[int] = None,
        permission: str = "644",
    ) -> None:
        """Create or replace a file. Parent directories are created as needed."""
        parent_path, name = split_remote_path(path)
        parent = self._ensure_directory(parent_path)
        mtime = modification_time if modification_time is not None else _now_millis()
        status = RemoteChild(
            name=name,
            kind=EntryKind.FILE,
            modification_time=mtime,
            access_time=access_time if access_time is not None else mtime,
            length=len(content),
            block_size=self._block_size,
            owner=self._owner,
            group=self._group,
            permission=permission,
        )
        parent.children[name] = _Node(status=status, content=bytearray(content))

    def fail_listing(self, path: str) -> None:
        """Make every future listing of path raise RemoteAccessError."""
        self._failing_paths.add(normalize_remote_path(path))

    def restore_listing(self, path: str) -> None:
        self._failing_paths.discard(normalize_remote_path(path))

    def read_bytes(self, path: str) -> bytes:
        return bytes(self._get_file(normalize_remote_path(path)).content)

    def exists(self, path: str) -> bool:
        return self._find(normalize_remote_path(path)) is not None

    # --- capability set ---

    async def list_children(self, path: str) -> List[RemoteChild]:
        normalized = normalize_remote_path(path)
        if self._record_calls:
            self.list_calls.append(normalized)
        await asyncio.sleep(0)

        if normalized in self._failing_paths:
            raise RemoteAccessError(path, f"Listing of {path} failed")

        node = self._find(normalized)
        if node is None or node.status.kind != EntryKind.DIRECTORY:
            raise RemoteAccessError(path, f"Directory not found: {path}")

        return [self._snapshot(child) for child in node.children.values()]

    async def open_for_read(self, path: str, chunk_size: int = 1024 * 1024) -> AsyncIterator[bytes]:
        node = self._get_file(normalize_remote_path(path))
        content = bytes(node.content)
        for offset in range(0, len(content), chunk_size):
            await asyncio.sleep(0)
            yield content[offset:offset + chunk_size]

    async def create_empty(self, path: str) -> None:
        async with self._lock:
            self.add_file(path, b"")

    async def append(self, path: str, data: bytes) -> None:
        async with self._lock:
            node = self._get_file(normalize_remote_path(path))
            node.content.extend(data)
            self._touch(node)

    async def concat(self, src_paths: List[str], dest_path: str) -> None:
        async with self._lock:
            sources = [self._get_file(normalize_remote_path(p)) for p in src_paths]
            content = b"".join(bytes(node.content) for node in sources)
            for src in src_paths:
                self._remove(normalize_remote_path(src))
            self.add_file(dest_path, content)

    async def delete(self, path: str) -> None:
        async with self._lock:
            normalized = normalize_remote_path(path)
            self._get_file(normalized)
            self._remove(normalized)

    # --- internals ---

    def _snapshot(self, node: _Node) -> RemoteChild:
        if node.status.kind == EntryKind.DIRECTORY:
            return replace(node.status, children_num=len(node.children))
        return node.status

    def _touch(self, node: _Node) -> None:
        now = _now_millis()
        node.status = replace(
            node.status,
            length=len(node.content),
            modification_time=max(now, node.status.modification_time + 1),
        )

    def _find(self, normalized: str) -> Optional[_Node]:
        node = self._root
        for part in [p for p in normalized.split("/") if p]:
            node = node.children.get(part)
            if node is None:
                return None
        return node

    def _get_file(self, normalized: str) -> _Node:
        node = self._find(normalized)
        if node is None or node.status.kind != EntryKind.FILE:
            raise RemoteAccessError(normalized, f"File not found: {normalized}")
        return node

    def _ensure_directory(self, normalized: str) -> _Node:
        node = self._root
        for part in [p for p in normalized.split("/") if p]:
            child = node.children.get(part)
            if child is None:
                child = _Node(
                    RemoteChild(
                        name=part,
                        kind=EntryKind.DIRECTORY,
                        modification_time=_now_millis(),
                        owner=self._owner,
                        group=self._group,
                        permission="755",
                    )
                )
                node.children[part] = child
                logging.debug(f"Created in-memory directory {part} under {normalized}")
            elif child.status.kind != EntryKind.DIRECTORY:
                raise RemoteAccessError(normalized, f"Not a directory: {part}")
            node = child
        return node

    def _remove(self, normalized: str) -> None:
        parent_path, name = split_remote_path(normalized)
        parent = self._find(parent_path)
        if parent is not None:
            parent.children.pop(name, None)
