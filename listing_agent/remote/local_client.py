"""
Remote file system client backed by a local directory.

Used for single-node deployments where the lake is mounted on disk, and for
running the agent without a cloud account. Remote paths such as "/raw/2024"
are resolved below base_directory.
"""

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiofiles
import aiofiles.os

from listing_agent.core.exceptions import RemoteAccessError
from listing_agent.models import EntryKind
from listing_agent.remote.client import RemoteChild, RemoteFileSystemClient


class LocalFileSystemClient(RemoteFileSystemClient):
    def __init__(self, base_directory: str):
        self._base = Path(base_directory).resolve()
        logging.info(f"LocalFileSystemClient serving {self._base}")

    def _resolve(self, path: str) -> Path:
        local = (self._base / path.lstrip("/")).resolve()
        if local != self._base and self._base not in local.parents:
            raise RemoteAccessError(path, f"Path escapes the lake root: {path}")
        return local

    async def list_children(self, path: str) -> List[RemoteChild]:
        """
        List the entries of one directory, sorted by name.

        Symbolic links are never descended into. A link to a file inside the
        lake is listed as that file; dangling links, links leaving the lake
        and links to directories are skipped with a warning.
        """
        directory = self._resolve(path)
        try:
            names = await aiofiles.os.listdir(directory)
            children = []
            for name in sorted(names):
                child_path = directory / name
                try:
                    stat_result = await aiofiles.os.stat(child_path, follow_symlinks=False)
                except FileNotFoundError:
                    logging.debug(f"{name} disappeared from {path} while listing")
                    continue

                if stat.S_ISLNK(stat_result.st_mode):
                    stat_result = await self._stat_link_target(path, child_path)
                    if stat_result is None:
                        continue
                children.append(self._to_child(name, stat_result))
            return children
        except OSError as e:
            raise RemoteAccessError(path, f"Failed to list {path}: {e}") from e

    async def _stat_link_target(self, path: str, link: Path) -> Optional[os.stat_result]:
        target = Path(await asyncio.to_thread(os.path.realpath, link))
        if target != self._base and self._base not in target.parents:
            logging.warning(f"Skipping symlink {link.name} in {path}: target is outside the lake root")
            return None

        try:
            target_stat = await aiofiles.os.stat(link)
        except OSError as e:
            logging.warning(f"Skipping broken symlink {link.name} in {path}: {e}")
            return None

        if stat.S_ISDIR(target_stat.st_mode):
            logging.warning(f"Skipping symlinked directory {link.name} in {path}")
            return None
        return target_stat

    def _to_child(self, name: str, stat_result: os.stat_result) -> RemoteChild:
        is_dir = stat.S_ISDIR(stat_result.st_mode)
        return RemoteChild(
            name=name,
            kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
            modification_time=int(stat_result.st_mtime * 1000),
            access_time=int(stat_result.st_atime * 1000),
            length=0 if is_dir else stat_result.st_size,
            block_size=getattr(stat_result, "st_blksize", 0),
            children_num=0,
            owner=str(stat_result.st_uid),
            group=str(stat_result.st_gid),
            permission=format(stat.S_IMODE(stat_result.st_mode), "o"),
        )

    async def open_for_read(self, path: str, chunk_size: int = 1024 * 1024) -> AsyncIterator[bytes]:
        local = self._resolve(path)
        try:
            async with aiofiles.open(local, "rb") as f:
                while True:
                    chunk = await f.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            raise RemoteAccessError(path, f"Failed to read {path}: {e}") from e

    async def create_empty(self, path: str) -> None:
        local = self._resolve(path)
        try:
            await aiofiles.os.makedirs(local.parent, exist_ok=True)
            async with aiofiles.open(local, "wb"):
                pass
        except OSError as e:
            raise RemoteAccessError(path, f"Failed to create {path}: {e}") from e

    async def append(self, path: str, data: bytes) -> None:
        local = self._resolve(path)
        if not await aiofiles.os.path.isfile(local):
            raise RemoteAccessError(path, f"File not found: {path}")
        try:
            async with aiofiles.open(local, "ab") as f:
                await f.write(data)
        except OSError as e:
            raise RemoteAccessError(path, f"Failed to append to {path}: {e}") from e

    async def concat(self, src_paths: List[str], dest_path: str) -> None:
        dest = self._resolve(dest_path)
        try:
            await aiofiles.os.makedirs(dest.parent, exist_ok=True)
            async with aiofiles.open(dest, "wb") as out:
                for src in src_paths:
                    async for chunk in self.open_for_read(src):
                        await out.write(chunk)
            for src in src_paths:
                await aiofiles.os.remove(self._resolve(src))
        except OSError as e:
            raise RemoteAccessError(dest_path, f"Failed to concatenate into {dest_path}: {e}") from e

    async def delete(self, path: str) -> None:
        try:
            await aiofiles.os.remove(self._resolve(path))
        except OSError as e:
            raise RemoteAccessError(path, f"Failed to delete {path}: {e}") from e
