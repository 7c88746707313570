"""
Recursive walk of a remote directory tree.

Sibling subdirectories are listed concurrently, but the result keeps the
order in which the store returned the children: the entries of a
subdirectory appear where that subdirectory was listed.
"""
import asyncio
import logging
from typing import List, Optional, Union

from listing_agent.core.exceptions import PartialTreeCorruption, TransientRemoteError
from listing_agent.domains.listing.path_filter import PathFilter
from listing_agent.models import EntryDescriptor
from listing_agent.remote.client import RemoteChild, RemoteFileSystemClient
from listing_agent.utils.path_utils import combine_path, relative_directory


def build_entry(child: RemoteChild, root_path: str, directory: str) -> EntryDescriptor:
    return EntryDescriptor(
        name=child.name,
        absolute_path=directory,
        relative_path=relative_directory(root_path, directory),
        modification_time=child.modification_time,
        access_time=child.access_time,
        length=child.length,
        block_size=child.block_size,
        children_num=child.children_num,
        owner=child.owner,
        group=child.group,
        permission=child.permission,
        kind=child.kind,
    )


async def _list_directory(
    client: RemoteFileSystemClient,
    root_path: str,
    directory: str,
    limiter: Optional[asyncio.Semaphore],
) -> List[RemoteChild]:
    try:
        if limiter is None:
            children = await client.list_children(directory)
        else:
            async with limiter:
                children = await client.list_children(directory)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logging.warning(f"Listing failed for {directory}: {e}")
        if directory == root_path:
            raise TransientRemoteError(directory) from e
        raise PartialTreeCorruption(directory, root_path) from e

    return children or []


async def walk(
    client: RemoteFileSystemClient,
    root_path: str,
    current_path: str,
    path_filter: PathFilter,
    recurse: bool,
    limiter: Optional[asyncio.Semaphore] = None,
) -> List[EntryDescriptor]:
    """
    List every file below current_path that passes path_filter.

    Raises:
        TransientRemoteError: root_path could not be listed.
        PartialTreeCorruption: a subdirectory could not be listed. Nothing
            from the rest of the tree is returned.
    """
    children = await _list_directory(client, root_path, current_path, limiter)

    parts: List[Union[List[EntryDescriptor], "asyncio.Task[List[EntryDescriptor]]"]] = []
    subdirectory_tasks: List["asyncio.Task[List[EntryDescriptor]]"] = []

    for child in children:
        if child.is_directory:
            if recurse:
                task = asyncio.ensure_future(
                    walk(
                        client,
                        root_path,
                        combine_path(current_path, child.name),
                        path_filter,
                        True,
                        limiter,
                    )
                )
                subdirectory_tasks.append(task)
                parts.append(task)
        elif path_filter.matches(child.name):
            parts.append([build_entry(child, root_path, current_path)])

    if subdirectory_tasks:
        try:
            await asyncio.gather(*subdirectory_tasks)
        except BaseException:
            for task in subdirectory_tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*subdirectory_tasks, return_exceptions=True)
            raise

    listing: List[EntryDescriptor] = []
    for part in parts:
        listing.extend(part.result() if isinstance(part, asyncio.Future) else part)

    logging.debug(f"Listed {len(listing)} file(s) under {current_path}")
    return listing


class TreeWalker:
    """Walks a configured root with a bounded number of concurrent listings."""

    def __init__(self, client: RemoteFileSystemClient, max_concurrent_listings: int = 8):
        self._client = client
        self._max_concurrent_listings = max_concurrent_listings

    async def walk(self, root_path: str, path_filter: PathFilter, recurse: bool) -> List[EntryDescriptor]:
        limiter = asyncio.Semaphore(self._max_concurrent_listings)
        return await walk(self._client, root_path, root_path, path_filter, recurse, limiter)
