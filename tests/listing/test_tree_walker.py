import asyncio

import pytest

from listing_agent.core.exceptions import PartialTreeCorruption, TransientRemoteError
from listing_agent.domains.listing.path_filter import PathFilter
from listing_agent.domains.listing.tree_walker import TreeWalker, walk
from listing_agent.models import EntryKind
from listing_agent.remote.memory_client import InMemoryFileSystemClient


@pytest.mark.asyncio
async def test_recursive_walk_applies_filter_and_relative_paths(lake):
    entries = await TreeWalker(lake).walk("/data", PathFilter(), recurse=True)

    assert [(e.name, e.absolute_path, e.relative_path) for e in entries] == [
        ("data.csv", "/data", "./"),
        ("report.txt", "/data/sub", "/sub"),
    ]
    assert all(e.kind == EntryKind.FILE for e in entries)


@pytest.mark.asyncio
async def test_entries_carry_remote_metadata(lake):
    entries = await TreeWalker(lake).walk("/data", PathFilter(), recurse=True)
    data_csv = entries[0]

    assert data_csv.modification_time == 1000
    assert data_csv.length == len(b"a,b\n1,2\n")
    assert data_csv.block_size == 4096
    assert data_csv.owner == "owner"
    assert data_csv.group == "group"
    assert data_csv.permission == "644"


@pytest.mark.asyncio
async def test_non_recursive_walk_lists_root_only(lake):
    entries = await TreeWalker(lake).walk("/data", PathFilter(), recurse=False)

    assert [e.name for e in entries] == ["data.csv"]
    assert lake.list_calls == ["/data"]


@pytest.mark.asyncio
async def test_directories_are_never_filtered_out():
    client = InMemoryFileSystemClient()
    client.add_file("/root/.staging/visible.csv", modification_time=1)

    entries = await TreeWalker(client).walk("/root", PathFilter(), recurse=True)

    assert [(e.name, e.relative_path) for e in entries] == [("visible.csv", "/.staging")]


@pytest.mark.asyncio
async def test_listing_order_is_preserved_across_subdirectories():
    client = InMemoryFileSystemClient()
    client.add_file("/r/a/deep/x1", modification_time=1)
    client.add_file("/r/f1", modification_time=2)
    client.add_file("/r/b/x2", modification_time=3)
    client.add_file("/r/a/x3", modification_time=4)

    entries = await TreeWalker(client, max_concurrent_listings=1).walk(
        "/r", PathFilter(), recurse=True
    )

    assert [(e.name, e.relative_path) for e in entries] == [
        ("x1", "/a/deep"),
        ("x3", "/a"),
        ("f1", "./"),
        ("x2", "/b"),
    ]


@pytest.mark.asyncio
async def test_empty_root_returns_nothing():
    client = InMemoryFileSystemClient()
    client.add_directory("/empty")

    assert await TreeWalker(client).walk("/empty", PathFilter(), recurse=True) == []


@pytest.mark.asyncio
async def test_root_failure_raises_transient_error(lake):
    lake.fail_listing("/data")

    with pytest.raises(TransientRemoteError) as exc_info:
        await TreeWalker(lake).walk("/data", PathFilter(), recurse=True)

    assert not isinstance(exc_info.value, PartialTreeCorruption)
    assert exc_info.value.path == "/data"


@pytest.mark.asyncio
async def test_missing_root_raises_transient_error():
    client = InMemoryFileSystemClient()

    with pytest.raises(TransientRemoteError):
        await TreeWalker(client).walk("/nowhere", PathFilter(), recurse=True)


@pytest.mark.asyncio
async def test_subdirectory_failure_discards_whole_walk(lake):
    lake.fail_listing("/data/sub")

    with pytest.raises(PartialTreeCorruption) as exc_info:
        await TreeWalker(lake).walk("/data", PathFilter(), recurse=True)

    assert exc_info.value.path == "/data/sub"
    assert exc_info.value.root_path == "/data"


@pytest.mark.asyncio
async def test_subdirectory_failure_cancels_sibling_listings():
    client = InMemoryFileSystemClient()
    client.add_file("/r/bad/x", modification_time=1)
    client.add_file("/r/slow/y", modification_time=1)
    client.fail_listing("/r/bad")

    original = client.list_children

    async def slow_list_children(path):
        if path.startswith("/r/slow"):
            await asyncio.sleep(10)
        return await original(path)

    client.list_children = slow_list_children

    with pytest.raises(PartialTreeCorruption):
        await asyncio.wait_for(
            walk(client, "/r", "/r", PathFilter(), recurse=True), timeout=5
        )


@pytest.mark.asyncio
async def test_concurrent_listings_are_bounded():
    client = InMemoryFileSystemClient()
    for index in range(6):
        client.add_file(f"/r/dir{index}/file{index}", modification_time=index)

    active = 0
    peak = 0
    original = client.list_children

    async def counting_list_children(path):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        try:
            await asyncio.sleep(0.01)
            return await original(path)
        finally:
            active -= 1

    client.list_children = counting_list_children

    entries = await TreeWalker(client, max_concurrent_listings=2).walk(
        "/r", PathFilter(), recurse=True
    )

    assert [e.name for e in entries] == [f"file{i}" for i in range(6)]
    assert peak <= 2
