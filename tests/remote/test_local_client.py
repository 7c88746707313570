import os

import pytest

from listing_agent.core.exceptions import RemoteAccessError
from listing_agent.domains.listing.path_filter import PathFilter
from listing_agent.domains.listing.tree_walker import TreeWalker
from listing_agent.models import EntryKind
from listing_agent.remote.local_client import LocalFileSystemClient


@pytest.fixture
def lake_dir(tmp_path):
    (tmp_path / "data" / "sub").mkdir(parents=True)
    (tmp_path / "data" / "data.csv").write_bytes(b"a,b\n")
    (tmp_path / "data" / ".hidden").write_bytes(b"x")
    (tmp_path / "data" / "sub" / "report.txt").write_bytes(b"report")
    os.utime(tmp_path / "data" / "data.csv", (1_000, 2_000))
    return tmp_path


@pytest.fixture
def client(lake_dir) -> LocalFileSystemClient:
    return LocalFileSystemClient(str(lake_dir))


@pytest.mark.asyncio
async def test_list_children_is_sorted_and_typed(client):
    children = await client.list_children("/data")

    assert [c.name for c in children] == [".hidden", "data.csv", "sub"]
    assert children[2].kind == EntryKind.DIRECTORY
    assert children[2].is_directory

    data_csv = children[1]
    assert data_csv.kind == EntryKind.FILE
    assert data_csv.length == 4
    assert data_csv.modification_time == 2_000_000
    assert data_csv.access_time == 1_000_000
    assert data_csv.owner == str(os.getuid())


@pytest.mark.asyncio
async def test_walk_over_local_directory(client):
    entries = await TreeWalker(client).walk("/data", PathFilter(), recurse=True)

    assert [(e.name, e.relative_path) for e in entries] == [
        ("data.csv", "./"),
        ("report.txt", "/sub"),
    ]


@pytest.mark.asyncio
async def test_missing_directory_raises(client):
    with pytest.raises(RemoteAccessError):
        await client.list_children("/missing")


@pytest.mark.asyncio
async def test_path_outside_lake_is_refused(client):
    with pytest.raises(RemoteAccessError):
        await client.list_children("/../..")


@pytest.mark.asyncio
async def test_read_in_chunks(client):
    chunks = [chunk async for chunk in client.open_for_read("/data/sub/report.txt", chunk_size=4)]

    assert chunks == [b"repo", b"rt"]


@pytest.mark.asyncio
async def test_create_append_concat_delete(client, lake_dir):
    await client.create_empty("/out/part1")
    await client.append("/out/part1", b"hello ")
    await client.create_empty("/out/part2")
    await client.append("/out/part2", b"world")

    await client.concat(["/out/part1", "/out/part2"], "/out/joined")

    assert (lake_dir / "out" / "joined").read_bytes() == b"hello world"
    assert not (lake_dir / "out" / "part1").exists()

    await client.delete("/out/joined")
    assert not (lake_dir / "out" / "joined").exists()


@pytest.mark.asyncio
async def test_append_to_missing_file_raises(client):
    with pytest.raises(RemoteAccessError):
        await client.append("/out/nothing", b"x")


@pytest.mark.asyncio
async def test_dangling_symlink_is_skipped(client, lake_dir):
    os.symlink("gone", lake_dir / "data" / "broken-link")

    children = await client.list_children("/data")

    assert [c.name for c in children] == [".hidden", "data.csv", "sub"]


@pytest.mark.asyncio
async def test_symlink_leaving_the_lake_is_skipped(client, lake_dir, tmp_path_factory):
    outside = tmp_path_factory.mktemp("outside")
    (outside / "secret.csv").write_bytes(b"x")
    os.symlink(outside, lake_dir / "data" / "ext")
    os.symlink(outside / "secret.csv", lake_dir / "data" / "ext.csv")

    entries = await TreeWalker(client).walk("/data", PathFilter(), recurse=True)

    assert [e.name for e in entries] == ["data.csv", "report.txt"]


@pytest.mark.asyncio
async def test_symlink_loop_is_not_followed(client, lake_dir):
    os.symlink(lake_dir / "data", lake_dir / "data" / "sub" / "again")
    os.symlink("self", lake_dir / "data" / "self")

    entries = await TreeWalker(client).walk("/data", PathFilter(), recurse=True)

    assert [(e.name, e.relative_path) for e in entries] == [
        ("data.csv", "./"),
        ("report.txt", "/sub"),
    ]


@pytest.mark.asyncio
async def test_symlinked_file_inside_lake_is_listed(client, lake_dir):
    os.symlink(lake_dir / "data" / "sub" / "report.txt", lake_dir / "data" / "latest.txt")

    children = await client.list_children("/data")

    latest = next(c for c in children if c.name == "latest.txt")
    assert latest.kind == EntryKind.FILE
    assert latest.length == len(b"report")
