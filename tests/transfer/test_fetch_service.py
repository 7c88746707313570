import pytest

from listing_agent.core.exceptions import RemoteAccessError
from listing_agent.domains.transfer.fetch_service import FetchService, default_fetch_path
from listing_agent.models import ListingRecord
from listing_agent.remote.memory_client import InMemoryFileSystemClient


def record_for(name: str, directory: str) -> ListingRecord:
    return ListingRecord(
        name=name,
        absolute_path=directory,
        relative_path="./",
        last_modified_time="1970-01-01T00:00:00+0000",
        last_access_time="1970-01-01T00:00:00+0000",
    )


def test_default_fetch_path_joins_directory_and_name():
    assert default_fetch_path(record_for("report.txt", "/data/sub")) == "/data/sub/report.txt"
    assert default_fetch_path(record_for("report.txt", "/data/sub/")) == "/data/sub/report.txt"


@pytest.mark.asyncio
async def test_fetch_reads_whole_file_in_chunks():
    client = InMemoryFileSystemClient()
    client.add_file("/data/big.bin", b"0123456789" * 10)
    service = FetchService(client, chunk_size=7)

    content, result = await service.fetch("/data/big.bin")

    assert content == b"0123456789" * 10
    assert result.bytes_transferred == 100
    assert result.remote_path == "/data/big.bin"
    assert result.elapsed_seconds >= 0


@pytest.mark.asyncio
async def test_fetch_record_uses_listed_location(lake):
    content, _ = await FetchService(lake).fetch_record(record_for("report.txt", "/data/sub"))

    assert content == b"report"


@pytest.mark.asyncio
async def test_fetch_record_with_explicit_path(lake):
    content, _ = await FetchService(lake).fetch_record(
        record_for("ignored", "/nowhere"), remote_path="/data/data.csv"
    )

    assert content == b"a,b\n1,2\n"


@pytest.mark.asyncio
async def test_fetch_missing_file_raises(lake):
    with pytest.raises(RemoteAccessError):
        await FetchService(lake).fetch("/data/missing.csv")
