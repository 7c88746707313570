"""
Pytest configuration and shared fixtures.
"""
import logging

import pytest

from listing_agent.config import Settings
from listing_agent.dependencies import get_settings, reset_singletons
from listing_agent.domains.listing.cursor_store import InMemoryCursorStore
from listing_agent.domains.listing.record_sink import QueueRecordSink
from listing_agent.remote.memory_client import InMemoryFileSystemClient


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before every test."""
    reset_singletons()
    get_settings.cache_clear()
    yield
    reset_singletons()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def quiet_logging():
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def lake() -> InMemoryFileSystemClient:
    """
    Small data lake:

        /data/data.csv        mtime 1000
        /data/.hidden         mtime 1000
        /data/sub/report.txt  mtime 2000
    """
    client = InMemoryFileSystemClient(block_size=4096, record_calls=True)
    client.add_file("/data/data.csv", b"a,b\n1,2\n", modification_time=1000)
    client.add_file("/data/.hidden", b"secret", modification_time=1000)
    client.add_file("/data/sub/report.txt", b"report", modification_time=2000)
    return client


@pytest.fixture
def cursor_store() -> InMemoryCursorStore:
    return InMemoryCursorStore()


@pytest.fixture
def sink() -> QueueRecordSink:
    return QueueRecordSink()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        root_path="/data",
        filesystem_backend="memory",
        cursor_backend="memory",
        sink_backend="queue",
        polling_interval_seconds=60,
        error_retry_delay_seconds=1,
        log_file_path=str(tmp_path / "logs" / "listing_agent.log"),
    )
