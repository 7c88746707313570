import logging
import logging.handlers

import pytest
from fastapi.testclient import TestClient
from rich.logging import RichHandler

from listing_agent import dependencies
from listing_agent.domains.listing.commands import RunListingCycleCommand
from listing_agent.domains.listing.cursor_store import InMemoryCursorStore
from listing_agent.domains.listing.queries import GetListingStatusQuery
from listing_agent.domains.listing.record_sink import QueueRecordSink
from listing_agent.domains.transfer.commands import PutFileCommand
from listing_agent.domains.transfer.queries import FetchFileQuery
from listing_agent.logging_config import setup_logging
from listing_agent.main import app
from listing_agent.remote.memory_client import InMemoryFileSystemClient


@pytest.fixture
def memory_environment(monkeypatch):
    monkeypatch.setenv("ROOT_PATH", "/data")
    monkeypatch.setenv("FILESYSTEM_BACKEND", "memory")
    monkeypatch.setenv("CURSOR_BACKEND", "memory")
    monkeypatch.setenv("SINK_BACKEND", "queue")


class TestDependencies:
    def test_singletons_follow_settings(self, memory_environment):
        assert dependencies.get_settings().root_path == "/data"
        assert isinstance(dependencies.get_remote_client(), InMemoryFileSystemClient)
        assert isinstance(dependencies.get_cursor_store(), InMemoryCursorStore)
        assert isinstance(dependencies.get_record_sink(), QueueRecordSink)

        service = dependencies.get_listing_service()
        assert service is dependencies.get_listing_service()
        assert service.orchestrator is dependencies.get_listing_orchestrator()

    def test_register_all_handlers_is_idempotent(self, memory_environment):
        dependencies.register_all_handlers()
        dependencies.register_all_handlers()

        assert dependencies.get_command_bus().is_registered(RunListingCycleCommand)
        assert dependencies.get_query_bus().is_registered(GetListingStatusQuery)
        assert dependencies.get_command_bus().is_registered(PutFileCommand)
        assert dependencies.get_query_bus().is_registered(FetchFileQuery)

    def test_transfer_services_use_configured_chunk_size(self, memory_environment, monkeypatch):
        monkeypatch.setenv("TRANSFER_CHUNK_SIZE_KB", "2")

        assert dependencies.get_settings().transfer_chunk_size == 2048
        assert dependencies.get_fetch_service() is dependencies.get_fetch_service()
        assert dependencies.get_put_service() is dependencies.get_put_service()


def test_health_endpoints():
    client = TestClient(app)

    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json() == {"status": "healthy", "service": "listing-agent"}


def test_setup_logging_installs_console_and_rotating_file(settings):
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    try:
        setup_logging(settings)

        handler_types = [type(handler) for handler in root_logger.handlers]
        assert RichHandler in handler_types
        assert logging.handlers.TimedRotatingFileHandler in handler_types
        assert settings.log_directory.exists()
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)
