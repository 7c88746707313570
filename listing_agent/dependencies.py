from functools import lru_cache
from typing import Any, Dict

from listing_agent.core.cqrs.command_bus import CommandBus
from listing_agent.core.cqrs.query_bus import QueryBus
from listing_agent.core.cycle_state_machine import CycleStateMachine
from listing_agent.core.events.event_bus import DomainEventBus

from .config import Settings
from .domains.listing.cursor_factory import create_cursor_store
from .domains.listing.cursor_store import CursorStore
from .domains.listing.listing_orchestrator import ListingOrchestrator
from .domains.listing.listing_service import ListingService
from .domains.listing.record_sink import RecordSink, create_record_sink
from .domains.listing.registration import register_listing_handlers
from .domains.transfer.fetch_service import FetchService
from .domains.transfer.put_service import PutService
from .domains.transfer.registration import register_transfer_handlers
from .remote.client import RemoteFileSystemClient
from .remote.client_factory import create_remote_client

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_command_bus() -> CommandBus:
    if "command_bus" not in _singletons:
        _singletons["command_bus"] = CommandBus()
    return _singletons["command_bus"]


def get_query_bus() -> QueryBus:
    if "query_bus" not in _singletons:
        _singletons["query_bus"] = QueryBus()
    return _singletons["query_bus"]


def get_event_bus() -> DomainEventBus:
    if "event_bus" not in _singletons:
        _singletons["event_bus"] = DomainEventBus()
    return _singletons["event_bus"]


def get_cycle_state_machine() -> CycleStateMachine:
    if "cycle_state_machine" not in _singletons:
        _singletons["cycle_state_machine"] = CycleStateMachine(event_bus=get_event_bus())
    return _singletons["cycle_state_machine"]


def get_remote_client() -> RemoteFileSystemClient:
    if "remote_client" not in _singletons:
        _singletons["remote_client"] = create_remote_client(get_settings())
    return _singletons["remote_client"]


def get_cursor_store() -> CursorStore:
    if "cursor_store" not in _singletons:
        _singletons["cursor_store"] = create_cursor_store(get_settings())
    return _singletons["cursor_store"]


def get_record_sink() -> RecordSink:
    if "record_sink" not in _singletons:
        _singletons["record_sink"] = create_record_sink(get_settings())
    return _singletons["record_sink"]


def get_listing_orchestrator() -> ListingOrchestrator:
    if "listing_orchestrator" not in _singletons:
        _singletons["listing_orchestrator"] = ListingOrchestrator(
            cursor_store=get_cursor_store(),
            sink=get_record_sink(),
            event_bus=get_event_bus(),
            state_machine=get_cycle_state_machine(),
        )
    return _singletons["listing_orchestrator"]


def get_listing_service() -> ListingService:
    if "listing_service" not in _singletons:
        _singletons["listing_service"] = ListingService(
            settings=get_settings(),
            client=get_remote_client(),
            orchestrator=get_listing_orchestrator(),
            event_bus=get_event_bus(),
        )
    return _singletons["listing_service"]


def get_fetch_service() -> FetchService:
    if "fetch_service" not in _singletons:
        settings = get_settings()
        _singletons["fetch_service"] = FetchService(
            get_remote_client(), chunk_size=settings.transfer_chunk_size
        )
    return _singletons["fetch_service"]


def get_put_service() -> PutService:
    if "put_service" not in _singletons:
        settings = get_settings()
        _singletons["put_service"] = PutService(
            get_remote_client(),
            directory_template=settings.put_directory,
            chunk_size=settings.transfer_chunk_size,
        )
    return _singletons["put_service"]


def register_all_handlers() -> None:
    """Wire every CQRS handler onto the shared buses. Safe to call twice."""
    if _singletons.get("handlers_registered"):
        return
    register_listing_handlers(get_command_bus(), get_query_bus(), get_listing_service())
    register_transfer_handlers(
        get_command_bus(), get_query_bus(), get_fetch_service(), get_put_service()
    )
    _singletons["handlers_registered"] = True


def reset_singletons() -> None:
    global _singletons
    _singletons.clear()
