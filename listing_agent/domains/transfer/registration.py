import logging

from listing_agent.core.cqrs.command_bus import CommandBus
from listing_agent.core.cqrs.query_bus import QueryBus
from listing_agent.domains.transfer.command_handlers import PutFileCommandHandler
from listing_agent.domains.transfer.commands import PutFileCommand
from listing_agent.domains.transfer.fetch_service import FetchService
from listing_agent.domains.transfer.put_service import PutService
from listing_agent.domains.transfer.queries import FetchFileQuery
from listing_agent.domains.transfer.query_handlers import FetchFileQueryHandler


def register_transfer_handlers(
    command_bus: CommandBus,
    query_bus: QueryBus,
    fetch_service: FetchService,
    put_service: PutService,
):
    """Register the fetch and put handlers. Called once at startup."""
    logging.info("Registering transfer handlers...")

    command_bus.register(PutFileCommand, PutFileCommandHandler(put_service).handle)
    query_bus.register(FetchFileQuery, FetchFileQueryHandler(fetch_service).handle)
