import logging

from listing_agent.core.cqrs.command_bus import CommandBus
from listing_agent.core.cqrs.query_bus import QueryBus
from listing_agent.domains.listing.command_handlers import (
    PauseListingCommandHandler,
    ResetListingCommandHandler,
    ResumeListingCommandHandler,
    RunListingCycleCommandHandler,
)
from listing_agent.domains.listing.commands import (
    PauseListingCommand,
    ResetListingCommand,
    ResumeListingCommand,
    RunListingCycleCommand,
)
from listing_agent.domains.listing.listing_service import ListingService
from listing_agent.domains.listing.queries import GetListingCursorQuery, GetListingStatusQuery
from listing_agent.domains.listing.query_handlers import (
    GetListingCursorQueryHandler,
    GetListingStatusQueryHandler,
)


def register_listing_handlers(
    command_bus: CommandBus,
    query_bus: QueryBus,
    listing_service: ListingService,
):
    """Register all listing CQRS handlers. Called once at startup."""
    logging.info("Registering listing handlers...")

    command_bus.register(RunListingCycleCommand, RunListingCycleCommandHandler(listing_service).handle)
    command_bus.register(ResetListingCommand, ResetListingCommandHandler(listing_service).handle)
    command_bus.register(PauseListingCommand, PauseListingCommandHandler(listing_service).handle)
    command_bus.register(ResumeListingCommand, ResumeListingCommandHandler(listing_service).handle)

    query_bus.register(GetListingCursorQuery, GetListingCursorQueryHandler(listing_service).handle)
    query_bus.register(GetListingStatusQuery, GetListingStatusQueryHandler(listing_service).handle)
