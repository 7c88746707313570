"""
Listing Command Handlers
"""
import logging

from listing_agent.core.cqrs.command import CommandHandler
from listing_agent.domains.listing.commands import (
    PauseListingCommand,
    ResetListingCommand,
    ResumeListingCommand,
    RunListingCycleCommand,
)
from listing_agent.domains.listing.listing_service import ListingService
from listing_agent.models import CycleResult, ListingCursor


class RunListingCycleCommandHandler(CommandHandler[RunListingCycleCommand, CycleResult]):
    """Handles RunListingCycleCommand by running a cycle on the listing service."""

    def __init__(self, listing_service: ListingService):
        self._listing_service = listing_service

    async def handle(self, command: RunListingCycleCommand) -> CycleResult:
        logging.info("Listing cycle requested on demand")
        return await self._listing_service.trigger_cycle(command.variables or None)


class ResetListingCommandHandler(CommandHandler[ResetListingCommand, ListingCursor]):
    def __init__(self, listing_service: ListingService):
        self._listing_service = listing_service

    async def handle(self, command: ResetListingCommand) -> ListingCursor:
        return await self._listing_service.orchestrator.reset_cursor(command.reason)


class PauseListingCommandHandler(CommandHandler[PauseListingCommand, bool]):
    def __init__(self, listing_service: ListingService):
        self._listing_service = listing_service

    async def handle(self, command: PauseListingCommand) -> bool:
        """Returns False when the loop was not running."""
        if not self._listing_service.is_running():
            return False
        await self._listing_service.stop_listing()
        return True


class ResumeListingCommandHandler(CommandHandler[ResumeListingCommand, bool]):
    def __init__(self, listing_service: ListingService):
        self._listing_service = listing_service

    async def handle(self, command: ResumeListingCommand) -> bool:
        """Returns False when the loop was already running."""
        if self._listing_service.is_running():
            return False
        await self._listing_service.start_listing()
        return True
