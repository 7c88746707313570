"""
Listing Query Handlers
"""
from typing import Any, Dict

from listing_agent.core.cqrs.query import QueryHandler
from listing_agent.domains.listing.cursor_store import CursorRecord
from listing_agent.domains.listing.listing_service import ListingService
from listing_agent.domains.listing.queries import GetListingCursorQuery, GetListingStatusQuery


class GetListingCursorQueryHandler(QueryHandler[GetListingCursorQuery, Dict[str, Any]]):
    """Returns the persisted cursor in its stored camelCase form."""

    def __init__(self, listing_service: ListingService):
        self._listing_service = listing_service

    async def handle(self, query: GetListingCursorQuery) -> Dict[str, Any]:
        cursor = await self._listing_service.orchestrator.load_cursor()
        return CursorRecord.from_cursor(cursor).model_dump(by_alias=True)


class GetListingStatusQueryHandler(QueryHandler[GetListingStatusQuery, Dict[str, Any]]):
    def __init__(self, listing_service: ListingService):
        self._listing_service = listing_service

    async def handle(self, query: GetListingStatusQuery) -> Dict[str, Any]:
        orchestrator = self._listing_service.orchestrator
        last_result = orchestrator.last_result
        return {
            "service_running": self._listing_service.is_running(),
            "cycle_in_progress": orchestrator.is_running,
            "cycle_state": orchestrator.state.value,
            "last_cycle": last_result.summary() if last_result else None,
        }
