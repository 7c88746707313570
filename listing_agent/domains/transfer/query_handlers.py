"""
Transfer Query Handlers
"""
from typing import Tuple

from listing_agent.core.cqrs.query import QueryHandler
from listing_agent.core.exceptions import ConfigurationError
from listing_agent.domains.transfer.fetch_service import FetchService
from listing_agent.domains.transfer.models import TransferResult
from listing_agent.domains.transfer.queries import FetchFileQuery


class FetchFileQueryHandler(QueryHandler[FetchFileQuery, Tuple[bytes, TransferResult]]):
    """An explicit remote_path wins over the record's own location."""

    def __init__(self, fetch_service: FetchService):
        self._fetch_service = fetch_service

    async def handle(self, query: FetchFileQuery) -> Tuple[bytes, TransferResult]:
        if query.record is not None:
            return await self._fetch_service.fetch_record(query.record, query.remote_path)
        if query.remote_path:
            return await self._fetch_service.fetch(query.remote_path)
        raise ConfigurationError("A remote path or a listing record is required to fetch a file")
