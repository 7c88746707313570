"""
Listing Domain Queries
Read-only views of the listing cursor and the cycle status.
"""
from dataclasses import dataclass

from listing_agent.core.cqrs.query import Query


@dataclass
class GetListingCursorQuery(Query):
    """Query the persisted listing cursor."""
    pass


@dataclass
class GetListingStatusQuery(Query):
    """Query the service state, the current cycle state and the last result."""
    pass
