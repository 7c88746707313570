"""
Transfer Domain Queries
"""
from dataclasses import dataclass
from typing import Optional

from listing_agent.core.cqrs.query import Query
from listing_agent.models import ListingRecord


@dataclass
class FetchFileQuery(Query):
    """Read one remote file, by explicit path or by the record that listed it."""
    remote_path: Optional[str] = None
    record: Optional[ListingRecord] = None
