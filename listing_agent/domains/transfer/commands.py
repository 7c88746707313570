"""
Transfer Domain Commands
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from listing_agent.core.cqrs.command import Command
from listing_agent.models import ListingRecord


@dataclass
class PutFileCommand(Command):
    """
    Write content as filename under the configured put directory.

    The directory template is rendered against the attributes of record
    (when given) overlaid with attributes.
    """
    filename: str
    content: bytes
    attributes: Dict[str, str] = field(default_factory=dict)
    record: Optional[ListingRecord] = None
