"""
Listing Domain Commands
Commands that start, stop or reset incremental listing.
"""
from dataclasses import dataclass, field
from typing import Dict

from listing_agent.core.cqrs.command import Command


@dataclass
class RunListingCycleCommand(Command):
    """Run one listing cycle now, outside the polling schedule."""
    variables: Dict[str, str] = field(default_factory=dict)


@dataclass
class ResetListingCommand(Command):
    """Drop the persisted cursor so the next cycle lists everything again."""
    reason: str = "requested"


@dataclass
class PauseListingCommand(Command):
    """Stop the periodic listing loop."""
    pass


@dataclass
class ResumeListingCommand(Command):
    """Start the periodic listing loop again."""
    pass
