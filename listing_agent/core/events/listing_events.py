"""
Domain events published by the listing engine.
"""

from dataclasses import dataclass
from typing import Optional

from listing_agent.core.events.domain_event import DomainEvent
from listing_agent.models import CycleState


@dataclass(frozen=True)
class CycleStateChangedEvent(DomainEvent):
    """Published on every state transition of a listing cycle."""

    cycle_id: str
    old_state: CycleState
    new_state: CycleState


@dataclass(frozen=True)
class ListingCycleCompletedEvent(DomainEvent):
    """Published when a cycle handed off its records and committed the cursor."""

    cycle_id: str
    root_path: str
    emitted_count: int
    watermark_instant: Optional[int]


@dataclass(frozen=True)
class ListingCycleFailedEvent(DomainEvent):
    """Published when a cycle was discarded. The cursor was not changed."""

    cycle_id: str
    root_path: str
    error_type: str
    error_message: str


@dataclass(frozen=True)
class ListingResetEvent(DomainEvent):
    """Published when the persisted cursor was dropped."""

    reason: str


@dataclass(frozen=True)
class ListingServiceStatusEvent(DomainEvent):
    """Published when the periodic listing service starts or stops."""

    is_running: bool
