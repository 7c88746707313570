import asyncio
import logging
from typing import Dict, Optional, Set

from listing_agent.core.events.event_bus import DomainEventBus
from listing_agent.core.events.listing_events import CycleStateChangedEvent
from listing_agent.core.exceptions import InvalidTransitionError
from listing_agent.models import CycleState


class CycleStateMachine:
    """
    Gatekeeper for listing cycle state transitions.

    This is the only class allowed to:
    1. Validate a cycle state transition.
    2. Change the current cycle state.
    3. Publish CycleStateChangedEvent.

    A cycle only reaches COMMITTING after every remote read and the
    downstream handoff are done, so the cursor is written at most once per
    cycle and never from FAILED.
    """

    def __init__(self, event_bus: Optional[DomainEventBus] = None):
        self._event_bus = event_bus
        self._lock = asyncio.Lock()
        self._state = CycleState.IDLE
        self._cycle_id: Optional[str] = None

        self._transitions: Dict[CycleState, Set[CycleState]] = {
            CycleState.IDLE: {
                CycleState.WALKING,
            },
            CycleState.WALKING: {
                CycleState.FILTERING,
                CycleState.FAILED,
            },
            CycleState.FILTERING: {
                CycleState.EMITTING,
                CycleState.FAILED,
            },
            CycleState.EMITTING: {
                CycleState.COMMITTING,
                CycleState.FAILED,
            },
            CycleState.COMMITTING: {
                CycleState.IDLE,
                CycleState.FAILED,
            },
            CycleState.FAILED: {
                CycleState.IDLE,
            },
        }
        logging.debug(f"CycleStateMachine initialized with {len(self._transitions)} transition rules")

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def cycle_id(self) -> Optional[str]:
        return self._cycle_id

    async def transition(self, *, cycle_id: str, new_state: CycleState) -> CycleState:
        """
        Move the current cycle to new_state and announce it.

        Usage:
            await state_machine.transition(
                cycle_id="abc123",
                new_state=CycleState.WALKING
            )

        Returns:
            The previous state.

        Raises:
            InvalidTransitionError: If the transition is not allowed.
        """
        async with self._lock:
            old_state = self._state

            if old_state == CycleState.IDLE:
                self._cycle_id = cycle_id
            elif cycle_id != self._cycle_id:
                raise InvalidTransitionError(cycle_id, old_state.value, new_state.value)

            allowed = self._transitions.get(old_state, set())
            if new_state not in allowed:
                raise InvalidTransitionError(cycle_id, old_state.value, new_state.value)

            logging.debug(f"Cycle {cycle_id[:8]}: {old_state.value} -> {new_state.value}")
            self._state = new_state
            if new_state == CycleState.IDLE:
                self._cycle_id = None

        if self._event_bus:
            await self._event_bus.publish(
                CycleStateChangedEvent(
                    cycle_id=cycle_id, old_state=old_state, new_state=new_state
                )
            )

        return old_state

    async def fail(self, cycle_id: str) -> None:
        """Route the current cycle through FAILED back to IDLE from any active state."""
        if self._state not in (CycleState.IDLE, CycleState.FAILED):
            await self.transition(cycle_id=cycle_id, new_state=CycleState.FAILED)
        if self._state == CycleState.FAILED:
            await self.transition(cycle_id=cycle_id, new_state=CycleState.IDLE)
