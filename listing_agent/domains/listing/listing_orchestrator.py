"""
Listing Orchestrator
Runs one listing cycle: load cursor, walk, filter, emit, commit.
"""
import asyncio
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from listing_agent.core.cycle_state_machine import CycleStateMachine
from listing_agent.core.events.event_bus import DomainEventBus
from listing_agent.core.events.listing_events import (
    ListingCycleCompletedEvent,
    ListingCycleFailedEvent,
    ListingResetEvent,
)
from listing_agent.core.exceptions import (
    CursorPersistenceError,
    EmissionError,
    InvalidTransitionError,
    ListingError,
)
from listing_agent.domains.listing.cursor import advance, select_new_entries
from listing_agent.domains.listing.cursor_store import CursorStore
from listing_agent.domains.listing.domain_objects import ListingConfiguration
from listing_agent.domains.listing.record_sink import RecordSink
from listing_agent.domains.listing.tree_walker import TreeWalker
from listing_agent.models import CycleResult, CycleState, ListingCursor, ListingRecord
from listing_agent.remote.client import RemoteFileSystemClient


class ListingOrchestrator:
    """
    Owns the in-memory cursor for the duration of a cycle.

    Only one cycle runs at a time; a second caller waits for the running one.
    The cursor is saved only after the sink accepted the whole batch. Any
    failure before that point leaves the persisted cursor exactly as it was,
    so the next cycle lists the same files again (at-least-once).
    """

    def __init__(
        self,
        cursor_store: CursorStore,
        sink: RecordSink,
        event_bus: Optional[DomainEventBus] = None,
        state_machine: Optional[CycleStateMachine] = None,
    ):
        self._cursor_store = cursor_store
        self._sink = sink
        self._event_bus = event_bus
        self._state_machine = state_machine or CycleStateMachine(event_bus)
        self._cycle_lock = asyncio.Lock()
        self._last_result: Optional[CycleResult] = None
        self._scoped_stores: Dict[str, CursorStore] = {}

    @property
    def state(self) -> CycleState:
        return self._state_machine.state

    @property
    def last_result(self) -> Optional[CycleResult]:
        return self._last_result

    @property
    def is_running(self) -> bool:
        return self._cycle_lock.locked()

    async def run_cycle(
        self,
        client: RemoteFileSystemClient,
        config: ListingConfiguration,
        cursor_scope: Optional[str] = None,
    ) -> CycleResult:
        """
        Execute one complete cycle.

        Listing errors and unexpected failures are returned in CycleResult.error
        rather than raised; the state machine is back in IDLE either way.
        Cancellation is propagated after the cycle has been marked failed.

        cursor_scope selects a cursor of its own, kept apart from the main one,
        for listings other than the scheduled one.
        """
        async with self._cycle_lock:
            result = CycleResult(cycle_id=str(uuid.uuid4()))
            try:
                await self._execute(client, config, result, self._store_for(cursor_scope))
            except asyncio.CancelledError:
                logging.warning(f"Listing cycle {result.cycle_id[:8]} cancelled; cursor untouched")
                await self._state_machine.fail(result.cycle_id)
                raise
            except ListingError as e:
                result.error = e
                await self._state_machine.fail(result.cycle_id)
                await self._report_failure(result, config, e)
            except InvalidTransitionError:
                raise
            except Exception as e:
                logging.error(f"Unexpected error in listing cycle {result.cycle_id[:8]}: {e}", exc_info=True)
                result.error = e
                await self._state_machine.fail(result.cycle_id)
                await self._report_failure(result, config, e)

            result.completed_at = datetime.now()
            self._last_result = result
            return result

    async def _execute(
        self,
        client: RemoteFileSystemClient,
        config: ListingConfiguration,
        result: CycleResult,
        store: CursorStore,
    ) -> None:
        cycle_id = result.cycle_id
        cycle_start = datetime.now()

        await self._state_machine.transition(cycle_id=cycle_id, new_state=CycleState.WALKING)
        cursor = await self._load_cursor(config, store)
        walker = TreeWalker(client, config.max_concurrent_listings)
        candidates = await walker.walk(config.root_path, config.path_filter, config.recurse)
        result.candidate_count = len(candidates)

        await self._state_machine.transition(cycle_id=cycle_id, new_state=CycleState.FILTERING)
        new_entries = select_new_entries(candidates, cursor)

        await self._state_machine.transition(cycle_id=cycle_id, new_state=CycleState.EMITTING)
        records = [ListingRecord.from_entry(entry) for entry in new_entries]
        await self._deliver(records)

        await self._state_machine.transition(cycle_id=cycle_id, new_state=CycleState.COMMITTING)
        advanced = advance(new_entries, cursor)
        if advanced.same_content(cursor) and cursor.revision > 0:
            committed = cursor
        else:
            committed = await self._save_cursor(advanced, store)

        result.emitted_count = len(records)
        result.watermark_instant = committed.watermark_instant
        await self._state_machine.transition(cycle_id=cycle_id, new_state=CycleState.IDLE)

        duration = (datetime.now() - cycle_start).total_seconds()
        logging.info(
            f"Listing cycle {cycle_id[:8]} for {config.root_path}: "
            f"{len(records)} new of {len(candidates)} listed file(s) in {duration:.2f}s "
            f"[watermark: {committed.watermark_instant}]"
        )

        if self._event_bus:
            await self._event_bus.publish(
                ListingCycleCompletedEvent(
                    cycle_id=cycle_id,
                    root_path=config.root_path,
                    emitted_count=len(records),
                    watermark_instant=committed.watermark_instant,
                )
            )

    async def _load_cursor(self, config: ListingConfiguration, store: CursorStore) -> ListingCursor:
        try:
            cursor = await store.load()
        except CursorPersistenceError:
            raise
        except Exception as e:
            raise CursorPersistenceError(f"Failed to load listing cursor: {e}") from e

        if cursor.listing_key is not None and cursor.listing_key != config.listing_key:
            logging.info(
                f"Listing configuration changed for {config.root_path}; "
                f"resetting cursor and listing everything again"
            )
            cursor = await self._reset("configuration changed", store)

        if cursor.listing_key is None:
            cursor = ListingCursor(
                watermark_instant=cursor.watermark_instant,
                emitted_at_watermark=cursor.emitted_at_watermark,
                listing_key=config.listing_key,
                revision=cursor.revision,
            )
        return cursor

    async def _deliver(self, records: List[ListingRecord]) -> None:
        if not records:
            return
        try:
            await self._sink.deliver(records)
        except EmissionError:
            raise
        except Exception as e:
            raise EmissionError(f"Downstream handoff of {len(records)} record(s) failed: {e}") from e

    async def _save_cursor(self, cursor: ListingCursor, store: CursorStore) -> ListingCursor:
        try:
            return await store.save(cursor)
        except CursorPersistenceError:
            raise
        except Exception as e:
            raise CursorPersistenceError(f"Failed to save listing cursor: {e}") from e

    def _store_for(self, cursor_scope: Optional[str]) -> CursorStore:
        if cursor_scope is None:
            return self._cursor_store
        store = self._scoped_stores.get(cursor_scope)
        if store is None:
            store = self._cursor_store.scoped(cursor_scope)
            self._scoped_stores[cursor_scope] = store
        return store

    async def load_cursor(self) -> ListingCursor:
        return await self._cursor_store.load()

    async def reset_cursor(self, reason: str = "requested") -> ListingCursor:
        """Drop the persisted cursor; the next cycle treats every file as new."""
        async with self._cycle_lock:
            return await self._reset(reason, self._cursor_store)

    async def _reset(self, reason: str, store: CursorStore) -> ListingCursor:
        try:
            cursor = await store.reset()
        except CursorPersistenceError:
            raise
        except Exception as e:
            raise CursorPersistenceError(f"Failed to reset listing cursor: {e}") from e

        logging.info(f"Listing cursor reset ({reason})")
        if self._event_bus:
            await self._event_bus.publish(ListingResetEvent(reason=reason))
        return cursor

    async def _report_failure(
        self, result: CycleResult, config: ListingConfiguration, error: Exception
    ) -> None:
        logging.error(
            f"Listing cycle {result.cycle_id[:8]} for {config.root_path} failed "
            f"({type(error).__name__}): {error}. No records kept, cursor unchanged"
        )
        if self._event_bus:
            await self._event_bus.publish(
                ListingCycleFailedEvent(
                    cycle_id=result.cycle_id,
                    root_path=config.root_path,
                    error_type=type(error).__name__,
                    error_message=str(error),
                )
            )
