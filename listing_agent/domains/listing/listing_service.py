"""
Listing Service
Runs listing cycles periodically as a background task and on demand.
"""
import asyncio
import logging
from typing import Mapping, Optional

from listing_agent.config import Settings
from listing_agent.core.events.event_bus import DomainEventBus
from listing_agent.core.events.listing_events import ListingServiceStatusEvent
from listing_agent.core.exceptions import ConfigurationError
from listing_agent.domains.listing.domain_objects import ListingConfiguration
from listing_agent.domains.listing.listing_orchestrator import ListingOrchestrator
from listing_agent.models import CycleResult
from listing_agent.remote.client import RemoteFileSystemClient


class ListingService:
    def __init__(
        self,
        settings: Settings,
        client: RemoteFileSystemClient,
        orchestrator: ListingOrchestrator,
        event_bus: Optional[DomainEventBus] = None,
    ):
        self._settings = settings
        self._client = client
        self._orchestrator = orchestrator
        self._event_bus = event_bus
        self._running = False
        self._loop_task: Optional[asyncio.Task] = None

        # Fail fast on a broken root, recursion flag or filter
        initial = self.build_configuration()
        self._scheduled_key = initial.listing_key
        logging.info("ListingService initialized")
        logging.info(f"Listing root: {initial.root_path} (recurse: {initial.recurse})")
        logging.info(f"File filter: {initial.file_filter}")
        logging.info(f"Polling interval: {settings.polling_interval_seconds}s")

    @property
    def orchestrator(self) -> ListingOrchestrator:
        return self._orchestrator

    def is_running(self) -> bool:
        return self._running

    def build_configuration(self, variables: Optional[Mapping[str, str]] = None) -> ListingConfiguration:
        """Render the configured root path and compile the filter for one cycle."""
        return ListingConfiguration.from_settings(self._settings, variables)

    async def trigger_cycle(self, variables: Optional[Mapping[str, str]] = None) -> CycleResult:
        """
        Run one cycle now. Waits for a cycle already in flight to finish first.

        Variables that render a listing other than the scheduled one are listed
        against a cursor of their own, so the scheduled cursor is left alone.
        """
        config = self.build_configuration(variables)
        if config.listing_key == self._scheduled_key:
            return await self._orchestrator.run_cycle(self._client, config)

        logging.info(f"On-demand listing of {config.root_path} uses its own cursor ({config.listing_key})")
        return await self._orchestrator.run_cycle(self._client, config, cursor_scope=config.listing_key)

    async def start_listing(self) -> None:
        if self._running:
            logging.warning("Listing service is already running")
            return

        self._running = True
        self._loop_task = asyncio.create_task(self._listing_loop())
        logging.info("Listing service started in background")
        await self._publish_status(True)

    async def stop_listing(self) -> None:
        if not self._running:
            logging.warning("Listing service is not running")
            return

        self._running = False
        logging.info("Listing service stop requested")

        if self._loop_task and not self._loop_task.done():
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                logging.debug("Listing loop cancelled successfully")

        self._loop_task = None
        logging.info("Listing service stopped")
        await self._publish_status(False)

    async def _listing_loop(self) -> None:
        try:
            while self._running:
                try:
                    result = await self.trigger_cycle()
                    delay = (
                        self._settings.polling_interval_seconds
                        if result.succeeded
                        else self._settings.error_retry_delay_seconds
                    )
                    await asyncio.sleep(delay)
                except asyncio.CancelledError:
                    logging.info("Listing loop cancelled")
                    raise
                except ConfigurationError as e:
                    logging.error(f"Listing configuration is invalid, stopping: {e}")
                    self._running = False
                except Exception as e:
                    logging.error(f"Unexpected error in listing cycle: {e}", exc_info=True)
                    await asyncio.sleep(self._settings.error_retry_delay_seconds)
        finally:
            self._running = False
            logging.info("Listing loop completed")

    async def _publish_status(self, is_running: bool) -> None:
        if self._event_bus:
            await self._event_bus.publish(ListingServiceStatusEvent(is_running=is_running))
