import pytest

from listing_agent.core.cqrs.command_bus import CommandBus
from listing_agent.core.cqrs.query_bus import QueryBus
from listing_agent.domains.listing.commands import (
    PauseListingCommand,
    ResetListingCommand,
    ResumeListingCommand,
    RunListingCycleCommand,
)
from listing_agent.domains.listing.listing_orchestrator import ListingOrchestrator
from listing_agent.domains.listing.listing_service import ListingService
from listing_agent.domains.listing.queries import GetListingCursorQuery, GetListingStatusQuery
from listing_agent.domains.listing.registration import register_listing_handlers


@pytest.fixture
def buses(settings, lake, cursor_store, sink):
    command_bus = CommandBus()
    query_bus = QueryBus()
    service = ListingService(
        settings, lake, ListingOrchestrator(cursor_store=cursor_store, sink=sink)
    )
    register_listing_handlers(command_bus, query_bus, service)
    return command_bus, query_bus, service


def test_every_listing_message_is_registered(buses):
    command_bus, query_bus, _ = buses

    for command_type in (
        RunListingCycleCommand,
        ResetListingCommand,
        PauseListingCommand,
        ResumeListingCommand,
    ):
        assert command_bus.is_registered(command_type)
    assert query_bus.is_registered(GetListingCursorQuery)
    assert query_bus.is_registered(GetListingStatusQuery)


@pytest.mark.asyncio
async def test_run_cycle_and_query_cursor(buses):
    command_bus, query_bus, _ = buses

    result = await command_bus.execute(RunListingCycleCommand())
    cursor = await query_bus.execute(GetListingCursorQuery())

    assert result.emitted_count == 2
    assert cursor["watermarkInstant"] == 2000
    assert cursor["revision"] == 1
    assert cursor["emittedAtWatermark"] == ["/data/sub\u0000report.txt"]


@pytest.mark.asyncio
async def test_status_reports_last_cycle(buses):
    command_bus, query_bus, _ = buses

    before = await query_bus.execute(GetListingStatusQuery())
    await command_bus.execute(RunListingCycleCommand())
    after = await query_bus.execute(GetListingStatusQuery())

    assert before["last_cycle"] is None
    assert before["cycle_state"] == "Idle"
    assert after["service_running"] is False
    assert after["last_cycle"]["succeeded"] is True
    assert after["last_cycle"]["emitted_count"] == 2


@pytest.mark.asyncio
async def test_reset_clears_cursor(buses):
    command_bus, query_bus, _ = buses
    await command_bus.execute(RunListingCycleCommand())

    await command_bus.execute(ResetListingCommand(reason="test"))
    cursor = await query_bus.execute(GetListingCursorQuery())

    assert cursor["watermarkInstant"] is None
    assert cursor["revision"] == 0


@pytest.mark.asyncio
async def test_pause_and_resume(buses):
    command_bus, _, service = buses

    assert await command_bus.execute(PauseListingCommand()) is False
    assert await command_bus.execute(ResumeListingCommand()) is True
    assert service.is_running()
    assert await command_bus.execute(ResumeListingCommand()) is False
    assert await command_bus.execute(PauseListingCommand()) is True
    assert not service.is_running()
