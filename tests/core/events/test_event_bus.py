"""
Tests for the DomainEventBus.
"""
from unittest.mock import Mock

import pytest

from listing_agent.core.events.domain_event import DomainEvent
from listing_agent.core.events.event_bus import DomainEventBus
from listing_agent.core.events.listing_events import ListingResetEvent, ListingServiceStatusEvent


@pytest.mark.asyncio
async def test_subscribe_and_publish():
    """A handler is called when its subscribed event is published."""
    bus = DomainEventBus()
    handler_mock = Mock()

    async def async_handler(event: DomainEvent):
        handler_mock(event)

    await bus.subscribe(ListingResetEvent, async_handler)

    event = ListingResetEvent(reason="test")
    await bus.publish(event)

    handler_mock.assert_called_once_with(event)


@pytest.mark.asyncio
async def test_publish_to_correct_handlers_only():
    bus = DomainEventBus()
    reset_mock = Mock()
    status_mock = Mock()

    async def on_reset(event):
        reset_mock(event)

    async def on_status(event):
        status_mock(event)

    await bus.subscribe(ListingResetEvent, on_reset)
    await bus.subscribe(ListingServiceStatusEvent, on_status)

    event = ListingResetEvent(reason="test")
    await bus.publish(event)

    reset_mock.assert_called_once_with(event)
    status_mock.assert_not_called()


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    """A handler that raises is logged; the remaining handlers still run."""
    bus = DomainEventBus()
    survivor = Mock()

    async def failing_handler(event):
        raise RuntimeError("boom")

    async def surviving_handler(event):
        survivor(event)

    await bus.subscribe(ListingResetEvent, failing_handler)
    await bus.subscribe(ListingResetEvent, surviving_handler)

    event = ListingResetEvent(reason="test")
    await bus.publish(event)

    survivor.assert_called_once_with(event)


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = DomainEventBus()
    handler_mock = Mock()

    async def handler(event):
        handler_mock(event)

    await bus.subscribe(ListingResetEvent, handler)
    await bus.unsubscribe(ListingResetEvent, handler)
    await bus.publish(ListingResetEvent(reason="test"))

    handler_mock.assert_not_called()


@pytest.mark.asyncio
async def test_publish_without_handlers_is_noop():
    bus = DomainEventBus()
    await bus.publish(ListingServiceStatusEvent(is_running=True))


def test_events_are_immutable_and_identified():
    first = ListingResetEvent(reason="a")
    second = ListingResetEvent(reason="a")

    assert first.event_id != second.event_id
    with pytest.raises(Exception):
        first.reason = "b"
