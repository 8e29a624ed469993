"""
Tests for the scheduled announcement dispatcher.
"""

import asyncio

import pytest

from dartqueue.core.events import Tick
from dartqueue.shared.models import Announcement

from doubles import FakeConnection, connect_chat


def tick(runtime, transports, connect=True):
    async def scenario():
        transport = await connect_chat(runtime, transports) if connect else None
        runtime.engine.submit(Tick())
        await runtime.engine.process_pending()
        return transport

    return asyncio.run(scenario())


def announcement(clock, elapsed_ms, **kwargs):
    return Announcement(
        id=kwargs.pop("id", "a1"),
        message=kwargs.pop("message", "Follow the channel!"),
        interval_minutes=kwargs.pop("interval_minutes", 1),
        last_sent_at=clock() - elapsed_ms,
        **kwargs,
    )


def test_due_announcement_fires_and_is_stamped(ready_runtime, transports, clock, repos):
    item = announcement(clock, 61_000)
    ready_runtime.state.announcements = [item]

    transport = tick(ready_runtime, transports)

    assert transport.sent == ["Follow the channel!"]
    assert item.last_sent_at == clock()
    assert repos.announcements.load(0)[0].last_sent_at == clock()


def test_not_yet_due(ready_runtime, transports, clock):
    item = announcement(clock, 59_999)
    ready_runtime.state.announcements = [item]

    transport = tick(ready_runtime, transports)

    assert transport.sent == []
    assert item.last_sent_at == clock() - 59_999


def test_disabled_never_fires(ready_runtime, transports, clock):
    ready_runtime.state.announcements = [announcement(clock, 10**9, enabled=False)]

    transport = tick(ready_runtime, transports)

    assert transport.sent == []


def test_nothing_fires_while_disconnected(ready_runtime, transports, clock):
    item = announcement(clock, 61_000)
    ready_runtime.state.announcements = [item]

    tick(ready_runtime, transports, connect=False)

    assert transports.created == []
    assert item.last_sent_at == clock() - 61_000


def test_batch_is_saved_and_broadcast_once(ready_runtime, transports, clock):
    ready_runtime.state.announcements = [
        announcement(clock, 61_000, id="a", message="one"),
        announcement(clock, 61_000, id="b", message="two"),
        announcement(clock, 0, id="c", message="three"),
    ]

    async def scenario():
        transport = await connect_chat(ready_runtime, transports)
        client = FakeConnection()
        ready_runtime.hub.add(client)
        fired = await ready_runtime.dispatcher.run_due()
        return transport, client, fired

    transport, client, fired = asyncio.run(scenario())

    assert fired == 2
    assert transport.sent == ["one", "two"]
    assert len(client.frames) == 1


def test_failed_send_is_not_retried(ready_runtime, transports, clock):
    item = announcement(clock, 61_000)
    ready_runtime.state.announcements = [item]

    async def scenario():
        transport = await connect_chat(ready_runtime, transports)
        transport.fail_sends = True
        await ready_runtime.dispatcher.run_due()
        transport.fail_sends = False
        await ready_runtime.dispatcher.run_due()
        return transport

    transport = asyncio.run(scenario())

    assert transport.sent == []
    assert item.last_sent_at == clock()


def test_poll_loop_submits_ticks(runtime):
    events = []

    async def scenario():
        task = asyncio.create_task(runtime.dispatcher.poll_loop(events.append, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert events
    assert all(isinstance(event, Tick) for event in events)
