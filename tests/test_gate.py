"""Tests for the capability availability gate."""

from __future__ import annotations

import asyncio

from smartcv.app.core.gate import CapabilityGate


class Events:
    def __init__(self):
        self.ready = 0
        self.timeouts = 0

    def on_ready(self):
        self.ready += 1

    def on_timeout(self):
        self.timeouts += 1


def test_ready_immediately_when_platform_present():
    events = Events()

    async def scenario():
        gate = CapabilityGate(lambda: object(), events.on_ready, events.on_timeout, interval=0.01, deadline=0.1)
        gate.start()
        # signalled synchronously, nothing scheduled
        assert events.ready == 1
        assert gate.pending is False
        assert await gate.wait() is True

    asyncio.run(scenario())
    assert events.timeouts == 0


def test_polls_until_platform_appears():
    events = Events()
    seen = {"platform": None, "probes": 0}

    def probe():
        seen["probes"] += 1
        return seen["platform"]

    async def scenario():
        gate = CapabilityGate(probe, events.on_ready, events.on_timeout, interval=0.01, deadline=1.0)
        gate.start()
        assert gate.pending is True
        await asyncio.sleep(0.05)
        assert events.ready == 0
        seen["platform"] = object()
        assert await gate.wait() is True
        assert gate.pending is False

    asyncio.run(scenario())
    assert events.ready == 1
    assert events.timeouts == 0
    assert seen["probes"] > 2


def test_deadline_reports_timeout_and_clears_timers():
    events = Events()

    async def scenario():
        gate = CapabilityGate(lambda: None, events.on_ready, events.on_timeout, interval=0.01, deadline=0.05)
        gate.start()
        assert await gate.wait() is False
        assert gate.pending is False
        # no stray poll keeps running after the deadline
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert events.timeouts == 1
    assert events.ready == 0


def test_start_while_waiting_does_not_add_timers():
    events = Events()

    async def scenario():
        gate = CapabilityGate(lambda: None, events.on_ready, events.on_timeout, interval=0.01, deadline=0.05)
        gate.start()
        poll_handle, deadline_handle = gate._poll_handle, gate._deadline_handle
        gate.start()
        gate.start()
        assert gate._deadline_handle is deadline_handle
        assert gate._poll_handle is poll_handle
        await gate.wait()

    asyncio.run(scenario())
    assert events.timeouts == 1


def test_cancel_stops_waiting():
    events = Events()

    async def scenario():
        gate = CapabilityGate(lambda: None, events.on_ready, events.on_timeout, interval=0.01, deadline=0.05)
        gate.start()
        gate.cancel()
        assert gate.pending is False
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert events.timeouts == 0
    assert events.ready == 0
