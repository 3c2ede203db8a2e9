"""Tests for the retry-bounded ARP poller and discovery sessions."""

import asyncio

from miracast.discovery import RetryBoundedPoller, SessionStatus
from miracast.listener import DiscoveredDevice

from conftest import ScriptedResolver


def test_stops_on_first_address():
    resolver = ScriptedResolver([None, None, None, "192.168.49.5", "192.168.49.9"])
    poller = RetryBoundedPoller(resolver, interval=0.01, initial_delay=0.0)

    async def run():
        session = poller.start("p2p-wlan0-0")
        return session, await session.result()

    session, device = asyncio.run(run())

    assert device == DiscoveredDevice("192.168.49.5", 7236)
    assert session.status is SessionStatus.RESOLVED
    assert resolver.calls == ["p2p-wlan0-0"] * 4
    assert session.retry_count == 3
    assert poller.active_session is None


def test_exhaustion_bounds_lookups():
    resolver = ScriptedResolver([])
    poller = RetryBoundedPoller(resolver, interval=0.001, initial_delay=0.0, max_retries=5)

    async def run():
        session = poller.start("p2p-wlan0-0", control_port=8554)
        return session, await session.result()

    session, device = asyncio.run(run())

    assert device is None
    assert session.status is SessionStatus.EXHAUSTED
    assert len(resolver.calls) == 6
    assert session.lookups == 6
    assert session.retry_count == 6


def test_lookups_follow_fixed_rate():
    resolver = ScriptedResolver([None, None, None, "192.168.49.5"])
    poller = RetryBoundedPoller(resolver, interval=0.02, initial_delay=0.0)

    async def run():
        started = asyncio.get_running_loop().time()
        session = poller.start("p2p-wlan0-0")
        await session.result()
        return started

    started = asyncio.run(run())

    # Fourth tick is due at 3 * interval after the session starts
    assert len(resolver.times) == 4
    assert resolver.times[-1] - started >= 0.059


def test_first_lookup_waits_initial_delay():
    resolver = ScriptedResolver(["192.168.49.5"])
    poller = RetryBoundedPoller(resolver, interval=0.01, initial_delay=0.05)

    async def run():
        started = asyncio.get_running_loop().time()
        session = poller.start("p2p-wlan0-0")
        await session.result()
        return started

    started = asyncio.run(run())

    assert len(resolver.times) == 1
    assert resolver.times[0] - started >= 0.049


def test_default_retry_cap():
    resolver = ScriptedResolver([])
    poller = RetryBoundedPoller(resolver, interval=0.001, initial_delay=0.0)

    async def run():
        session = poller.start("p2p-wlan0-0")
        return session, await session.result()

    session, device = asyncio.run(run())

    assert device is None
    assert session.status is SessionStatus.EXHAUSTED
    assert session.max_retries == 60
    assert len(resolver.calls) == 61
    assert session.retry_count == 61


def test_failing_lookup_counts_as_retry():
    class FailingResolver(ScriptedResolver):
        async def lookup(self, interface):
            await super().lookup(interface)
            raise RuntimeError("ARP table unavailable")

    resolver = FailingResolver([])
    poller = RetryBoundedPoller(resolver, interval=0.001, initial_delay=0.0, max_retries=3)

    async def run():
        session = poller.start("p2p-wlan0-0")
        return session, await session.result()

    session, device = asyncio.run(run())

    assert device is None
    assert session.status is SessionStatus.EXHAUSTED
    assert len(resolver.calls) == 4
    assert poller.active_session is None


def test_new_session_cancels_previous():
    resolver = ScriptedResolver([])
    poller = RetryBoundedPoller(resolver, interval=0.01, initial_delay=0.0)

    async def run():
        first = poller.start("p2p-wlan0-0")
        second = poller.start("p2p-wlan0-1", control_port=8554)
        assert poller.active_session is second

        first_result = await first.result()
        poller.cancel()
        second_result = await second.result()
        return first, first_result, second, second_result

    first, first_result, second, second_result = asyncio.run(run())

    assert first.status is SessionStatus.CANCELLED
    assert first_result is None
    assert second.status is SessionStatus.CANCELLED
    assert second_result is None
    assert second.control_port == 8554


def test_no_ticks_after_cancel():
    resolver = ScriptedResolver([])
    poller = RetryBoundedPoller(resolver, interval=0.01, initial_delay=0.0)

    async def run():
        session = poller.start("p2p-wlan0-0")
        await asyncio.sleep(0.035)
        session.cancel()
        lookups = session.lookups
        await asyncio.sleep(0.05)
        return session, lookups

    session, lookups = asyncio.run(run())

    assert lookups >= 1
    assert session.lookups == lookups
    assert len(resolver.calls) == lookups


def test_cancel_during_lookup_discards_result():
    class SlowResolver(ScriptedResolver):
        async def lookup(self, interface):
            await asyncio.sleep(0.05)
            return "192.168.49.5"

    poller = RetryBoundedPoller(SlowResolver([]), interval=0.01, initial_delay=0.0)

    async def run():
        session = poller.start("p2p-wlan0-0")
        await asyncio.sleep(0.01)
        session.cancel()
        return session, await session.result()

    session, device = asyncio.run(run())

    assert device is None
    assert session.status is SessionStatus.CANCELLED


def test_session_stats():
    resolver = ScriptedResolver(["192.168.49.5"])
    poller = RetryBoundedPoller(resolver, interval=0.01, initial_delay=0.0, max_retries=3)

    async def run():
        session = poller.start("p2p-wlan0-0")
        await session.result()
        return session.get_stats()

    stats = asyncio.run(run())

    assert stats == {
        'interface': 'p2p-wlan0-0',
        'control_port': 7236,
        'status': 'resolved',
        'lookups': 1,
        'retry_count': 0,
        'max_retries': 3,
    }
