from __future__ import annotations

import asyncio

import pytest

from core.scheduler import Scheduler


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        Scheduler().every(0, lambda: None)


def test_every_fires_until_cancelled():
    calls: list[int] = []

    async def scenario():
        scheduler = Scheduler()
        handle = scheduler.every(0.01, lambda: calls.append(1), name="t")
        await asyncio.sleep(0.055)
        assert handle.active
        assert scheduler.cancel("t")
        await handle.wait_closed()
        fired = len(calls)
        await asyncio.sleep(0.03)
        return handle, fired

    handle, fired = asyncio.run(scenario())
    assert fired >= 2
    assert len(calls) == fired
    assert handle.fired == fired
    assert not handle.active


def test_failing_callback_keeps_timer_alive():
    calls: list[int] = []

    def boom():
        calls.append(1)
        raise RuntimeError("boom")

    async def scenario():
        scheduler = Scheduler()
        handle = scheduler.every(0.01, boom, run_immediately=True)
        await asyncio.sleep(0.035)
        active = handle.active
        await scheduler.aclose()
        return active

    assert asyncio.run(scenario()) is True
    assert len(calls) >= 2


def test_same_name_replaces_previous_timer():
    async def scenario():
        scheduler = Scheduler()
        first = scheduler.every(0.01, lambda: None, name="tick")
        second = scheduler.every(0.01, lambda: None, name="tick")
        await first.wait_closed()
        result = (first.active, second.active, len(scheduler.active_handles()))
        await scheduler.aclose()
        return result

    assert asyncio.run(scenario()) == (False, True, 1)


def test_shutdown_cancels_everything():
    async def scenario():
        scheduler = Scheduler()
        handles = [scheduler.every(0.01, lambda: None) for _ in range(3)]
        cancelled = scheduler.shutdown()
        for h in handles:
            await h.wait_closed()
        return cancelled, [h.active for h in handles], scheduler.shutdown()

    cancelled, active, second = asyncio.run(scenario())
    assert cancelled == 3
    assert active == [False, False, False]
    assert second == 0
