"""Tests for the periodic timer"""
import asyncio

import pytest

from errorlog.common.scheduler import ScheduledLoop


class TestScheduledLoop:

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            ScheduledLoop(0, lambda: None)

    async def test_first_tick_after_one_interval(self):
        calls = []

        async def callback():
            calls.append(True)

        loop = ScheduledLoop(0.2, callback, name="test")
        await loop.start()
        await asyncio.sleep(0.05)
        loop.stop()

        assert calls == []

    async def test_fires_repeatedly(self):
        calls = []

        async def callback():
            calls.append(True)

        loop = ScheduledLoop(0.05, callback, name="test")
        await loop.start()
        await asyncio.sleep(0.3)
        loop.stop()

        assert len(calls) >= 2
        assert loop.execution_count == len(calls)

    async def test_callback_error_does_not_stop_loop(self):
        calls = []

        async def callback():
            calls.append(True)
            raise RuntimeError("tick failed")

        loop = ScheduledLoop(0.05, callback, name="test")
        await loop.start()
        await asyncio.sleep(0.3)
        loop.stop()

        assert len(calls) >= 2
        assert loop.error_count == len(calls)
        assert loop.execution_count == 0

    async def test_stop_is_idempotent(self):
        async def callback():
            pass

        loop = ScheduledLoop(10, callback)
        await loop.start()
        await loop.start()
        assert loop.running

        loop.stop()
        loop.stop()

        assert not loop.running
        stats = loop.get_stats()
        assert stats["interval_s"] == 10
        assert stats["execution_count"] == 0
