"""Tests for the start/stop animation loop."""

import asyncio

from handart.animation import AnimationLoop


class TestAnimationLoop:
    def test_stopped_by_default(self):
        calls = []
        loop = AnimationLoop(lambda: calls.append(1))
        assert not loop.running
        assert loop.tick() is False
        assert calls == []

    def test_ticks_while_running(self):
        calls = []
        loop = AnimationLoop(lambda: calls.append(1))
        loop.start()
        for _ in range(3):
            assert loop.tick()
        assert len(calls) == 3
        assert loop.tick_count == 3

    def test_stop_is_immediate(self):
        calls = []
        loop = AnimationLoop(lambda: calls.append(1))
        loop.start()
        loop.tick()
        loop.stop()
        loop.tick()
        assert len(calls) == 1

    def test_stop_idempotent(self):
        loop = AnimationLoop(lambda: None)
        loop.stop()
        loop.stop()
        loop.start()
        loop.start()
        loop.stop()
        loop.stop()
        assert not loop.running

    def test_async_run_exits_when_stopped(self):
        calls = []
        loop = AnimationLoop(lambda: None, interval=0.001)

        def callback():
            calls.append(1)
            if len(calls) >= 5:
                loop.stop()

        loop._callback = callback
        loop.start()
        asyncio.run(asyncio.wait_for(loop.run(), timeout=5))
        assert len(calls) == 5
        assert not loop.running

    def test_async_run_without_start_returns(self):
        calls = []
        loop = AnimationLoop(lambda: calls.append(1), interval=0.001)
        asyncio.run(asyncio.wait_for(loop.run(), timeout=5))
        assert calls == []
        assert loop.tick_count == 0

    def test_async_run_stopped_from_another_task(self):
        calls = []
        loop = AnimationLoop(lambda: calls.append(1), interval=0.001)

        async def scenario():
            loop.start()
            task = asyncio.create_task(loop.run())
            await asyncio.sleep(0.02)
            loop.stop()
            await asyncio.wait_for(task, timeout=5)

        asyncio.run(scenario())
        assert len(calls) >= 1
        assert not loop.running
