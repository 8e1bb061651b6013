import asyncio
import logging

import pytest

from app.services.whatsapp.sweeper import SessionSweeper


class FlakyStore:
    """Store stand-in whose first sweep blows up."""

    def __init__(self):
        self.calls = 0

    async def sweep(self):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("store unreachable")
        return 0


class TestSweepOnce:
    @pytest.mark.asyncio
    async def test_idle_session_is_gone_after_the_next_sweep(self, send, store, clock, phone):
        await send("hi")
        await send("hi", from_phone="+15550000002")
        clock.advance(minutes=20)
        await send("order", from_phone="+15550000002")

        clock.advance(minutes=11)
        removed = await SessionSweeper(store).sweep_once()

        assert removed == 1
        assert await store.count() == 1
        assert await store.get(phone) is None
        assert await store.get("+15550000002") is not None

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        sweeper = SessionSweeper(FlakyStore())

        with caplog.at_level(logging.ERROR):
            removed = await sweeper.sweep_once()

        assert removed == 0
        assert "Session sweep failed" in caplog.text


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_loop_survives_a_failing_tick(self):
        store = FlakyStore()
        sweeper = SessionSweeper(store, interval_seconds=0.01)

        sweeper.start()
        await asyncio.sleep(0.1)
        assert sweeper.running
        await sweeper.stop()

        assert store.calls >= 2
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, store):
        sweeper = SessionSweeper(store, interval_seconds=60)

        sweeper.start()
        task = sweeper._task
        sweeper.start()

        assert sweeper._task is task
        await sweeper.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, store):
        await SessionSweeper(store).stop()
