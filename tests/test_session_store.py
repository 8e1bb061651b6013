import asyncio

import pytest

from app.services.whatsapp.session import Session


def new_session(store, phone):
    return Session.start(phone, "demo-restaurant", "AI Pizza Palace", store.new_expiry())


class TestExpiry:
    @pytest.mark.asyncio
    async def test_live_session_is_returned(self, store, phone):
        session = new_session(store, phone)
        await store.put(phone, session)

        assert await store.get(phone) == session

    @pytest.mark.asyncio
    async def test_session_is_dead_at_its_expiry(self, store, clock, phone):
        await store.put(phone, new_session(store, phone))

        clock.advance(minutes=30)

        assert await store.get(phone) is None
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_touch_extends_expiry(self, store, clock, phone):
        await store.put(phone, new_session(store, phone))

        clock.advance(minutes=20)
        touched = await store.touch(phone)

        assert touched.expires_at == clock.now + store.ttl

        clock.advance(minutes=20)

        assert await store.get(phone) == touched

    @pytest.mark.asyncio
    async def test_touch_without_session(self, store, phone):
        assert await store.touch(phone) is None

    @pytest.mark.asyncio
    async def test_count_skips_expired_sessions_not_yet_swept(self, store, clock):
        await store.put("+1000", new_session(store, "+1000"))
        clock.advance(minutes=20)
        await store.put("+2000", new_session(store, "+2000"))
        clock.advance(minutes=11)

        assert await store.count() == 1
        assert await store.sweep() == 1


class TestSweep:
    @pytest.mark.asyncio
    async def test_removes_only_expired_sessions(self, store, clock):
        await store.put("+1000", new_session(store, "+1000"))
        clock.advance(minutes=20)
        await store.put("+2000", new_session(store, "+2000"))
        clock.advance(minutes=11)

        removed = await store.sweep()

        assert removed == 1
        assert await store.get("+1000") is None
        assert await store.get("+2000") is not None

    @pytest.mark.asyncio
    async def test_does_not_delete_a_session_refreshed_while_waiting(self, store, clock, phone):
        session = new_session(store, phone)
        await store.put(phone, session)
        clock.advance(minutes=31)

        async with store.lock(phone):
            sweep = asyncio.create_task(store.sweep())
            await asyncio.sleep(0)
            await store.put(phone, session.with_expiry(store.new_expiry()))

        assert await sweep == 0
        assert await store.get(phone) is not None


class TestLocking:
    @pytest.mark.asyncio
    async def test_same_phone_is_serialized(self, store, phone):
        events = []

        async def worker(name, delay):
            async with store.lock(phone):
                events.append(f"{name}-in")
                await asyncio.sleep(delay)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a", 0.01), worker("b", 0))

        assert events == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_other_phones_do_not_wait(self, store):
        async def take_other():
            async with store.lock("+2000"):
                return True

        async with store.lock("+1000"):
            assert await asyncio.wait_for(take_other(), timeout=1)

    @pytest.mark.asyncio
    async def test_lock_entries_are_released(self, store, phone):
        async with store.lock(phone):
            assert store.is_locked(phone)

        assert not store.is_locked(phone)
        assert store._locks == {}
