import asyncio
import datetime as dt
import logging

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from pydantic import ValidationError

from app.core.config import Settings
from app.services.persistence.mock import MockPersistenceService
from app.services.whatsapp import messages
from app.services.whatsapp.dispatcher import ConversationDispatcher
from app.services.whatsapp.session import BookingDraft, BookingStep, FlowType, Session
from app.services.whatsapp.store import RedisSessionStore


@pytest.fixture
def redis_client():
    return FakeAsyncRedis(server=FakeServer(), decode_responses=True)


@pytest.fixture
def redis_store(redis_client, clock):
    return RedisSessionStore(redis_client, ttl=dt.timedelta(minutes=30), clock=clock)


def booking_session(store, phone):
    session = Session.start(phone, "demo-restaurant", "AI Pizza Palace", store.new_expiry())
    draft = BookingDraft(date=dt.date(2025, 4, 20), time="19:30", guests=4, customer_name="Jane Doe")
    return session.begin_flow(FlowType.BOOKING, draft, BookingStep.CUSTOMER_PHONE)


class TestStorage:
    @pytest.mark.asyncio
    async def test_session_round_trips_with_its_draft(self, redis_store, phone):
        session = booking_session(redis_store, phone)
        await redis_store.put(phone, session)

        stored = await redis_store.get(phone)

        assert stored == session
        assert isinstance(stored.draft, BookingDraft)
        assert stored.draft.date == dt.date(2025, 4, 20)

    @pytest.mark.asyncio
    async def test_key_ttl_follows_expiry(self, redis_store, redis_client, phone):
        await redis_store.put(phone, booking_session(redis_store, phone))

        ttl_ms = await redis_client.pttl(redis_store._key(phone))

        assert 29 * 60 * 1000 < ttl_ms <= 30 * 60 * 1000

    @pytest.mark.asyncio
    async def test_expired_session_is_dropped(self, redis_store, redis_client, clock, phone):
        await redis_store.put(phone, booking_session(redis_store, phone))

        clock.advance(minutes=30)

        assert await redis_store.get(phone) is None
        assert await redis_client.exists(redis_store._key(phone)) == 0

    @pytest.mark.asyncio
    async def test_put_of_an_already_expired_session_deletes(self, redis_store, clock, phone):
        session = booking_session(redis_store, phone)
        await redis_store.put(phone, session)
        clock.advance(minutes=31)

        await redis_store.put(phone, session)

        assert await redis_store.count() == 0

    @pytest.mark.asyncio
    async def test_touch_extends_expiry(self, redis_store, clock, phone):
        await redis_store.put(phone, booking_session(redis_store, phone))

        clock.advance(minutes=20)
        touched = await redis_store.touch(phone)

        assert touched.expires_at == clock.now + redis_store.ttl

        clock.advance(minutes=20)

        assert await redis_store.get(phone) == touched

    @pytest.mark.asyncio
    async def test_health_check(self, redis_store):
        assert await redis_store.health_check() is True


class TestLocking:
    @pytest.mark.asyncio
    async def test_same_phone_is_serialized(self, redis_store, phone):
        events = []

        async def worker(name, delay):
            async with redis_store.lock(phone):
                events.append(f"{name}-in")
                await asyncio.sleep(delay)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a", 0.05), worker("b", 0))

        assert events == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_other_phones_do_not_wait(self, redis_store):
        async def take_other():
            async with redis_store.lock("+2000"):
                return True

        async with redis_store.lock("+1000"):
            assert await asyncio.wait_for(take_other(), timeout=1)

    @pytest.mark.asyncio
    async def test_lease_running_out_is_logged_on_release(self, redis_client, phone, caplog):
        store = RedisSessionStore(redis_client, lock_timeout=0.1)

        with caplog.at_level(logging.WARNING):
            async with store.lock(phone):
                await asyncio.sleep(0.3)

        assert "expired before release" in caplog.text


class TestLockLease:
    def test_default_lease_outlives_collaborator_timeout(self):
        settings = Settings()

        assert settings.session_lock_timeout_seconds >= 2 * settings.collaborator_timeout_seconds

    def test_lease_not_longer_than_collaborator_timeout_is_rejected(self):
        with pytest.raises(ValidationError, match="session_lock_timeout_seconds"):
            Settings(session_lock_timeout_seconds=10, collaborator_timeout_seconds=10.0)

    @pytest.mark.asyncio
    async def test_overlapping_confirms_commit_once(self, redis_client, restaurant, catalog, phone):
        store = RedisSessionStore(redis_client, lock_timeout=1.0)
        persistence = MockPersistenceService(min_latency=0.3, max_latency=0.3)
        dispatcher = ConversationDispatcher.from_services(store, catalog, persistence, timeout=0.5)
        for text in ("hi", "complaint", "Cold food", "Jane Doe", "555-1234"):
            await dispatcher.dispatch(phone, restaurant, text)

        first = asyncio.create_task(dispatcher.dispatch(phone, restaurant, "confirm"))
        await asyncio.sleep(0.1)
        second = await dispatcher.dispatch(phone, restaurant, "confirm")

        assert (await first).reply.startswith("✅ Your complaint has been registered!")
        assert second.reply == messages.welcome("AI Pizza Palace")
        assert len(persistence.complaints) == 1
