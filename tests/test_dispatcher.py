import asyncio

import pytest

from app.schemas import RestaurantContext
from app.services.catalog.mock import MockCatalogService
from app.services.persistence.mock import MockPersistenceService
from app.services.whatsapp import messages
from app.services.whatsapp.dispatcher import ConversationDispatcher
from app.services.whatsapp.session import FlowType, OrderDraft, OrderStep, Session


class SlowAckPersistence(MockPersistenceService):
    """Stores complaints at once but answers only after `delay` seconds."""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def create_complaint(self, complaint):
        entity_id = await super().create_complaint(complaint)
        await asyncio.sleep(self.delay)
        return entity_id


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_hi_without_session_welcomes(self, send, store, phone):
        result = await send("hi")

        assert "Welcome to AI Pizza Palace" in result.reply
        for option in ("*order*", "*book*", "*feedback*", "*complaint*"):
            assert option in result.reply

        session = await store.get(phone)
        assert session.step == 1
        assert session.flow_type == FlowType.NONE
        assert session.restaurant_id == "demo-restaurant"

    @pytest.mark.asyncio
    async def test_any_first_message_welcomes(self, send, store, phone):
        result = await send("what's up")

        assert result.reply == messages.welcome("AI Pizza Palace")
        assert await store.get(phone) is not None

    @pytest.mark.asyncio
    async def test_unrecognized_choice_gets_fallback(self, converse, store, phone):
        result = await converse("hi", "pizza please")

        assert result.reply == messages.FALLBACK
        session = await store.get(phone)
        assert session.step == 1
        assert session.flow_type == FlowType.NONE


class TestFlowSelection:
    @pytest.mark.asyncio
    async def test_order_lists_categories(self, converse, store, phone):
        result = await converse("hi", "order")

        assert "Menu Categories" in result.reply
        assert "1. Pizza" in result.reply
        session = await store.get(phone)
        assert session.flow_type == FlowType.ORDER
        assert session.step == 2

    @pytest.mark.asyncio
    async def test_choice_by_number(self, converse, store, phone):
        result = await converse("hi", "2")

        assert result.reply == messages.BOOKING_START
        assert (await store.get(phone)).flow_type == FlowType.BOOKING


class TestReset:
    @pytest.mark.asyncio
    async def test_greeting_mid_flow_starts_over(self, converse, store, phone):
        result = await converse("hi", "order", "1", "menu")

        assert result.reply == messages.welcome("AI Pizza Palace")
        session = await store.get(phone)
        assert session.flow_type == FlowType.NONE
        assert session.draft is None

    @pytest.mark.asyncio
    async def test_bare_order_mid_flow_starts_over(self, converse, store, phone):
        await converse("hi", "book")

        result = await converse("order")

        assert result.reply == messages.welcome("AI Pizza Palace")
        assert (await store.get(phone)).step == 1

    @pytest.mark.asyncio
    async def test_word_containing_greeting_does_not_reset(self, converse, store, phone):
        result = await converse("hi", "order", "history")

        assert result.reply.startswith("Invalid selection")
        session = await store.get(phone)
        assert session.flow_type == FlowType.ORDER
        assert session.step == 2

    @pytest.mark.asyncio
    async def test_other_restaurant_starts_fresh_session(self, dispatcher, converse, store, phone):
        await converse("hi", "order")
        other = RestaurantContext(id="other", name="Sushi Bar")

        result = await dispatcher.dispatch(phone, other, "1")

        assert result.reply == messages.welcome("Sushi Bar")
        session = await store.get(phone)
        assert session.restaurant_id == "other"
        assert session.flow_type == FlowType.NONE

    @pytest.mark.asyncio
    async def test_unknown_step_resets_to_welcome(self, send, store, restaurant, phone):
        broken = Session.start(phone, restaurant.id, restaurant.name, store.new_expiry())
        broken = broken.model_copy(update={
            "flow_type": FlowType.ORDER,
            "step": 42,
            "draft": OrderDraft(),
        })
        await store.put(phone, broken)

        result = await send("1")

        assert result.reply == messages.welcome("AI Pizza Palace")
        assert (await store.get(phone)).flow_type == FlowType.NONE


class TestCollaboratorFailures:
    @pytest.mark.asyncio
    async def test_catalog_failure_keeps_session(self, converse, catalog, store, phone):
        await converse("hi")
        catalog.failure_rate = 1.0

        result = await converse("order")

        assert result.reply == messages.APOLOGY
        session = await store.get(phone)
        assert session.flow_type == FlowType.NONE
        assert session.step == 1

        catalog.failure_rate = 0.0
        result = await converse("order")
        assert "Menu Categories" in result.reply

    @pytest.mark.asyncio
    async def test_catalog_timeout_is_an_apology(self, store, persistence, restaurant, phone):
        slow = MockCatalogService(min_latency=0.5, max_latency=0.5)
        dispatcher = ConversationDispatcher.from_services(store, slow, persistence, timeout=0.01)

        await dispatcher.dispatch(phone, restaurant, "hi")
        result = await dispatcher.dispatch(phone, restaurant, "order")

        assert result.reply == messages.APOLOGY
        assert (await store.get(phone)).step == 1

    @pytest.mark.asyncio
    async def test_commit_failure_allows_retry(self, converse, persistence, store, phone):
        await converse("hi", "complaint", "Cold pizza", "Jane Doe", "555-1234")
        persistence.failure_rate = 1.0

        result = await converse("confirm")

        assert result.reply == messages.APOLOGY
        assert persistence.complaints == {}
        assert (await store.get(phone)).step == 5

        persistence.failure_rate = 0.0
        result = await converse("confirm")

        assert result.reply.startswith("✅ Your complaint has been registered!")
        assert len(persistence.complaints) == 1
        assert await store.get(phone) is None


    @pytest.mark.asyncio
    async def test_retry_after_timed_out_commit_stores_once(self, store, catalog, restaurant, phone):
        persistence = SlowAckPersistence(delay=0.5)
        dispatcher = ConversationDispatcher.from_services(store, catalog, persistence, timeout=0.05)
        for text in ("hi", "complaint", "Cold pizza", "Jane Doe", "555-1234"):
            await dispatcher.dispatch(phone, restaurant, text)

        result = await dispatcher.dispatch(phone, restaurant, "confirm")

        assert result.reply == messages.APOLOGY
        assert len(persistence.complaints) == 1
        assert (await store.get(phone)).step == 5

        persistence.delay = 0
        result = await dispatcher.dispatch(phone, restaurant, "confirm")

        complaint_id = next(iter(persistence.complaints))
        assert result.reply == messages.COMPLAINT_PLACED.format(reference=complaint_id[-6:])
        assert len(persistence.complaints) == 1
        assert await store.get(phone) is None


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_duplicate_message_is_applied_once(self, converse, send, store, phone):
        await converse("hi", "order", "1", "1")

        _, second = await asyncio.gather(send("2"), send("2"))

        session = await store.get(phone)
        assert session.step == OrderStep.ADD_MORE
        assert len(session.draft.items) == 1
        assert second.reply == messages.ADD_MORE_INVALID

    @pytest.mark.asyncio
    async def test_many_phones_in_parallel(self, dispatcher, restaurant, persistence, store):
        async def book(n):
            phone = f"+1555000{n:04d}"
            for text in ("hi", "book", "2025-04-20 19:30 2", f"Guest {n}", phone, "none", "confirm"):
                result = await dispatcher.dispatch(phone, restaurant, text)
            return result

        results = await asyncio.gather(*(book(n) for n in range(20)))

        assert all(r.reply.startswith("✅ Your reservation") for r in results)
        assert len(persistence.bookings) == 20
        assert {b.customer.name for b in persistence.bookings.values()} == {
            f"Guest {n}" for n in range(20)
        }
        assert await store.count() == 0
