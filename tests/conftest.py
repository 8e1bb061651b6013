import datetime as dt

import pytest

from app.schemas import RestaurantContext
from app.services.catalog.mock import DEMO_RESTAURANT_ID, MockCatalogService
from app.services.persistence.mock import MockPersistenceService
from app.services.whatsapp.dispatcher import ConversationDispatcher
from app.services.whatsapp.store import InMemorySessionStore

START = dt.datetime(2025, 4, 1, 12, 0, tzinfo=dt.timezone.utc)


class FakeClock:
    """Settable replacement for the store's clock."""

    def __init__(self, now: dt.datetime = START):
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += dt.timedelta(**kwargs)


@pytest.fixture
def phone():
    return "+15551234567"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(ttl=dt.timedelta(minutes=30), clock=clock)


@pytest.fixture
def catalog():
    return MockCatalogService()


@pytest.fixture
def persistence():
    return MockPersistenceService()


@pytest.fixture
def dispatcher(store, catalog, persistence):
    return ConversationDispatcher.from_services(store, catalog, persistence, timeout=1.0)


@pytest.fixture
def restaurant():
    return RestaurantContext(id=DEMO_RESTAURANT_ID, name="AI Pizza Palace")


@pytest.fixture
def send(dispatcher, restaurant, phone):
    """Deliver one message from the test phone and return the DispatchResult."""

    async def _send(text: str, from_phone: str = None):
        return await dispatcher.dispatch(from_phone or phone, restaurant, text)

    return _send


@pytest.fixture
def converse(send):
    """Deliver several messages in order and return the last result."""

    async def _converse(*texts: str):
        result = None
        for text in texts:
            result = await send(text)
        return result

    return _converse
