"""
Mock Persistence Service Implementation

Keeps created entities in memory lists instead of the database.
Used in development mode (ENV_MODE=development) and in tests, where the
stored entities can be inspected directly.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import random
import logging
import uuid

from app.core.exceptions import PersistenceError
from app.schemas import EntityCreate, OrderCreate, BookingCreate, FeedbackCreate, ComplaintCreate
from app.services.persistence.base import BasePersistenceService, short_reference

logger = logging.getLogger(__name__)


class MockPersistenceService(BasePersistenceService):
    """
    In-memory entity storage.

    Attributes:
        orders / bookings / feedback / complaints: {entity_id: entity}
        failure_rate: Probability of simulated failure (0.0-1.0)
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency

        self.orders: dict[str, OrderCreate] = {}
        self.bookings: dict[str, BookingCreate] = {}
        self.feedback: dict[str, FeedbackCreate] = {}
        self.complaints: dict[str, ComplaintCreate] = {}

        logger.info(f"MockPersistenceService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _store(self, table: dict, entity: EntityCreate, kind: str) -> str:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

        if random.random() < self.failure_rate:
            logger.debug(f"Mock: Simulated failure storing {kind}")
            raise PersistenceError(f"Could not store {kind}")

        entity_id = entity.entity_id or uuid.uuid4().hex
        if entity_id in table:
            logger.info(f"Mock: {kind.title()} #{short_reference(entity_id)} already stored")
            return entity_id

        table[entity_id] = entity
        logger.info(f"Mock: Stored {kind} #{short_reference(entity_id)}")
        return entity_id

    async def create_order(self, order: OrderCreate) -> str:
        return await self._store(self.orders, order, "order")

    async def create_booking(self, booking: BookingCreate) -> str:
        return await self._store(self.bookings, booking, "booking")

    async def create_feedback(self, feedback: FeedbackCreate) -> str:
        return await self._store(self.feedback, feedback, "feedback")

    async def create_complaint(self, complaint: ComplaintCreate) -> str:
        return await self._store(self.complaints, complaint, "complaint")

    async def health_check(self) -> bool:
        return True
