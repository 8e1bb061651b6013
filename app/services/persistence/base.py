"""
Persistence Service Abstract Base Class

Defines the interface for storing the entities a confirmed WhatsApp
conversation produces. Each create method stores exactly one entity and
returns its identifier. An entity whose entity_id is already stored is
not stored again: the call returns that id, so a confirm retried after
a timed-out commit cannot create a duplicate.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod

from app.schemas import OrderCreate, BookingCreate, FeedbackCreate, ComplaintCreate


def short_reference(entity_id: str) -> str:
    """Human-readable reference for an entity id (its last 6 characters)."""
    return entity_id[-6:]


class BasePersistenceService(ABC):
    """Abstract base class for entity storage."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def create_order(self, order: OrderCreate) -> str:
        """
        Store a confirmed order.

        Raises:
            PersistenceError: The order could not be stored
        """
        pass

    @abstractmethod
    async def create_booking(self, booking: BookingCreate) -> str:
        """Store a confirmed table booking."""
        pass

    @abstractmethod
    async def create_feedback(self, feedback: FeedbackCreate) -> str:
        """Store submitted feedback."""
        pass

    @abstractmethod
    async def create_complaint(self, complaint: ComplaintCreate) -> str:
        """Store a registered complaint."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check storage connectivity."""
        pass
