"""
Routing Service Abstract Base Class

Resolves the address an inbound WhatsApp message was sent to (the
restaurant's WhatsApp number) into the restaurant that owns it.
An unmapped address is a hard failure, never a default restaurant.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod

from app.schemas import RestaurantContext


def normalize_address(address: str) -> str:
    """Strip the channel prefix and whitespace: 'whatsapp:+1 555' -> '+1555'."""
    address = (address or "").strip()
    if address.lower().startswith("whatsapp:"):
        address = address[len("whatsapp:"):]
    return address.replace(" ", "")


class BaseRoutingService(ABC):
    """Abstract base class for address -> restaurant resolution."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    async def resolve_restaurant(self, address: str) -> RestaurantContext:
        """
        Find the restaurant an inbound message is addressed to.

        Args:
            address: Inbound routing address (e.g. "whatsapp:+14155238886")

        Returns:
            RestaurantContext: id and display name of the restaurant

        Raises:
            RestaurantNotFoundError: No restaurant is mapped to the address
        """
        pass
