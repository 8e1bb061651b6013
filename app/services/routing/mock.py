"""
Mock Routing Service

Resolves addresses from the RESTAURANT_ROUTES setting against a small
in-memory restaurant directory.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from app.core.exceptions import RestaurantNotFoundError
from app.schemas import RestaurantContext
from app.services.routing.base import BaseRoutingService, normalize_address

logger = logging.getLogger(__name__)

DEMO_RESTAURANTS = {
    "demo-restaurant": "AI Pizza Palace",
}


class MockRoutingService(BaseRoutingService):
    """
    In-memory routing table.

    Attributes:
        routes: {normalized address: restaurant_id}
        restaurants: {restaurant_id: display name}
    """

    def __init__(
        self,
        routes: dict[str, str],
        restaurants: Optional[dict[str, str]] = None,
    ):
        self.routes = {normalize_address(a): r for a, r in routes.items()}
        self.restaurants = restaurants if restaurants is not None else dict(DEMO_RESTAURANTS)
        logger.info(f"MockRoutingService initialized (routes={len(self.routes)})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def resolve_restaurant(self, address: str) -> RestaurantContext:
        restaurant_id = self.routes.get(normalize_address(address))
        if restaurant_id is None or restaurant_id not in self.restaurants:
            raise RestaurantNotFoundError(address)
        return RestaurantContext(id=restaurant_id, name=self.restaurants[restaurant_id])
