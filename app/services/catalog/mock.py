"""
Mock Catalog Service Implementation

Serves an in-memory menu without touching the database.
Used in development mode (ENV_MODE=development) and in tests.

Behavior:
    - Ships the demo restaurant's menu out of the box
    - Simulates network latency (configurable, 0 disables it)
    - Optional random failure rate for testing error handling

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import random
import logging
from typing import Optional

from app.core.exceptions import CatalogUnavailableError
from app.schemas import MenuCategoryInfo, MenuItemInfo
from app.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)


DEMO_RESTAURANT_ID = "demo-restaurant"

DEMO_MENU = [
    MenuCategoryInfo(category="Pizza", items=(
        MenuItemInfo(name="Pizza Margherita", price=14.99),
        MenuItemInfo(name="Pepperoni Pizza", price=16.99),
        MenuItemInfo(name="Veggie Supreme Pizza", price=15.99),
        MenuItemInfo(name="Hawaiian Pizza", price=16.99),
    )),
    MenuCategoryInfo(category="Pasta", items=(
        MenuItemInfo(name="Pasta Carbonara", price=13.99),
        MenuItemInfo(name="Pasta Bolognese", price=12.99),
        MenuItemInfo(name="Chicken Alfredo", price=14.99),
    )),
    MenuCategoryInfo(category="Sides", items=(
        MenuItemInfo(name="Garlic Bread", price=5.99),
        MenuItemInfo(name="Mozzarella Sticks", price=7.99),
        MenuItemInfo(name="Chicken Wings (10pc)", price=12.99),
    )),
    MenuCategoryInfo(category="Desserts", items=(
        MenuItemInfo(name="Tiramisu", price=7.99),
        MenuItemInfo(name="New York Cheesecake", price=6.99),
    )),
    MenuCategoryInfo(category="Drinks", items=(
        MenuItemInfo(name="Coca-Cola", price=2.99),
        MenuItemInfo(name="Sprite", price=2.99),
        MenuItemInfo(name="Bottled Water", price=1.99),
        MenuItemInfo(name="Iced Tea", price=2.49),
    )),
]


class MockCatalogService(BaseCatalogService):
    """
    Mock implementation of the catalog service.

    Attributes:
        menus: {restaurant_id: [MenuCategoryInfo, ...]}
        failure_rate: Probability of simulated failure (0.0-1.0)
        min_latency: Minimum response time in seconds
        max_latency: Maximum response time in seconds

    Example:
        >>> catalog = MockCatalogService(min_latency=0, max_latency=0)
        >>> menu = await catalog.get_menu("demo-restaurant")
        >>> menu[0].category
        'Pizza'
    """

    def __init__(
        self,
        menus: Optional[dict[str, list[MenuCategoryInfo]]] = None,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.menus = menus if menus is not None else {DEMO_RESTAURANT_ID: list(DEMO_MENU)}
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency

        logger.info(
            f"MockCatalogService initialized "
            f"(restaurants={len(self.menus)}, failure_rate={failure_rate:.0%})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return random.random() < self.failure_rate

    def set_menu(self, restaurant_id: str, menu: list[MenuCategoryInfo]) -> None:
        """Replace the menu of a restaurant."""
        self.menus[restaurant_id] = list(menu)

    async def get_menu(self, restaurant_id: str) -> list[MenuCategoryInfo]:
        """Return the in-memory menu, simulating latency and failures."""
        await self._simulate_latency()

        if self._should_fail():
            logger.debug("Mock: Simulated catalog failure")
            raise CatalogUnavailableError("Catalog temporarily unavailable")

        menu = self.menus.get(restaurant_id, [])
        logger.debug(f"Mock: Menu for {restaurant_id} has {len(menu)} categories")
        return list(menu)

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        return True
