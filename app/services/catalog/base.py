"""
Catalog Service Abstract Base Class

Defines the interface contract for menu lookups. The WhatsApp ordering
flow reads a restaurant's menu when it lists categories (on entering the
order flow and on every "add more items" loop).

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod

from app.schemas import MenuCategoryInfo


class BaseCatalogService(ABC):
    """
    Abstract base class for menu catalogs.

    Example:
        >>> catalog = get_catalog_service()
        >>> menu = await catalog.get_menu("demo-restaurant")
        >>> [c.category for c in menu]
        ['Pizza', 'Pasta', ...]
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the catalog provider.

        Returns:
            str: Provider name (e.g., "mock", "sql")
        """
        pass

    @abstractmethod
    async def get_menu(self, restaurant_id: str) -> list[MenuCategoryInfo]:
        """
        Load the menu of a restaurant.

        Args:
            restaurant_id: Restaurant whose menu is requested

        Returns:
            Categories in display order, each with its available items
            in display order. Empty when the restaurant has no menu.

        Raises:
            CatalogUnavailableError: The menu could not be loaded
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the catalog backend.

        Returns:
            bool: True if service is operational
        """
        pass
