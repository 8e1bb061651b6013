"""
Catalog Service Factory

Provides a single entry point for obtaining a catalog service instance.
Automatically selects Mock or SQL based on ENV_MODE configuration.

Usage:
    from app.services.catalog import get_catalog_service

    catalog = get_catalog_service()
    menu = await catalog.get_menu(restaurant_id)

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from app.core.config import get_settings
from app.services.catalog.base import BaseCatalogService
from app.services.catalog.mock import MockCatalogService, DEMO_MENU, DEMO_RESTAURANT_ID

logger = logging.getLogger(__name__)


@lru_cache()
def get_catalog_service() -> BaseCatalogService:
    """
    Get the configured catalog service instance.

    Returns:
        BaseCatalogService: MockCatalogService in development,
        SqlCatalogService otherwise
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Catalog Service: Using MockCatalogService (development mode)")
        return MockCatalogService(min_latency=0.05, max_latency=0.2)
    else:
        from app.services.catalog.sql import SqlCatalogService

        logger.info(
            f"Catalog Service: Using SqlCatalogService "
            f"({settings.env_mode.value} mode)"
        )
        return SqlCatalogService()


def reset_catalog_service() -> None:
    """
    Clear the cached catalog service instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_catalog_service.cache_clear()
    logger.debug("Catalog service cache cleared")


__all__ = [
    "get_catalog_service",
    "reset_catalog_service",
    "BaseCatalogService",
    "MockCatalogService",
    "DEMO_MENU",
    "DEMO_RESTAURANT_ID",
]
