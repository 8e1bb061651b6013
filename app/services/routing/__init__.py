"""
Routing Service Factory

Returns Mock (settings-driven) or SQL routing based on ENV_MODE.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from app.core.config import get_settings
from app.services.routing.base import BaseRoutingService, normalize_address
from app.services.routing.mock import MockRoutingService, DEMO_RESTAURANTS

logger = logging.getLogger(__name__)


@lru_cache()
def get_routing_service() -> BaseRoutingService:
    """Get the configured routing service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Routing Service: Using MockRoutingService (development mode)")
        return MockRoutingService(routes=settings.restaurant_routes_map)
    else:
        from app.services.routing.sql import SqlRoutingService

        logger.info(f"Routing Service: Using SqlRoutingService ({settings.env_mode.value} mode)")
        return SqlRoutingService()


def reset_routing_service() -> None:
    """Clear the cached service instance."""
    get_routing_service.cache_clear()


__all__ = [
    "get_routing_service",
    "reset_routing_service",
    "BaseRoutingService",
    "MockRoutingService",
    "DEMO_RESTAURANTS",
    "normalize_address",
]
