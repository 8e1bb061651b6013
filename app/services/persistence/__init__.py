"""
Persistence Service Factory

Returns Mock or SQL persistence based on ENV_MODE.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from app.core.config import get_settings
from app.services.persistence.base import BasePersistenceService, short_reference
from app.services.persistence.mock import MockPersistenceService

logger = logging.getLogger(__name__)


@lru_cache()
def get_persistence_service() -> BasePersistenceService:
    """Get the configured persistence service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Persistence Service: Using MockPersistenceService (development mode)")
        return MockPersistenceService(min_latency=0.05, max_latency=0.2)
    else:
        from app.services.persistence.sql import SqlPersistenceService

        logger.info(f"Persistence Service: Using SqlPersistenceService ({settings.env_mode.value} mode)")
        return SqlPersistenceService()


def reset_persistence_service() -> None:
    """Clear the cached service instance."""
    get_persistence_service.cache_clear()


__all__ = [
    "get_persistence_service",
    "reset_persistence_service",
    "BasePersistenceService",
    "MockPersistenceService",
    "short_reference",
]
