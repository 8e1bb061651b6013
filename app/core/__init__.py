"""
Core module initialization.
Exports configuration, logging utilities and the error hierarchy.
"""

from app.core.config import get_settings, Settings, EnvironmentMode, SessionBackend
from app.core.exceptions import (
    ServiceError,
    CatalogUnavailableError,
    PersistenceError,
    RestaurantNotFoundError,
    SessionStateError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "SessionBackend",
    "ServiceError",
    "CatalogUnavailableError",
    "PersistenceError",
    "RestaurantNotFoundError",
    "SessionStateError",
]
