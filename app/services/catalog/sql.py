"""
SQL Catalog Service

Production catalog reading menus from PostgreSQL through the
SQLAlchemy async session factory.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from app.core.exceptions import CatalogUnavailableError
from app.database import async_session_maker, ping_database
from app.models import MenuCategory
from app.schemas import MenuCategoryInfo, MenuItemInfo
from app.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)


class SqlCatalogService(BaseCatalogService):
    """Catalog backed by the menu_categories / menu_items tables."""

    def __init__(self, session_factory=async_session_maker):
        self.session_factory = session_factory
        logger.info("SqlCatalogService initialized")

    @property
    def provider_name(self) -> str:
        return "sql"

    async def get_menu(self, restaurant_id: str) -> list[MenuCategoryInfo]:
        """Load categories and available items in display order."""
        query = (
            select(MenuCategory)
            .where(MenuCategory.restaurant_id == restaurant_id)
            .options(selectinload(MenuCategory.items))
            .order_by(MenuCategory.position, MenuCategory.id)
        )

        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                categories = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Menu lookup failed for {restaurant_id}: {e}")
            raise CatalogUnavailableError(str(e)) from e

        return [
            MenuCategoryInfo(
                category=category.name,
                items=tuple(
                    MenuItemInfo(name=item.name, price=item.price)
                    for item in category.items
                    if item.available
                ),
            )
            for category in categories
        ]

    async def health_check(self) -> bool:
        return await ping_database(self.session_factory)
