"""
SQL Routing Service

Resolves inbound addresses through the restaurant_routes table.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import RestaurantNotFoundError, ServiceError
from app.database import async_session_maker
from app.models import Restaurant, RestaurantRoute
from app.schemas import RestaurantContext
from app.services.routing.base import BaseRoutingService, normalize_address

logger = logging.getLogger(__name__)


class SqlRoutingService(BaseRoutingService):

    def __init__(self, session_factory=async_session_maker):
        self.session_factory = session_factory
        logger.info("SqlRoutingService initialized")

    @property
    def provider_name(self) -> str:
        return "sql"

    async def resolve_restaurant(self, address: str) -> RestaurantContext:
        query = (
            select(Restaurant.id, Restaurant.name)
            .join(RestaurantRoute, RestaurantRoute.restaurant_id == Restaurant.id)
            .where(RestaurantRoute.address == normalize_address(address))
        )

        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                row = result.first()
        except SQLAlchemyError as e:
            logger.error(f"Route lookup failed for {address}: {e}")
            raise ServiceError(f"Route lookup failed for {address}") from e

        if row is None:
            raise RestaurantNotFoundError(address)
        return RestaurantContext(id=row.id, name=row.name)
