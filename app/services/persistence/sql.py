"""
SQL Persistence Service

Production storage writing orders, bookings, feedback and complaints
to PostgreSQL. Each create call runs in its own transaction.

Author: Khalil Bannouri
Version: 1.0.0
"""

import json
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import PersistenceError
from app.database import async_session_maker, ping_database, Base
from app.models import (
    new_entity_id,
    Order,
    OrderStatus,
    OrderType,
    Booking,
    BookingStatus,
    Feedback,
    Complaint,
    ComplaintStatus,
)
from app.schemas import EntityCreate, OrderCreate, BookingCreate, FeedbackCreate, ComplaintCreate
from app.services.persistence.base import BasePersistenceService, short_reference

logger = logging.getLogger(__name__)


class SqlPersistenceService(BasePersistenceService):
    """Storage backed by the orders / bookings / feedback / complaints tables."""

    def __init__(self, session_factory=async_session_maker):
        self.session_factory = session_factory
        logger.info("SqlPersistenceService initialized")

    @property
    def provider_name(self) -> str:
        return "sql"

    async def _add(self, row: Base, entity: EntityCreate, kind: str) -> str:
        entity_id = row.id = entity.entity_id or new_entity_id()

        try:
            async with self.session_factory() as db:
                db.add(row)
                try:
                    await db.commit()
                except IntegrityError:
                    await db.rollback()
                    # Same id already stored by an earlier attempt
                    if await db.get(type(row), entity_id) is None:
                        raise
                    logger.info(f"{kind.title()} #{short_reference(entity_id)} already stored")
                    return entity_id
                await db.refresh(row)
        except SQLAlchemyError as e:
            logger.exception(f"Error storing {kind}: {e}")
            raise PersistenceError(f"Could not store {kind}") from e

        logger.info(f"{kind.title()} #{short_reference(row.id)} stored")
        return row.id

    async def create_order(self, order: OrderCreate) -> str:
        items_json = json.dumps([
            {
                "name": item.name,
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.items
        ])

        new_order = Order(
            restaurant_id=order.restaurant_id,
            customer_name=order.customer.name,
            customer_phone=order.customer.phone,
            customer_address=order.customer.address,
            items=items_json,
            order_type=OrderType(order.order_type.value),
            total=order.total,
            status=OrderStatus(order.status.value),
        )
        return await self._add(new_order, order, "order")

    async def create_booking(self, booking: BookingCreate) -> str:
        new_booking = Booking(
            restaurant_id=booking.restaurant_id,
            customer_name=booking.customer.name,
            customer_phone=booking.customer.phone,
            date=booking.date,
            time=booking.time,
            guests=booking.guests,
            notes=booking.notes,
            status=BookingStatus(booking.status.value),
        )
        return await self._add(new_booking, booking, "booking")

    async def create_feedback(self, feedback: FeedbackCreate) -> str:
        new_feedback = Feedback(
            restaurant_id=feedback.restaurant_id,
            customer_name=feedback.customer.name,
            customer_phone=feedback.customer.phone,
            rating=feedback.rating,
            comment=feedback.comment,
        )
        return await self._add(new_feedback, feedback, "feedback")

    async def create_complaint(self, complaint: ComplaintCreate) -> str:
        new_complaint = Complaint(
            restaurant_id=complaint.restaurant_id,
            customer_name=complaint.customer.name,
            customer_phone=complaint.customer.phone,
            issue=complaint.issue,
            status=ComplaintStatus(complaint.status.value),
        )
        return await self._add(new_complaint, complaint, "complaint")

    async def health_check(self) -> bool:
        return await ping_database(self.session_factory)
