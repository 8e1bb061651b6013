"""
SQLAlchemy Database Models

Restaurants with their menus and WhatsApp routing addresses, plus the
entities a completed conversation produces:
- Orders (delivery or pickup)
- Table bookings
- Feedback
- Complaints

Author: Khalil Bannouri
Version: 1.0.0
"""

import enum
import uuid

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Date,
    DateTime,
    Text,
    Enum,
    Boolean,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


def new_entity_id() -> str:
    """Generate a 32-character hex identifier."""
    return uuid.uuid4().hex


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderType(str, enum.Enum):
    """Order type - Delivery or Pickup."""
    DELIVERY = "delivery"
    PICKUP = "pickup"


class BookingStatus(str, enum.Enum):
    """Table booking workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ComplaintStatus(str, enum.Enum):
    """Complaint handling workflow."""
    NEW = "new"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


# =============================================================================
# RESTAURANT & MENU
# =============================================================================

class Restaurant(Base):
    """A restaurant reachable through one or more WhatsApp numbers."""
    __tablename__ = "restaurants"

    id = Column(String(32), primary_key=True, default=new_entity_id)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    categories = relationship(
        "MenuCategory",
        back_populates="restaurant",
        order_by="MenuCategory.position",
        cascade="all, delete-orphan",
    )
    routes = relationship(
        "RestaurantRoute",
        back_populates="restaurant",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Restaurant {self.id} - {self.name}>"


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    restaurant = relationship("Restaurant", back_populates="categories")
    items = relationship(
        "MenuItem",
        back_populates="category",
        order_by="MenuItem.position",
        cascade="all, delete-orphan",
    )


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("menu_categories.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    available = Column(Boolean, default=True, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    category = relationship("MenuCategory", back_populates="items")


class RestaurantRoute(Base):
    """
    Maps an inbound routing address (the WhatsApp number a customer
    writes to) to exactly one restaurant.
    """
    __tablename__ = "restaurant_routes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(50), nullable=False, unique=True, index=True)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False)

    restaurant = relationship("Restaurant", back_populates="routes")


# =============================================================================
# CONVERSATION OUTCOMES
# =============================================================================

class Order(Base):
    """An order placed through the WhatsApp ordering flow."""
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_entity_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False, index=True)

    # Customer
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(30), nullable=False, index=True)
    customer_address = Column(String(255), nullable=True)  # Delivery only

    # Order details
    items = Column(Text, nullable=False)  # JSON string of ordered items
    order_type = Column(Enum(OrderType), nullable=False)
    total = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.NEW,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Order #{self.id[-6:]} - {self.order_type.value} - {self.customer_name} - {self.status.value}>"


class Booking(Base):
    """A table reservation request."""
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=new_entity_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False, index=True)

    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(30), nullable=False)
    customer_email = Column(String(255), nullable=True)

    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # H:MM or HH:MM
    guests = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    table_number = Column(String(10), nullable=True)
    status = Column(
        Enum(BookingStatus),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Booking #{self.id[-6:]} - {self.date} {self.time} x{self.guests}>"


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(String(32), primary_key=True, default=new_entity_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False, index=True)

    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(30), nullable=False)

    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(String(32), primary_key=True, default=new_entity_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False, index=True)

    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(30), nullable=False)

    issue = Column(Text, nullable=False)
    resolution = Column(Text, nullable=True)
    status = Column(
        Enum(ComplaintStatus, values_callable=lambda e: [m.value for m in e]),
        default=ComplaintStatus.NEW,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Complaint #{self.id[-6:]} - {self.status.value}>"
