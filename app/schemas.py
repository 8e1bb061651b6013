"""
Pydantic Schemas for Collaborator Contracts

Shapes exchanged between the WhatsApp conversation engine and its
collaborators:
- Menu returned by the catalog
- Restaurant context returned by routing
- Entities handed to persistence when a conversation is confirmed
- Inbound simulation payload and health response

Author: Khalil Bannouri
Version: 1.0.0
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class OrderTypeEnum(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class OrderStatusEnum(str, Enum):
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class BookingStatusEnum(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ComplaintStatusEnum(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


# =============================================================================
# CATALOG & ROUTING
# =============================================================================

class MenuItemInfo(BaseModel):
    """Single orderable item as shown to the caller."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza Margherita"])
    price: float = Field(..., ge=0, examples=[14.99])


class MenuCategoryInfo(BaseModel):
    """Menu category with its items, in display order."""
    model_config = ConfigDict(frozen=True)

    category: str = Field(..., min_length=1, max_length=100, examples=["Pizza"])
    items: tuple[MenuItemInfo, ...] = Field(default=())


class RestaurantContext(BaseModel):
    """The restaurant an inbound message is addressed to."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


# =============================================================================
# ENTITIES CREATED BY A CONFIRMED CONVERSATION
# =============================================================================

# Column widths of the customer fields in app.models
NAME_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 30
ADDRESS_MAX_LENGTH = 255


class CustomerInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, examples=["Jane Doe"])
    phone: str = Field(..., min_length=1, max_length=PHONE_MAX_LENGTH, examples=["555-1234"])
    address: Optional[str] = Field(None, max_length=ADDRESS_MAX_LENGTH, examples=["350 Fifth Avenue"])


class OrderLine(BaseModel):
    """Single item in an order."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza Margherita"])
    price: float = Field(..., ge=0, examples=[14.99])
    quantity: int = Field(..., ge=1, le=99, examples=[2])

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


class EntityCreate(BaseModel):
    """Fields shared by everything a confirmed conversation stores."""
    entity_id: Optional[str] = Field(
        None,
        max_length=32,
        description="Id to store under; storing the same id twice keeps one entity",
    )
    restaurant_id: str
    customer: CustomerInfo


class OrderCreate(EntityCreate):
    items: list[OrderLine] = Field(..., min_length=1)
    order_type: OrderTypeEnum
    total: float = Field(..., ge=0)
    status: OrderStatusEnum = OrderStatusEnum.NEW


class BookingCreate(EntityCreate):
    date: dt.date = Field(..., examples=["2025-04-20"])
    time: str = Field(..., pattern=r"^\d{1,2}:\d{2}$", examples=["19:30"])
    guests: int = Field(..., ge=1, examples=[4])
    notes: str = Field(default="")
    status: BookingStatusEnum = BookingStatusEnum.PENDING


class FeedbackCreate(EntityCreate):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="")


class ComplaintCreate(EntityCreate):
    issue: str = Field(..., min_length=1)
    status: ComplaintStatusEnum = ComplaintStatusEnum.NEW


# =============================================================================
# HTTP SCHEMAS
# =============================================================================

class SimulatedMessage(BaseModel):
    """JSON stand-in for an inbound WhatsApp message (development only)."""
    from_phone: str = Field(..., min_length=1, examples=["whatsapp:+15551234567"])
    to_route: str = Field(..., min_length=1, examples=["whatsapp:+14155238886"])
    body: str = Field(default="", examples=["hi"])


class SimulatedReply(BaseModel):
    reply: str
    flow_type: Optional[str] = None
    step: Optional[int] = None


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""
    status: str
    session_store: str
    catalog: str
    persistence: str
    active_sessions: int
    timestamp: dt.datetime
