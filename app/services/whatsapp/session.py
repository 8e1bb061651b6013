"""
Conversation Session Model

One Session per phone number while a WhatsApp conversation is active.
Sessions and drafts are immutable pydantic models: every successful step
produces a new Session through `advance()`, and a rejected step simply
keeps the old one.

Step numbering (shared wire representation, 1 = choosing a flow):
    Order:     2 category, 3 item, 4 quantity, 5 add more, 6 order type,
               7 address, 8 name, 9 phone, 10 confirm
    Booking:   2 date/time/guests, 3 name, 4 phone, 5 notes, 6 confirm
    Feedback:  2 rating + comment, 3 name, 4 phone, 5 confirm
    Complaint: 2 issue, 3 name, 4 phone, 5 confirm

Author: Khalil Bannouri
Version: 1.0.0
"""

import datetime as dt
import uuid
from enum import Enum, IntEnum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.schemas import MenuCategoryInfo, MenuItemInfo, OrderLine, OrderTypeEnum


WELCOME_STEP = 1


class FlowType(str, Enum):
    """Which guided dialogue a session is in."""
    NONE = "none"
    ORDER = "order"
    BOOKING = "booking"
    FEEDBACK = "feedback"
    COMPLAINT = "complaint"


class OrderStep(IntEnum):
    SELECT_CATEGORY = 2
    SELECT_ITEM = 3
    QUANTITY = 4
    ADD_MORE = 5
    ORDER_TYPE = 6
    ADDRESS = 7
    CUSTOMER_NAME = 8
    CUSTOMER_PHONE = 9
    CONFIRM = 10


class BookingStep(IntEnum):
    DETAILS = 2
    CUSTOMER_NAME = 3
    CUSTOMER_PHONE = 4
    NOTES = 5
    CONFIRM = 6


class FeedbackStep(IntEnum):
    RATING = 2
    CUSTOMER_NAME = 3
    CUSTOMER_PHONE = 4
    CONFIRM = 5


class ComplaintStep(IntEnum):
    ISSUE = 2
    CUSTOMER_NAME = 3
    CUSTOMER_PHONE = 4
    CONFIRM = 5


# =============================================================================
# DRAFTS
# =============================================================================

class _Draft(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Id the confirmed entity is stored under; a retried confirm reuses it
    entity_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


class OrderDraft(_Draft):
    """
    Working order.

    `menu` is the category list last shown to the caller and `category`
    the category picked from it, so an index typed by the caller always
    refers to what they saw.
    """
    kind: Literal["order"] = "order"

    menu: tuple[MenuCategoryInfo, ...] = ()
    category: Optional[MenuCategoryInfo] = None
    selected_item: Optional[MenuItemInfo] = None
    items: tuple[OrderLine, ...] = ()
    total: float = 0.0
    order_type: Optional[OrderTypeEnum] = None
    address: Optional[str] = None

    def computed_total(self) -> float:
        return round(sum(item.price * item.quantity for item in self.items), 2)


class BookingDraft(_Draft):
    kind: Literal["booking"] = "booking"

    date: Optional[dt.date] = None
    time: Optional[str] = None
    guests: Optional[int] = None
    notes: Optional[str] = None


class FeedbackDraft(_Draft):
    kind: Literal["feedback"] = "feedback"

    rating: Optional[int] = None
    comment: Optional[str] = None


class ComplaintDraft(_Draft):
    kind: Literal["complaint"] = "complaint"

    issue: Optional[str] = None


Draft = Annotated[
    Union[OrderDraft, BookingDraft, FeedbackDraft, ComplaintDraft],
    Field(discriminator="kind"),
]


# =============================================================================
# SESSION
# =============================================================================

class Session(BaseModel):
    """
    Active conversation of one phone number with one restaurant.

    Attributes:
        phone: Caller identifier, at most one session per phone
        restaurant_id: Fixed when the session is created
        restaurant_name: Display name used in prompts
        flow_type: NONE until a flow is chosen, then fixed
        step: Cursor into the flow (1 = choosing a flow)
        draft: Flow-specific accumulator, None before a flow is chosen
        expires_at: The session is dead once now >= expires_at
    """
    model_config = ConfigDict(frozen=True)

    phone: str
    restaurant_id: str
    restaurant_name: str = ""
    flow_type: FlowType = FlowType.NONE
    step: int = WELCOME_STEP
    draft: Optional[Draft] = None
    expires_at: dt.datetime

    @classmethod
    def start(
        cls,
        phone: str,
        restaurant_id: str,
        restaurant_name: str,
        expires_at: dt.datetime,
    ) -> "Session":
        """Fresh session waiting for a flow choice."""
        return cls(
            phone=phone,
            restaurant_id=restaurant_id,
            restaurant_name=restaurant_name,
            expires_at=expires_at,
        )

    def is_expired(self, now: dt.datetime) -> bool:
        return now >= self.expires_at

    def with_expiry(self, expires_at: dt.datetime) -> "Session":
        return self.model_copy(update={"expires_at": expires_at})

    def begin_flow(self, flow_type: FlowType, draft: _Draft, step: int) -> "Session":
        """Leave the welcome step for a flow; the flow type never changes afterwards."""
        if self.flow_type != FlowType.NONE:
            raise ValueError(f"Session already in {self.flow_type.value} flow")
        return self.model_copy(update={"flow_type": flow_type, "draft": draft, "step": step})

    def advance(self, step: int, draft: Optional[_Draft] = None) -> "Session":
        """New session at `step` carrying `draft` (or the current draft)."""
        return self.model_copy(update={
            "step": step,
            "draft": draft if draft is not None else self.draft,
        })
