"""
Message Parsers

Stateless extraction of structured values from raw WhatsApp text.
Every parser returns None for input it does not accept; nothing is
coerced (no "1.5" -> 1, no "two" -> 2).
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.schemas import OrderTypeEnum
from app.services.whatsapp.session import FlowType


MAX_QUANTITY = 99
MAX_GUESTS = 99

RESET_KEYWORDS = {"hi", "hello", "hey", "start", "menu"}

FLOW_KEYWORDS = {
    "order": FlowType.ORDER,
    "book": FlowType.BOOKING,
    "feedback": FlowType.FEEDBACK,
    "complaint": FlowType.COMPLAINT,
    # Position in the welcome list
    "1": FlowType.ORDER,
    "2": FlowType.BOOKING,
    "3": FlowType.FEEDBACK,
    "4": FlowType.COMPLAINT,
}

_INTEGER_RE = re.compile(r"^\d+$")
_BOOKING_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})\s+(\d{1,2}):(\d{2})\s+(\d+)$")
_FEEDBACK_RE = re.compile(r"^([1-5])\s+(.+)$", re.DOTALL)


@dataclass(frozen=True)
class BookingRequest:
    date: date
    time: str
    guests: int


@dataclass(frozen=True)
class FeedbackEntry:
    rating: int
    comment: str


def _keyword(text: str) -> str:
    return (text or "").strip().rstrip("!.").strip().lower()


def parse_free_text(text: str) -> Optional[str]:
    """Trimmed text, or None when empty or whitespace-only."""
    value = (text or "").strip()
    return value or None


def parse_positive_int(text: str, maximum: Optional[int] = None) -> Optional[int]:
    value = (text or "").strip()
    if not _INTEGER_RE.match(value):
        return None
    number = int(value)
    if number < 1 or (maximum is not None and number > maximum):
        return None
    return number


def parse_index(text: str, size: int) -> Optional[int]:
    """
    Parse a 1-based choice from a list of `size` entries.

    Returns:
        Zero-based index, or None when not a number in 1..size
    """
    number = parse_positive_int(text, maximum=size)
    return None if number is None else number - 1


def parse_quantity(text: str) -> Optional[int]:
    return parse_positive_int(text, maximum=MAX_QUANTITY)


def parse_booking_request(text: str) -> Optional[BookingRequest]:
    """
    Parse 'YYYY-MM-DD H:MM GUESTS' (e.g. '2025-04-20 19:30 4').

    The date must exist in the calendar, the time must be a real clock
    time and guests must be 1..MAX_GUESTS.
    """
    match = _BOOKING_RE.match((text or "").strip())
    if not match:
        return None

    day, hour, minute, guests = match.groups()
    try:
        booking_date = date.fromisoformat(day)
    except ValueError:
        return None
    if int(hour) > 23 or int(minute) > 59:
        return None

    guest_count = parse_positive_int(guests, maximum=MAX_GUESTS)
    if guest_count is None:
        return None

    return BookingRequest(date=booking_date, time=f"{hour}:{minute}", guests=guest_count)


def parse_feedback(text: str) -> Optional[FeedbackEntry]:
    """Parse 'RATING COMMENT' where rating is a single digit 1-5."""
    match = _FEEDBACK_RE.match((text or "").strip())
    if not match:
        return None
    comment = match.group(2).strip()
    if not comment:
        return None
    return FeedbackEntry(rating=int(match.group(1)), comment=comment)


def parse_order_type(text: str) -> Optional[OrderTypeEnum]:
    value = _keyword(text)
    if value in ("1", "delivery"):
        return OrderTypeEnum.DELIVERY
    if value in ("2", "pickup"):
        return OrderTypeEnum.PICKUP
    return None


def parse_flow_choice(text: str) -> Optional[FlowType]:
    return FLOW_KEYWORDS.get(_keyword(text))


def is_reset_keyword(text: str, in_flow: bool) -> bool:
    """
    Greetings restart the conversation. A bare 'order' restarts it only
    while a flow is already running; at the welcome step it picks the
    order flow instead.
    """
    value = _keyword(text)
    return value in RESET_KEYWORDS or (in_flow and value == "order")


def is_yes(text: str) -> bool:
    return _keyword(text) in ("yes", "y")


def is_no(text: str) -> bool:
    return _keyword(text) in ("no", "n")


def is_confirm(text: str) -> bool:
    return _keyword(text) in ("confirm", "yes")


def is_cancel(text: str) -> bool:
    return _keyword(text) in ("cancel", "no")


def is_none_token(text: str) -> bool:
    return _keyword(text) == "none"
