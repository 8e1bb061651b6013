"""
WhatsApp Reply Texts

Prompts, corrective messages and rendered summaries sent back to the
caller. WhatsApp renders *text* as bold.
"""

from typing import Iterable

from app.core.config import get_settings
from app.schemas import MenuCategoryInfo, OrderLine, OrderTypeEnum


# =============================================================================
# GENERAL
# =============================================================================

WELCOME = (
    "👋 Welcome to {restaurant}!\n\n"
    "How can we help you today?\n\n"
    "1. 🍔 Place Order - reply *order*\n"
    "2. 📅 Book Table - reply *book*\n"
    "3. ⭐ Leave Feedback - reply *feedback*\n"
    "4. ❗ Register Complaint - reply *complaint*"
)

FALLBACK = (
    "I'm not sure what you're asking for. "
    "Reply with *order*, *book*, *feedback* or *complaint*, "
    "or type 'menu' to start over."
)

APOLOGY = "Sorry, we couldn't process that right now. Please send the same reply again in a moment."
SYSTEM_ERROR = "Sorry, something went wrong. Please try again later."
RESTAURANT_NOT_FOUND = "Restaurant not found. Please try again later."
MENU_EMPTY = "Sorry, our menu is not available right now. Type 'menu' to start over."

ASK_NAME = "Please provide your name."
ASK_PHONE = "Please provide your phone number."
EMPTY_TEXT = "Sorry, I didn't get that. {prompt}"
TEXT_TOO_LONG = "Sorry, that is too long (at most {maximum} characters). {prompt}"

# =============================================================================
# ORDER
# =============================================================================

INVALID_CATEGORY = "Invalid selection. Please enter a category number between 1 and {count}."
INVALID_ITEM = "Invalid selection. Please enter an item number between 1 and {count}."
ITEM_SELECTED = "You selected: {name} - {price}\n\nHow many would you like to order?"
INVALID_QUANTITY = "Please enter a valid quantity (a whole number from 1 to {maximum})."
ADD_MORE = (
    "Added {quantity} x {name} to your order.\n\n"
    "Would you like to add more items to your order?\n\n"
    "Reply with 'yes' to add more items or 'no' to proceed to checkout."
)
ADD_MORE_INVALID = "Please reply with 'yes' to add more items or 'no' to proceed to checkout."
INVALID_ORDER_TYPE = "Invalid selection. Please reply with '1' for Delivery or '2' for Pickup."
ASK_ADDRESS = "Please provide your delivery address."
ASK_ORDER_NAME = "Please provide your name for the order."
ASK_PICKUP_NAME = "Please provide your name for the pickup order."
ASK_ORDER_PHONE = "Please provide your phone number for order updates."
ORDER_CONFIRM_INVALID = "Please reply with 'confirm' to place your order or 'cancel' to start over."
ORDER_PLACED = (
    "✅ Your order has been confirmed! Order #{reference}\n\n"
    "You will receive updates on your order status. Thank you for ordering with us!"
)
ORDER_CANCELLED = "Your order has been cancelled. Type 'menu' to start over."

# =============================================================================
# BOOKING
# =============================================================================

BOOKING_START = (
    "📅 *Table Booking*\n\n"
    "Please provide the following details:\n"
    "- Date (YYYY-MM-DD)\n"
    "- Time (HH:MM)\n"
    "- Number of guests\n\n"
    "Example: 2025-04-20 19:30 4"
)
INVALID_BOOKING = (
    "Invalid format. Please provide date, time and number of guests "
    "in the format: YYYY-MM-DD HH:MM X\n\n"
    "Example: 2025-04-20 19:30 4"
)
ASK_BOOKING_NAME = "Please provide your name for the reservation."
ASK_BOOKING_PHONE = "Please provide your phone number for reservation updates."
ASK_NOTES = "Do you have any special requests or notes for your reservation? (Type 'none' if none)"
BOOKING_CONFIRM_INVALID = "Please reply with 'confirm' to make your reservation or 'cancel' to start over."
BOOKING_PLACED = (
    "✅ Your reservation has been confirmed! Booking #{reference}\n\n"
    "We look forward to seeing you on {date} at {time}. Thank you for choosing us!"
)
BOOKING_CANCELLED = "Your reservation has been cancelled. Type 'menu' to start over."

# =============================================================================
# FEEDBACK
# =============================================================================

FEEDBACK_START = (
    "⭐ *Feedback*\n\n"
    "Please rate your experience from 1-5 stars and add any comments.\n\n"
    "Example: 5 The food was amazing and service was excellent!"
)
INVALID_FEEDBACK = (
    "Invalid format. Please provide your rating (1-5) followed by your comments.\n\n"
    "Example: 5 The food was amazing and service was excellent!"
)
FEEDBACK_CONFIRM_INVALID = "Please reply with 'confirm' to submit your feedback or 'cancel' to start over."
FEEDBACK_PLACED = "✅ Your feedback has been submitted! Thank you for sharing your experience with us."
FEEDBACK_CANCELLED = "Your feedback has been cancelled. Type 'menu' to start over."

# =============================================================================
# COMPLAINT
# =============================================================================

COMPLAINT_START = "❗ *Register Complaint*\n\nPlease describe your issue in detail so we can address it properly."
COMPLAINT_CONFIRM_INVALID = "Please reply with 'confirm' to register your complaint or 'cancel' to start over."
COMPLAINT_PLACED = (
    "✅ Your complaint has been registered! Complaint #{reference}\n\n"
    "We take all complaints seriously and will address your concerns as soon as possible. "
    "A manager will contact you shortly."
)
COMPLAINT_CANCELLED = "Your complaint has been cancelled. Type 'menu' to start over."


# =============================================================================
# RENDERERS
# =============================================================================

def money(amount: float) -> str:
    return f"{get_settings().currency_symbol}{amount:.2f}"


def welcome(restaurant_name: str) -> str:
    return WELCOME.format(restaurant=restaurant_name or "our restaurant")


def categories(menu: Iterable[MenuCategoryInfo]) -> str:
    lines = ["📋 *Menu Categories*", ""]
    lines += [f"{i}. {category.category}" for i, category in enumerate(menu, start=1)]
    lines += ["", "Please reply with the number of the category you'd like to see."]
    return "\n".join(lines)


def category_items(category: MenuCategoryInfo) -> str:
    lines = [f"🍽️ *{category.category} Menu*", ""]
    lines += [
        f"{i}. {item.name} - {money(item.price)}"
        for i, item in enumerate(category.items, start=1)
    ]
    lines += ["", "Please reply with the number of the item you'd like to order."]
    return "\n".join(lines)


def _order_lines(items: Iterable[OrderLine]) -> list[str]:
    return [
        f"{i}. {item.name} x{item.quantity} - {money(item.line_total)}"
        for i, item in enumerate(items, start=1)
    ]


def order_summary(items: Iterable[OrderLine], total: float) -> str:
    lines = ["🧾 *Order Summary*", ""]
    lines += _order_lines(items)
    lines += [
        "",
        f"*Total: {money(total)}*",
        "",
        "Please select your order type:",
        "1. Delivery",
        "2. Pickup",
    ]
    return "\n".join(lines)


def order_confirmation(
    customer_name: str,
    customer_phone: str,
    order_type: OrderTypeEnum,
    address: str,
    items: Iterable[OrderLine],
    total: float,
) -> str:
    lines = [
        "📝 *Order Confirmation*",
        "",
        f"Name: {customer_name}",
        f"Phone: {customer_phone}",
    ]
    if order_type == OrderTypeEnum.DELIVERY:
        lines.append(f"Address: {address}")
    lines.append(f"Order Type: {order_type.value.title()}")
    lines.append("")
    lines += _order_lines(items)
    lines += [
        "",
        f"*Total: {money(total)}*",
        "",
        "Please confirm your order by replying with 'confirm' or 'cancel' to start over.",
    ]
    return "\n".join(lines)


def booking_confirmation(
    customer_name: str,
    customer_phone: str,
    date: str,
    time: str,
    guests: int,
    notes: str,
) -> str:
    lines = [
        "📝 *Reservation Confirmation*",
        "",
        f"Name: {customer_name}",
        f"Phone: {customer_phone}",
        f"Date: {date}",
        f"Time: {time}",
        f"Guests: {guests}",
    ]
    if notes:
        lines.append(f"Notes: {notes}")
    lines += ["", "Please confirm your reservation by replying with 'confirm' or 'cancel' to start over."]
    return "\n".join(lines)


def feedback_confirmation(customer_name: str, rating: int, comment: str) -> str:
    return "\n".join([
        "📝 *Feedback Confirmation*",
        "",
        f"Name: {customer_name}",
        f"Rating: {'⭐' * rating}",
        f"Comments: {comment}",
        "",
        "Please confirm your feedback by replying with 'confirm' or 'cancel' to start over.",
    ])


def complaint_confirmation(customer_name: str, issue: str) -> str:
    return "\n".join([
        "📝 *Complaint Confirmation*",
        "",
        f"Name: {customer_name}",
        f"Issue: {issue}",
        "",
        "Please confirm your complaint by replying with 'confirm' or 'cancel' to start over.",
    ])
