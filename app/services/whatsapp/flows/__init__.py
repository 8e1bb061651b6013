"""
Conversation flows: one step function per guided dialogue.
"""

from app.services.whatsapp.flows.base import FlowHandler, StepResult
from app.services.whatsapp.flows.order import OrderFlow
from app.services.whatsapp.flows.booking import BookingFlow
from app.services.whatsapp.flows.feedback import FeedbackFlow
from app.services.whatsapp.flows.complaint import ComplaintFlow

__all__ = [
    "FlowHandler",
    "StepResult",
    "OrderFlow",
    "BookingFlow",
    "FeedbackFlow",
    "ComplaintFlow",
]
