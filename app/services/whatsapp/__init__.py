"""
WhatsApp Conversation Module

Session-based guided conversations (order, booking, feedback, complaint)
driven by inbound WhatsApp messages.

Usage:
    from app.services.whatsapp import get_whatsapp_handler

    handler = get_whatsapp_handler()
    reply = await handler.handle_message(from_phone, to_route, body)

Author: Khalil Bannouri
Version: 1.0.0
"""

from app.services.whatsapp.dispatcher import ConversationDispatcher, DispatchResult
from app.services.whatsapp.handler import (
    WhatsAppWebhookHandler,
    get_conversation_dispatcher,
    get_session_store,
    get_session_sweeper,
    get_whatsapp_handler,
    reset_whatsapp_handler,
)
from app.services.whatsapp.session import FlowType, Session
from app.services.whatsapp.store import BaseSessionStore, InMemorySessionStore, RedisSessionStore
from app.services.whatsapp.sweeper import SessionSweeper

__all__ = [
    # Handler
    "WhatsAppWebhookHandler",
    "get_whatsapp_handler",
    "reset_whatsapp_handler",
    # Engine
    "ConversationDispatcher",
    "DispatchResult",
    "get_conversation_dispatcher",
    "FlowType",
    "Session",
    # Sessions
    "BaseSessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    "get_session_store",
    "SessionSweeper",
    "get_session_sweeper",
]
