"""
WhatsApp Webhook Handler

Glue between the inbound messaging event and the conversation engine:
normalizes the sender, resolves which restaurant the message was routed
to, and returns the single text reply to deliver back.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from app.core.config import SessionBackend, get_settings
from app.core.exceptions import RestaurantNotFoundError
from app.services.catalog import get_catalog_service
from app.services.persistence import get_persistence_service
from app.services.routing import BaseRoutingService, get_routing_service, normalize_address
from app.services.whatsapp import messages
from app.services.whatsapp.dispatcher import ConversationDispatcher, DispatchResult
from app.services.whatsapp.store import BaseSessionStore, InMemorySessionStore, RedisSessionStore
from app.services.whatsapp.sweeper import SessionSweeper

logger = logging.getLogger(__name__)


class WhatsAppWebhookHandler:
    """
    Handles inbound WhatsApp messages for every routed restaurant.

    Never raises: every path ends in a reply text.
    """

    def __init__(self, dispatcher: ConversationDispatcher, routing: BaseRoutingService):
        self.dispatcher = dispatcher
        self.routing = routing

        logger.info(
            f"WhatsAppWebhookHandler initialized "
            f"(store={dispatcher.store.provider_name}, routing={routing.provider_name})"
        )

    async def handle_message(self, from_phone: str, to_route: str, body: str) -> str:
        result = await self.process(from_phone, to_route, body)
        return result.reply

    async def process(self, from_phone: str, to_route: str, body: str) -> DispatchResult:
        """Run one inbound message through routing and the dispatcher."""
        phone = normalize_address(from_phone)
        logger.info(f"💬 Message from {phone} via {to_route}")

        try:
            restaurant = await self.routing.resolve_restaurant(to_route)
        except RestaurantNotFoundError as e:
            logger.error(f"No restaurant routed for {e.address!r}, message from {phone} dropped")
            return DispatchResult(reply=messages.RESTAURANT_NOT_FOUND, session=None)
        except Exception as e:
            logger.exception(f"Restaurant lookup failed for {to_route!r}: {e}")
            return DispatchResult(reply=messages.SYSTEM_ERROR, session=None)

        try:
            return await self.dispatcher.dispatch(phone, restaurant, body or "")
        except Exception as e:
            logger.exception(f"Error handling message from {phone}: {e}")
            return DispatchResult(reply=messages.SYSTEM_ERROR, session=None)


# =============================================================================
# FACTORIES
# =============================================================================

@lru_cache()
def get_session_store() -> BaseSessionStore:
    """Session store selected by SESSION_BACKEND."""
    settings = get_settings()
    ttl = timedelta(minutes=settings.session_ttl_minutes)

    if settings.session_backend == SessionBackend.REDIS:
        logger.info("Session Store: Using RedisSessionStore")
        return RedisSessionStore.from_url(
            settings.redis_url,
            ttl=ttl,
            lock_timeout=settings.session_lock_timeout_seconds,
        )

    logger.info("Session Store: Using InMemorySessionStore")
    return InMemorySessionStore(ttl=ttl)


@lru_cache()
def get_session_sweeper() -> SessionSweeper:
    settings = get_settings()
    return SessionSweeper(
        get_session_store(),
        interval_seconds=settings.session_sweep_interval_seconds,
    )


@lru_cache()
def get_conversation_dispatcher() -> ConversationDispatcher:
    settings = get_settings()
    return ConversationDispatcher.from_services(
        store=get_session_store(),
        catalog=get_catalog_service(),
        persistence=get_persistence_service(),
        timeout=settings.collaborator_timeout_seconds,
    )


_handler_instance: Optional[WhatsAppWebhookHandler] = None


def get_whatsapp_handler() -> WhatsAppWebhookHandler:
    """Get the WhatsApp webhook handler instance."""
    global _handler_instance

    if _handler_instance is None:
        _handler_instance = WhatsAppWebhookHandler(
            dispatcher=get_conversation_dispatcher(),
            routing=get_routing_service(),
        )

    return _handler_instance


def reset_whatsapp_handler() -> None:
    """Drop the cached handler, dispatcher, sweeper and store."""
    global _handler_instance

    _handler_instance = None
    get_conversation_dispatcher.cache_clear()
    get_session_sweeper.cache_clear()
    get_session_store.cache_clear()
