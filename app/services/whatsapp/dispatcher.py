"""
Conversation Dispatcher

Routes one inbound message to the caller's session and the flow it is in:

    1. No live session, a reset keyword, or a different restaurant
       -> fresh session at the welcome step
    2. Welcome step -> start the chosen flow (or the fallback reply)
    3. Inside a flow -> that flow's step function

Everything for one phone runs under the store's per-phone lock, so the
session read, the flow step and the write-back form one unit.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import ServiceError, SessionStateError
from app.schemas import RestaurantContext
from app.services.catalog.base import BaseCatalogService
from app.services.persistence.base import BasePersistenceService
from app.services.whatsapp import messages, parsers
from app.services.whatsapp.flows import (
    BookingFlow,
    ComplaintFlow,
    FeedbackFlow,
    FlowHandler,
    OrderFlow,
    StepResult,
)
from app.services.whatsapp.session import WELCOME_STEP, FlowType, Session
from app.services.whatsapp.store import BaseSessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Reply to send back and the session left in the store (None if dropped)."""
    reply: str
    session: Optional[Session]


class ConversationDispatcher:
    """
    Entry point of the conversation engine.

    Example:
        >>> dispatcher = ConversationDispatcher.from_services(store, catalog, persistence)
        >>> result = await dispatcher.dispatch("+15551234567", restaurant, "hi")
        >>> print(result.reply)
    """

    def __init__(self, store: BaseSessionStore, flows: dict[FlowType, FlowHandler]):
        self.store = store
        self.flows = flows

    @classmethod
    def from_services(
        cls,
        store: BaseSessionStore,
        catalog: BaseCatalogService,
        persistence: BasePersistenceService,
        timeout: float = 10.0,
    ) -> "ConversationDispatcher":
        flows = [
            OrderFlow(catalog, persistence, timeout=timeout),
            BookingFlow(persistence, timeout=timeout),
            FeedbackFlow(persistence, timeout=timeout),
            ComplaintFlow(persistence, timeout=timeout),
        ]
        return cls(store, {flow.flow_type: flow for flow in flows})

    async def dispatch(self, phone: str, restaurant: RestaurantContext, text: str) -> DispatchResult:
        async with self.store.lock(phone):
            return await self._dispatch_locked(phone, restaurant, text)

    async def _dispatch_locked(
        self,
        phone: str,
        restaurant: RestaurantContext,
        text: str,
    ) -> DispatchResult:
        session = await self.store.get(phone)

        if session is None:
            logger.info(f"📱 New conversation: {phone} -> {restaurant.id}")
            return await self._restart(phone, restaurant)

        if parsers.is_reset_keyword(text, in_flow=session.flow_type != FlowType.NONE):
            logger.info(f"🔄 Conversation reset by {phone}")
            return await self._restart(phone, restaurant)

        if session.restaurant_id != restaurant.id:
            logger.info(
                f"📱 {phone} switched restaurant "
                f"({session.restaurant_id} -> {restaurant.id}), starting over"
            )
            return await self._restart(phone, restaurant)

        session = await self.store.touch(phone)

        try:
            result = await self._step(session, text)
        except ServiceError as e:
            # The touched session stays as it was, the caller can resend
            logger.exception(
                f"❌ Service failure for {phone} "
                f"({session.flow_type.value} step {session.step}): {e}"
            )
            return DispatchResult(reply=messages.APOLOGY, session=session)
        except SessionStateError as e:
            logger.warning(f"⚠️ Inconsistent session for {phone}, resetting: {e}")
            return await self._restart(phone, restaurant)

        if result.session is None:
            await self.store.delete(phone)
        elif result.session is not session:
            await self.store.put(phone, result.session)

        return DispatchResult(reply=result.reply, session=result.session)

    async def _step(self, session: Session, text: str) -> StepResult:
        if session.flow_type == FlowType.NONE:
            if session.step != WELCOME_STEP:
                raise SessionStateError(f"No flow chosen at step {session.step}")

            flow_type = parsers.parse_flow_choice(text)
            if flow_type is None:
                return StepResult(reply=messages.FALLBACK, session=session)

            logger.info(f"{session.phone} chose the {flow_type.value} flow")
            return await self._handler(flow_type).start(session)

        return await self._handler(session.flow_type).handle(session, text)

    def _handler(self, flow_type: FlowType) -> FlowHandler:
        handler = self.flows.get(flow_type)
        if handler is None:
            raise SessionStateError(f"No handler for {flow_type.value} flow")
        return handler

    async def _restart(self, phone: str, restaurant: RestaurantContext) -> DispatchResult:
        session = Session.start(
            phone=phone,
            restaurant_id=restaurant.id,
            restaurant_name=restaurant.name,
            expires_at=self.store.new_expiry(),
        )
        await self.store.put(phone, session)
        return DispatchResult(reply=messages.welcome(restaurant.name), session=session)
