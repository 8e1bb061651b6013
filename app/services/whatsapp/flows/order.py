"""
Order Flow

Menu browsing -> item -> quantity -> add more? -> delivery/pickup ->
address (delivery only) -> name -> phone -> confirm.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from app.core.exceptions import CatalogUnavailableError, PersistenceError, SessionStateError
from app.schemas import (
    ADDRESS_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    CustomerInfo,
    OrderCreate,
    OrderLine,
    OrderTypeEnum,
)
from app.services.catalog.base import BaseCatalogService
from app.services.persistence.base import BasePersistenceService, short_reference
from app.services.whatsapp import messages, parsers
from app.services.whatsapp.flows.base import FlowHandler, StepResult
from app.services.whatsapp.session import FlowType, OrderDraft, OrderStep, Session

logger = logging.getLogger(__name__)


class OrderFlow(FlowHandler):
    """Guided ordering from the restaurant's menu."""

    flow_type = FlowType.ORDER

    def __init__(
        self,
        catalog: BaseCatalogService,
        persistence: BasePersistenceService,
        timeout: float = 10.0,
    ):
        super().__init__(timeout=timeout)
        self.catalog = catalog
        self.persistence = persistence

    async def _load_menu(self, session: Session):
        menu = await self._call(
            self.catalog.get_menu(session.restaurant_id),
            CatalogUnavailableError,
            "loading the menu",
        )
        return tuple(category for category in menu if category.items)

    async def start(self, session: Session) -> StepResult:
        menu = await self._load_menu(session)
        if not menu:
            return StepResult(reply=messages.MENU_EMPTY, session=session)

        session = session.begin_flow(
            FlowType.ORDER,
            OrderDraft(menu=menu),
            OrderStep.SELECT_CATEGORY,
        )
        return StepResult(reply=messages.categories(menu), session=session)

    async def handle(self, session: Session, text: str) -> StepResult:
        step = self._step(session, OrderStep)
        draft = self._draft(session, OrderDraft)

        if step == OrderStep.SELECT_CATEGORY:
            return self._select_category(session, draft, text)
        if step == OrderStep.SELECT_ITEM:
            return self._select_item(session, draft, text)
        if step == OrderStep.QUANTITY:
            return self._quantity(session, draft, text)
        if step == OrderStep.ADD_MORE:
            return await self._add_more(session, draft, text)
        if step == OrderStep.ORDER_TYPE:
            return self._order_type(session, draft, text)
        if step == OrderStep.ADDRESS:
            return self._collect_text(
                session, text, "address",
                OrderStep.CUSTOMER_NAME, messages.ASK_ORDER_NAME, messages.ASK_ADDRESS,
                max_length=ADDRESS_MAX_LENGTH,
            )
        if step == OrderStep.CUSTOMER_NAME:
            return self._collect_text(
                session, text, "customer_name",
                OrderStep.CUSTOMER_PHONE, messages.ASK_ORDER_PHONE, messages.ASK_ORDER_NAME,
                max_length=NAME_MAX_LENGTH,
            )
        if step == OrderStep.CUSTOMER_PHONE:
            return self._customer_phone(session, draft, text)
        return await self._confirm(session, draft, text)

    # =========================================================================
    # STEPS
    # =========================================================================

    def _select_category(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        index = parsers.parse_index(text, len(draft.menu))
        if index is None:
            return self._reject(
                session, messages.INVALID_CATEGORY.format(count=len(draft.menu))
            )

        category = draft.menu[index]
        draft = draft.model_copy(update={"category": category, "selected_item": None})
        return StepResult(
            reply=messages.category_items(category),
            session=session.advance(OrderStep.SELECT_ITEM, draft),
        )

    def _select_item(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        if draft.category is None:
            raise SessionStateError("Item selection without a category")
        items = draft.category.items
        index = parsers.parse_index(text, len(items))
        if index is None:
            return self._reject(session, messages.INVALID_ITEM.format(count=len(items)))

        item = items[index]
        draft = draft.model_copy(update={"selected_item": item})
        return StepResult(
            reply=messages.ITEM_SELECTED.format(name=item.name, price=messages.money(item.price)),
            session=session.advance(OrderStep.QUANTITY, draft),
        )

    def _quantity(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        if draft.selected_item is None:
            raise SessionStateError("Quantity without a selected item")
        quantity = parsers.parse_quantity(text)
        if quantity is None:
            return self._reject(
                session, messages.INVALID_QUANTITY.format(maximum=parsers.MAX_QUANTITY)
            )

        item = draft.selected_item
        line = OrderLine(name=item.name, price=item.price, quantity=quantity)
        logger.debug(f"{session.phone} added {quantity} x {item.name}")
        draft = draft.model_copy(update={
            "items": draft.items + (line,),
            "selected_item": None,
        })
        return StepResult(
            reply=messages.ADD_MORE.format(quantity=quantity, name=item.name),
            session=session.advance(OrderStep.ADD_MORE, draft),
        )

    async def _add_more(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        if parsers.is_yes(text):
            menu = await self._load_menu(session)
            if not menu:
                raise CatalogUnavailableError(f"Menu of {session.restaurant_id} is empty")
            # Items collected so far stay in the draft
            draft = draft.model_copy(update={"menu": menu, "category": None})
            return StepResult(
                reply=messages.categories(menu),
                session=session.advance(OrderStep.SELECT_CATEGORY, draft),
            )

        if parsers.is_no(text):
            total = draft.computed_total()
            draft = draft.model_copy(update={"total": total})
            return StepResult(
                reply=messages.order_summary(draft.items, total),
                session=session.advance(OrderStep.ORDER_TYPE, draft),
            )

        return self._reject(session, messages.ADD_MORE_INVALID)

    def _order_type(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        order_type = parsers.parse_order_type(text)
        if order_type is None:
            return self._reject(session, messages.INVALID_ORDER_TYPE)

        draft = draft.model_copy(update={"order_type": order_type})
        if order_type == OrderTypeEnum.DELIVERY:
            return StepResult(
                reply=messages.ASK_ADDRESS,
                session=session.advance(OrderStep.ADDRESS, draft),
            )
        return StepResult(
            reply=messages.ASK_PICKUP_NAME,
            session=session.advance(OrderStep.CUSTOMER_NAME, draft),
        )

    def _customer_phone(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        phone, rejection = self._read_text(
            session, text, messages.ASK_ORDER_PHONE, max_length=PHONE_MAX_LENGTH
        )
        if rejection is not None:
            return rejection

        draft = draft.model_copy(update={"customer_phone": phone})
        reply = messages.order_confirmation(
            customer_name=draft.customer_name,
            customer_phone=phone,
            order_type=draft.order_type,
            address=draft.address,
            items=draft.items,
            total=draft.total,
        )
        return StepResult(reply=reply, session=session.advance(OrderStep.CONFIRM, draft))

    async def _confirm(self, session: Session, draft: OrderDraft, text: str) -> StepResult:
        async def commit() -> str:
            is_delivery = draft.order_type == OrderTypeEnum.DELIVERY
            order = OrderCreate(
                entity_id=draft.entity_id,
                restaurant_id=session.restaurant_id,
                customer=CustomerInfo(
                    name=draft.customer_name,
                    phone=draft.customer_phone,
                    address=draft.address if is_delivery else None,
                ),
                items=list(draft.items),
                order_type=draft.order_type,
                total=draft.total,
            )
            return await self._call(
                self.persistence.create_order(order), PersistenceError, "storing the order"
            )

        return await self._confirm_or_cancel(
            session,
            text,
            commit,
            placed=lambda entity_id: messages.ORDER_PLACED.format(
                reference=short_reference(entity_id)
            ),
            cancelled=messages.ORDER_CANCELLED,
            invalid=messages.ORDER_CONFIRM_INVALID,
        )
