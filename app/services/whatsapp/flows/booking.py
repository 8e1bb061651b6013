"""
Booking Flow

Date/time/guests in one line -> name -> phone -> notes -> confirm.
"""

from app.core.exceptions import PersistenceError
from app.schemas import NAME_MAX_LENGTH, PHONE_MAX_LENGTH, BookingCreate, CustomerInfo
from app.services.persistence.base import BasePersistenceService, short_reference
from app.services.whatsapp import messages, parsers
from app.services.whatsapp.flows.base import FlowHandler, StepResult
from app.services.whatsapp.session import BookingDraft, BookingStep, FlowType, Session


class BookingFlow(FlowHandler):
    """Table reservation request."""

    flow_type = FlowType.BOOKING

    def __init__(self, persistence: BasePersistenceService, timeout: float = 10.0):
        super().__init__(timeout=timeout)
        self.persistence = persistence

    async def start(self, session: Session) -> StepResult:
        session = session.begin_flow(FlowType.BOOKING, BookingDraft(), BookingStep.DETAILS)
        return StepResult(reply=messages.BOOKING_START, session=session)

    async def handle(self, session: Session, text: str) -> StepResult:
        step = self._step(session, BookingStep)
        draft = self._draft(session, BookingDraft)

        if step == BookingStep.DETAILS:
            request = parsers.parse_booking_request(text)
            if request is None:
                return self._reject(session, messages.INVALID_BOOKING)
            draft = draft.model_copy(update={
                "date": request.date,
                "time": request.time,
                "guests": request.guests,
            })
            return StepResult(
                reply=messages.ASK_BOOKING_NAME,
                session=session.advance(BookingStep.CUSTOMER_NAME, draft),
            )

        if step == BookingStep.CUSTOMER_NAME:
            return self._collect_text(
                session, text, "customer_name",
                BookingStep.CUSTOMER_PHONE, messages.ASK_BOOKING_PHONE, messages.ASK_BOOKING_NAME,
                max_length=NAME_MAX_LENGTH,
            )

        if step == BookingStep.CUSTOMER_PHONE:
            return self._collect_text(
                session, text, "customer_phone",
                BookingStep.NOTES, messages.ASK_NOTES, messages.ASK_BOOKING_PHONE,
                max_length=PHONE_MAX_LENGTH,
            )

        if step == BookingStep.NOTES:
            notes = parsers.parse_free_text(text)
            if notes is None:
                return self._reject(session, messages.EMPTY_TEXT.format(prompt=messages.ASK_NOTES))
            if parsers.is_none_token(notes):
                notes = ""

            draft = draft.model_copy(update={"notes": notes})
            reply = messages.booking_confirmation(
                customer_name=draft.customer_name,
                customer_phone=draft.customer_phone,
                date=draft.date.isoformat(),
                time=draft.time,
                guests=draft.guests,
                notes=notes,
            )
            return StepResult(reply=reply, session=session.advance(BookingStep.CONFIRM, draft))

        async def commit() -> str:
            booking = BookingCreate(
                entity_id=draft.entity_id,
                restaurant_id=session.restaurant_id,
                customer=CustomerInfo(name=draft.customer_name, phone=draft.customer_phone),
                date=draft.date,
                time=draft.time,
                guests=draft.guests,
                notes=draft.notes or "",
            )
            return await self._call(
                self.persistence.create_booking(booking), PersistenceError, "storing the booking"
            )

        return await self._confirm_or_cancel(
            session,
            text,
            commit,
            placed=lambda entity_id: messages.BOOKING_PLACED.format(
                reference=short_reference(entity_id),
                date=draft.date.isoformat(),
                time=draft.time,
            ),
            cancelled=messages.BOOKING_CANCELLED,
            invalid=messages.BOOKING_CONFIRM_INVALID,
        )
