"""
Feedback Flow

Rating + comment -> name -> phone -> confirm.
"""

from app.core.exceptions import PersistenceError
from app.schemas import NAME_MAX_LENGTH, PHONE_MAX_LENGTH, CustomerInfo, FeedbackCreate
from app.services.persistence.base import BasePersistenceService
from app.services.whatsapp import messages, parsers
from app.services.whatsapp.flows.base import FlowHandler, StepResult
from app.services.whatsapp.session import FeedbackDraft, FeedbackStep, FlowType, Session


class FeedbackFlow(FlowHandler):

    flow_type = FlowType.FEEDBACK

    def __init__(self, persistence: BasePersistenceService, timeout: float = 10.0):
        super().__init__(timeout=timeout)
        self.persistence = persistence

    async def start(self, session: Session) -> StepResult:
        session = session.begin_flow(FlowType.FEEDBACK, FeedbackDraft(), FeedbackStep.RATING)
        return StepResult(reply=messages.FEEDBACK_START, session=session)

    async def handle(self, session: Session, text: str) -> StepResult:
        step = self._step(session, FeedbackStep)
        draft = self._draft(session, FeedbackDraft)

        if step == FeedbackStep.RATING:
            entry = parsers.parse_feedback(text)
            if entry is None:
                return self._reject(session, messages.INVALID_FEEDBACK)
            draft = draft.model_copy(update={"rating": entry.rating, "comment": entry.comment})
            return StepResult(
                reply=messages.ASK_NAME,
                session=session.advance(FeedbackStep.CUSTOMER_NAME, draft),
            )

        if step == FeedbackStep.CUSTOMER_NAME:
            return self._collect_text(
                session, text, "customer_name",
                FeedbackStep.CUSTOMER_PHONE, messages.ASK_PHONE, messages.ASK_NAME,
                max_length=NAME_MAX_LENGTH,
            )

        if step == FeedbackStep.CUSTOMER_PHONE:
            phone, rejection = self._read_text(
                session, text, messages.ASK_PHONE, max_length=PHONE_MAX_LENGTH
            )
            if rejection is not None:
                return rejection
            draft = draft.model_copy(update={"customer_phone": phone})
            reply = messages.feedback_confirmation(draft.customer_name, draft.rating, draft.comment)
            return StepResult(reply=reply, session=session.advance(FeedbackStep.CONFIRM, draft))

        async def commit() -> str:
            feedback = FeedbackCreate(
                entity_id=draft.entity_id,
                restaurant_id=session.restaurant_id,
                customer=CustomerInfo(name=draft.customer_name, phone=draft.customer_phone),
                rating=draft.rating,
                comment=draft.comment,
            )
            return await self._call(
                self.persistence.create_feedback(feedback), PersistenceError, "storing feedback"
            )

        return await self._confirm_or_cancel(
            session,
            text,
            commit,
            placed=lambda entity_id: messages.FEEDBACK_PLACED,
            cancelled=messages.FEEDBACK_CANCELLED,
            invalid=messages.FEEDBACK_CONFIRM_INVALID,
        )
