"""
Complaint Flow

Free-text issue -> name -> phone -> confirm.
"""

from app.core.exceptions import PersistenceError
from app.schemas import NAME_MAX_LENGTH, PHONE_MAX_LENGTH, ComplaintCreate, CustomerInfo
from app.services.persistence.base import BasePersistenceService, short_reference
from app.services.whatsapp import messages
from app.services.whatsapp.flows.base import FlowHandler, StepResult
from app.services.whatsapp.session import ComplaintDraft, ComplaintStep, FlowType, Session


class ComplaintFlow(FlowHandler):

    flow_type = FlowType.COMPLAINT

    def __init__(self, persistence: BasePersistenceService, timeout: float = 10.0):
        super().__init__(timeout=timeout)
        self.persistence = persistence

    async def start(self, session: Session) -> StepResult:
        session = session.begin_flow(FlowType.COMPLAINT, ComplaintDraft(), ComplaintStep.ISSUE)
        return StepResult(reply=messages.COMPLAINT_START, session=session)

    async def handle(self, session: Session, text: str) -> StepResult:
        step = self._step(session, ComplaintStep)
        draft = self._draft(session, ComplaintDraft)

        if step == ComplaintStep.ISSUE:
            return self._collect_text(
                session, text, "issue",
                ComplaintStep.CUSTOMER_NAME, messages.ASK_NAME, messages.COMPLAINT_START,
            )

        if step == ComplaintStep.CUSTOMER_NAME:
            return self._collect_text(
                session, text, "customer_name",
                ComplaintStep.CUSTOMER_PHONE, messages.ASK_PHONE, messages.ASK_NAME,
                max_length=NAME_MAX_LENGTH,
            )

        if step == ComplaintStep.CUSTOMER_PHONE:
            phone, rejection = self._read_text(
                session, text, messages.ASK_PHONE, max_length=PHONE_MAX_LENGTH
            )
            if rejection is not None:
                return rejection
            draft = draft.model_copy(update={"customer_phone": phone})
            reply = messages.complaint_confirmation(draft.customer_name, draft.issue)
            return StepResult(reply=reply, session=session.advance(ComplaintStep.CONFIRM, draft))

        async def commit() -> str:
            complaint = ComplaintCreate(
                entity_id=draft.entity_id,
                restaurant_id=session.restaurant_id,
                customer=CustomerInfo(name=draft.customer_name, phone=draft.customer_phone),
                issue=draft.issue,
            )
            return await self._call(
                self.persistence.create_complaint(complaint), PersistenceError, "storing the complaint"
            )

        return await self._confirm_or_cancel(
            session,
            text,
            commit,
            placed=lambda entity_id: messages.COMPLAINT_PLACED.format(
                reference=short_reference(entity_id)
            ),
            cancelled=messages.COMPLAINT_CANCELLED,
            invalid=messages.COMPLAINT_CONFIRM_INVALID,
        )
