"""
Flow Handler Base

Every flow is a step function over immutable sessions:

    result = await handler.handle(session, text)

`result.session` is the session to keep (the same object when the input
was rejected, a new one when the step advanced) or None once the flow is
over and the caller's session should be dropped.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Awaitable, Callable, Optional, Type, TypeVar

from pydantic import ValidationError

from app.core.exceptions import ServiceError, SessionStateError
from app.services.whatsapp import messages, parsers
from app.services.whatsapp.session import FlowType, Session

logger = logging.getLogger(__name__)

StepT = TypeVar("StepT", bound=IntEnum)
DraftT = TypeVar("DraftT")
T = TypeVar("T")


@dataclass(frozen=True)
class StepResult:
    """Outcome of one inbound message."""
    reply: str
    session: Optional[Session]
    committed_id: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.session is None


class FlowHandler(ABC):
    """
    Base class for the order, booking, feedback and complaint flows.

    Attributes:
        flow_type: Flow this handler drives
        timeout: Seconds to wait for a collaborator call
    """

    flow_type: FlowType

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    @abstractmethod
    async def start(self, session: Session) -> StepResult:
        """Enter the flow from the welcome step and return its first prompt."""
        pass

    @abstractmethod
    async def handle(self, session: Session, text: str) -> StepResult:
        """Apply the caller's reply to the session's current step."""
        pass

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _step(self, session: Session, steps: Type[StepT]) -> StepT:
        try:
            return steps(session.step)
        except ValueError:
            raise SessionStateError(
                f"{self.flow_type.value} flow has no step {session.step}"
            ) from None

    def _draft(self, session: Session, draft_type: Type[DraftT]) -> DraftT:
        if not isinstance(session.draft, draft_type):
            raise SessionStateError(f"{self.flow_type.value} flow without its draft")
        return session.draft

    async def _call(
        self,
        call: Awaitable[T],
        error: Type[ServiceError],
        what: str,
    ) -> T:
        """Await a collaborator, turning a timeout into `error`."""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise error(f"Timed out after {self.timeout}s while {what}") from None

    def _reject(self, session: Session, reply: str) -> StepResult:
        logger.debug(
            f"Rejected input for {session.phone} "
            f"({self.flow_type.value} step {session.step})"
        )
        return StepResult(reply=reply, session=session)

    def _read_text(
        self,
        session: Session,
        text: str,
        prompt: str,
        max_length: Optional[int] = None,
    ) -> tuple[Optional[str], Optional[StepResult]]:
        """
        Parse a required free-text reply.

        Returns:
            (value, None) when accepted, (None, rejection) when the text is
            blank or longer than max_length
        """
        value = parsers.parse_free_text(text)
        if value is None:
            return None, self._reject(session, messages.EMPTY_TEXT.format(prompt=prompt))
        if max_length is not None and len(value) > max_length:
            return None, self._reject(
                session, messages.TEXT_TOO_LONG.format(maximum=max_length, prompt=prompt)
            )
        return value, None

    def _collect_text(
        self,
        session: Session,
        text: str,
        field: str,
        next_step: int,
        next_prompt: str,
        prompt: str,
        max_length: Optional[int] = None,
    ) -> StepResult:
        """Store a required free-text field and move on."""
        value, rejection = self._read_text(session, text, prompt, max_length)
        if rejection is not None:
            return rejection

        draft = session.draft.model_copy(update={field: value})
        return StepResult(reply=next_prompt, session=session.advance(next_step, draft))

    async def _confirm_or_cancel(
        self,
        session: Session,
        text: str,
        commit: Callable[[], Awaitable[str]],
        placed: Callable[[str], str],
        cancelled: str,
        invalid: str,
    ) -> StepResult:
        """
        Terminal step shared by all flows.

        'confirm'/'yes' stores the entity once and ends the flow,
        'cancel'/'no' ends it without storing, anything else re-prompts.
        """
        if parsers.is_confirm(text):
            try:
                entity_id = await commit()
            except ValidationError as e:
                raise SessionStateError(
                    f"{self.flow_type.value} draft rejected at confirmation: {e}"
                ) from e
            logger.info(
                f"✅ {self.flow_type.value.title()} committed for {session.phone} "
                f"(restaurant={session.restaurant_id}, id={entity_id})"
            )
            return StepResult(reply=placed(entity_id), session=None, committed_id=entity_id)

        if parsers.is_cancel(text):
            logger.info(f"{self.flow_type.value.title()} cancelled by {session.phone}")
            return StepResult(reply=cancelled, session=None)

        return self._reject(session, invalid)
