"""Conversation orchestrator: the phase state machine.

A turn is computed against a draft copy of the session and written back only
after every oracle call has succeeded, so a transport failure leaves the
stored session exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from intakebot.conversation.classifier import IntentClassifier
from intakebot.conversation.confirmation import (
    ConfirmationAnalyzer,
    ConfirmationOutcome,
    resolve_outcome,
)
from intakebot.conversation.extractor import RequirementsExtractor
from intakebot.conversation.generator import ResponseGenerator
from intakebot.conversation.models import (
    ChatRequest,
    ChatResponse,
    ConversationSession,
    Message,
    Phase,
    SessionSummary,
    new_session_id,
)
from intakebot.conversation.schema import DEFAULT_PROBLEM_TYPE
from intakebot.conversation.store import SessionStore
from intakebot.errors import OracleTransportError, TurnFailedError
from intakebot.observability.logging import get_logger, session_id_var

logger = get_logger(__name__)

__all__ = [
    "ConversationOrchestrator",
    "MAX_CONFIRMATION_ATTEMPTS",
    "NEEDS_DISCUSSION_REASON",
    "UNCLEAR_REQUIREMENTS_REASON",
]

MAX_CONFIRMATION_ATTEMPTS = 2

NEEDS_DISCUSSION_REASON = "user needs internal discussion"
UNCLEAR_REQUIREMENTS_REASON = "requirements unclear after 2 confirmation attempts"

AGREED_REPLY = "Perfect! I have everything I need. Let me prepare your project estimate..."
NEEDS_DISCUSSION_REPLY = (
    "No problem! Take your time to discuss with your team. When you're ready, just come "
    "back and we can finalize the details. I've saved everything we discussed."
)
ADDITIONS_REPLY = "Great! Let me add that to your requirements."
CLARIFY_REPLY = "Got it, let me clarify."
CLARIFY_DEFAULT_PROMPT = "What would you like me to change?"
ESCALATION_REPLY = (
    "I want to make sure I understand your needs perfectly. Let me connect you with a team "
    "member who can discuss this in detail. They'll reach out within 24 hours to clarify "
    "everything and provide an accurate estimate."
)
ESCALATED_FOLLOWUP_REPLY = (
    "A team member will be in touch shortly. Is there anything else I can help clarify in "
    "the meantime?"
)
COMPLETE_FOLLOWUP_REPLY = (
    "Your estimate is ready! Is there anything else you'd like to know about the project?"
)


@dataclass
class _Turn:
    """Outcome of one phase handler, applied to the store on commit."""

    reply: str
    phase: Phase
    readiness_score: Optional[int] = None
    requirements: Optional[dict[str, Any]] = None
    escalation_reason: Optional[str] = None
    estimate_ready: Optional[bool] = None
    # (merged requirements, readiness score) to persist when an extraction ran
    extraction: Optional[tuple[dict[str, Any], int]] = None
    increment_attempts: bool = False


class ConversationOrchestrator:
    """Routes each inbound message through the requirements-gathering phases."""

    def __init__(
        self,
        *,
        store: SessionStore,
        classifier: IntentClassifier,
        extractor: RequirementsExtractor,
        analyzer: ConfirmationAnalyzer,
        generator: ResponseGenerator,
    ) -> None:
        self.store = store
        self._classifier = classifier
        self._extractor = extractor
        self._analyzer = analyzer
        self._generator = generator

    # Public surface ----------------------------------------------------------

    async def handle_message(self, request: ChatRequest) -> ChatResponse:
        """Process one inbound message and return the reply envelope.

        Unknown or absent session ids start a new session. Raises
        TurnFailedError when the oracle cannot be reached; nothing is stored
        for that turn.
        """
        if request.session_id and request.session_id in self.store:
            session_id = request.session_id
        else:
            session_id = new_session_id()

        token = session_id_var.set(session_id)
        try:
            async with self.store.session_lock(session_id):
                stored = self.store.get(session_id)
                is_new = stored is None
                draft = stored or ConversationSession(id=session_id, user_id=request.user_id)
                user_message = Message.user(request.message, at=self.store.now())

                try:
                    if is_new:
                        classification = await self._classifier.classify(
                            request.message, [m.as_line() for m in draft.messages]
                        )
                        draft.problem_type = classification.primary_intent
                    transcript = [*draft.messages, user_message]
                    turn = await self._dispatch(draft, transcript, request.message)
                except OracleTransportError as exc:
                    logger.warning(
                        "oracle_transport_failed",
                        phase=draft.phase.value,
                        purpose=exc.purpose,
                        error=str(exc),
                    )
                    raise TurnFailedError(
                        f"Turn failed: {exc}", session_id=None if is_new else session_id
                    ) from exc

                self._commit(draft, user_message, turn)
        finally:
            session_id_var.reset(token)

        return ChatResponse(
            session_id=session_id,
            response=turn.reply,
            phase=turn.phase,
            readiness_score=turn.readiness_score,
            requirements=turn.requirements,
            escalation_reason=turn.escalation_reason,
            estimate_ready=turn.estimate_ready,
        )

    def get_session(self, session_id: str) -> ConversationSession | None:
        return self.store.get(session_id)

    def list_sessions(self) -> list[SessionSummary]:
        sessions = sorted(self.store.list(), key=lambda s: s.created_at)
        return [s.summary() for s in sessions]

    def delete_session(self, session_id: str) -> bool:
        return self.store.delete(session_id)

    # Phase handlers ------------------------------------------------------------

    async def _dispatch(
        self, draft: ConversationSession, transcript: Sequence[Message], text: str
    ) -> _Turn:
        phase = draft.phase
        if phase == Phase.GATHERING:
            return await self._gather(draft, transcript)
        if phase.is_confirmation:
            return await self._confirm(draft, text)
        if phase == Phase.CLARIFYING:
            return await self._clarify(draft, transcript)
        if phase == Phase.HUMAN_ESCALATION:
            return _Turn(
                reply=ESCALATED_FOLLOWUP_REPLY,
                phase=Phase.HUMAN_ESCALATION,
                escalation_reason=draft.escalation_reason,
            )
        return _Turn(
            reply=COMPLETE_FOLLOWUP_REPLY,
            phase=Phase.COMPLETE,
            estimate_ready=True,
            requirements=dict(draft.requirements),
        )

    async def _gather(self, draft: ConversationSession, transcript: Sequence[Message]) -> _Turn:
        problem_type = draft.problem_type or DEFAULT_PROBLEM_TYPE
        extracted = await self._extractor.extract(problem_type, transcript)
        merged = {**draft.requirements, **extracted.data}
        score = extracted.readiness_score

        if extracted.completion_ready:
            summary = await self._generator.confirmation_summary(problem_type, merged)
            return _Turn(
                reply=summary,
                phase=Phase.CONFIRMATION_FIRST,
                readiness_score=score,
                requirements=merged,
                extraction=(merged, score),
            )

        question = await self._generator.next_question(
            problem_type, transcript, merged, extracted.missing_required
        )
        return _Turn(
            reply=question,
            phase=Phase.GATHERING,
            readiness_score=score,
            extraction=(merged, score),
        )

    async def _clarify(self, draft: ConversationSession, transcript: Sequence[Message]) -> _Turn:
        problem_type = draft.problem_type or DEFAULT_PROBLEM_TYPE
        extracted = await self._extractor.extract(problem_type, transcript)
        merged = {**draft.requirements, **extracted.data}
        summary = await self._generator.confirmation_summary(problem_type, merged)
        return _Turn(
            reply=summary,
            phase=Phase.CONFIRMATION_SECOND,
            readiness_score=extracted.readiness_score,
            requirements=merged,
            extraction=(merged, extracted.readiness_score),
        )

    async def _confirm(self, draft: ConversationSession, text: str) -> _Turn:
        analysis = await self._analyzer.analyze(text)
        outcome = resolve_outcome(analysis)

        if outcome is ConfirmationOutcome.AGREED:
            return _Turn(
                reply=AGREED_REPLY,
                phase=Phase.COMPLETE,
                estimate_ready=True,
                requirements=dict(draft.requirements),
            )

        if outcome is ConfirmationOutcome.NEEDS_DISCUSSION:
            return _Turn(
                reply=NEEDS_DISCUSSION_REPLY,
                phase=Phase.HUMAN_ESCALATION,
                escalation_reason=NEEDS_DISCUSSION_REASON,
            )

        if outcome is ConfirmationOutcome.ADDITIONS:
            return _Turn(
                reply=f"{ADDITIONS_REPLY} {analysis.addition_details}".strip(),
                phase=Phase.GATHERING,
                readiness_score=draft.readiness_score,
            )

        # Correction or disagreement: the attempt count alone decides between
        # another clarification round and escalation.
        if draft.confirmation_attempts + 1 < MAX_CONFIRMATION_ATTEMPTS:
            detail = analysis.clarification_needed or CLARIFY_DEFAULT_PROMPT
            return _Turn(
                reply=f"{CLARIFY_REPLY} {detail}",
                phase=Phase.CLARIFYING,
                readiness_score=draft.readiness_score,
                increment_attempts=True,
            )
        return _Turn(
            reply=ESCALATION_REPLY,
            phase=Phase.HUMAN_ESCALATION,
            escalation_reason=UNCLEAR_REQUIREMENTS_REASON,
            increment_attempts=True,
        )

    # Write-back ---------------------------------------------------------------

    def _restore(self, draft: ConversationSession) -> None:
        """(Re)create the stored session from the pre-turn draft."""
        self.store.create(draft.id, user_id=draft.user_id)
        for message in draft.messages:
            self.store.add_message(draft.id, message)
        self.store.update_metadata(
            draft.id,
            problem_type=draft.problem_type,
            requirements=dict(draft.requirements),
            readiness_score=draft.readiness_score,
            confirmation_attempts=draft.confirmation_attempts,
            escalation_reason=draft.escalation_reason,
        )
        if draft.phase != Phase.GATHERING:
            self.store.update_phase(draft.id, draft.phase)

    def _commit(self, draft: ConversationSession, user_message: Message, turn: _Turn) -> None:
        sid = draft.id
        if sid not in self.store:
            if draft.messages:
                logger.info("session_recreated", session_id=sid)
            self._restore(draft)

        self.store.add_message(sid, user_message)
        if turn.extraction is not None:
            requirements, score = turn.extraction
            self.store.update_metadata(sid, requirements=requirements, readiness_score=score)
        if turn.increment_attempts:
            attempts = self.store.increment_confirmation_attempts(sid)
            logger.info("confirmation_attempt_recorded", session_id=sid, attempts=attempts)
        if turn.escalation_reason and turn.phase != draft.phase:
            self.store.update_metadata(sid, escalation_reason=turn.escalation_reason)
            logger.info("session_escalated", session_id=sid, reason=turn.escalation_reason)
        if turn.phase != draft.phase:
            self.store.update_phase(sid, turn.phase)
            logger.info(
                "phase_transition",
                session_id=sid,
                from_phase=draft.phase.value,
                to_phase=turn.phase.value,
            )
        self.store.add_message(sid, Message.assistant(turn.reply, at=self.store.now()))
