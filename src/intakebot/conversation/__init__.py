"""Requirements-gathering conversation core."""

from intakebot.conversation.models import (
    ChatRequest,
    ChatResponse,
    ConversationSession,
    Message,
    Phase,
    SessionSummary,
)
from intakebot.conversation.orchestrator import ConversationOrchestrator
from intakebot.conversation.store import SessionStore

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ConversationOrchestrator",
    "ConversationSession",
    "Message",
    "Phase",
    "SessionStore",
    "SessionSummary",
]
