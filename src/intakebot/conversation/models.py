"""Conversation data model."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return str(uuid4())


class Phase(str, Enum):
    """Requirements-gathering phases."""

    GATHERING = "gathering"
    CONFIRMATION_FIRST = "confirmation_first"
    CLARIFYING = "clarifying"
    CONFIRMATION_SECOND = "confirmation_second"
    HUMAN_ESCALATION = "human_escalation"
    COMPLETE = "complete"

    @property
    def is_confirmation(self) -> bool:
        return self in (Phase.CONFIRMATION_FIRST, Phase.CONFIRMATION_SECOND)

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.HUMAN_ESCALATION, Phase.COMPLETE)


class Message(BaseModel):
    """A single transcript entry. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def user(cls, content: str, *, at: datetime | None = None) -> "Message":
        return cls(role="user", content=content, timestamp=at or utc_now())

    @classmethod
    def assistant(cls, content: str, *, at: datetime | None = None) -> "Message":
        return cls(role="assistant", content=content, timestamp=at or utc_now())

    def as_line(self) -> str:
        return f"{self.role}: {self.content}"


class ConversationSession(BaseModel):
    """One end-to-end conversation and its accumulated state."""

    id: str
    user_id: Optional[str] = None
    messages: list[Message] = Field(default_factory=list)
    phase: Phase = Phase.GATHERING
    problem_type: Optional[str] = None
    requirements: dict[str, Any] = Field(default_factory=dict)
    readiness_score: int = 0
    confirmation_attempts: int = 0
    escalation_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def summary(self) -> "SessionSummary":
        return SessionSummary(
            id=self.id,
            message_count=len(self.messages),
            problem_type=self.problem_type,
            phase=self.phase,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionSummary(_CamelModel):
    id: str
    message_count: int
    problem_type: Optional[str] = None
    phase: Phase
    created_at: datetime
    updated_at: datetime


class ChatRequest(_CamelModel):
    """Inbound message. Blank messages are rejected here, before any turn runs."""

    session_id: Optional[str] = None
    message: str = Field(min_length=1)
    user_id: Optional[str] = None

    @field_validator("message", mode="before")
    @classmethod
    def _strip_message(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("session_id", "user_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ChatResponse(_CamelModel):
    """Response envelope for one processed turn."""

    session_id: str
    response: str
    phase: Phase
    readiness_score: Optional[int] = None
    requirements: Optional[dict[str, Any]] = None
    escalation_reason: Optional[str] = None
    estimate_ready: Optional[bool] = None

    def to_payload(self) -> dict[str, Any]:
        """Camel-cased payload with unset optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
