"""In-memory session store.

Pure data access: no phase logic lives here. Every mutation refreshes
``updated_at``; operations on an unknown id (other than ``create``/``get``) are
no-ops. Reads hand out deep copies, so a caller never observes a record
mid-mutation.
"""

from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Callable, Optional

import anyio

from intakebot.conversation.models import ConversationSession, Message, Phase, utc_now
from intakebot.observability.logging import get_logger

logger = get_logger(__name__)

__all__ = ["SessionStore", "DEFAULT_RETENTION"]

DEFAULT_RETENTION = timedelta(hours=24)

_MUTABLE_FIELDS = frozenset(
    {
        "user_id",
        "problem_type",
        "requirements",
        "readiness_score",
        "confirmation_attempts",
        "escalation_reason",
    }
)


@dataclass
class _LockEntry:
    lock: anyio.Lock
    holders: int = 0


class SessionStore:
    """Owns the lifecycle of conversation sessions."""

    def __init__(
        self,
        *,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.retention = retention
        self._clock = clock
        self._guard = threading.Lock()
        self._sessions: dict[str, ConversationSession] = {}
        self._locks: dict[str, _LockEntry] = {}

    # Per-session mutual exclusion -------------------------------------------

    @asynccontextmanager
    async def session_lock(self, session_id: str) -> AsyncIterator[None]:
        """Serialize read-modify-write cycles on one session.

        Different sessions never contend. Lock entries are discarded once no
        task holds or waits on them.
        """
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = _LockEntry(lock=anyio.Lock())
            entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._locks.pop(session_id, None)

    def is_busy(self, session_id: str) -> bool:
        with self._guard:
            return session_id in self._locks

    # Data access -----------------------------------------------------------

    def create(self, session_id: str, *, user_id: Optional[str] = None) -> ConversationSession:
        now = self._clock()
        session = ConversationSession(
            id=session_id, user_id=user_id, created_at=now, updated_at=now
        )
        with self._guard:
            self._sessions[session_id] = session
            snapshot = session.model_copy(deep=True)
        logger.debug("session_created", session_id=session_id)
        return snapshot

    def now(self) -> datetime:
        return self._clock()

    def get(self, session_id: str) -> ConversationSession | None:
        with self._guard:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session is not None else None

    def add_message(self, session_id: str, message: Message) -> None:
        with self._guard:
            session = self._sessions.get(session_id)
            if session is None:
                return
            session.messages.append(message)
            session.updated_at = self._clock()

    def update_metadata(self, session_id: str, **updates: Any) -> None:
        """Shallow-merge ``updates`` into the session; absent fields are preserved."""
        unknown = set(updates) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Not updatable via metadata: {sorted(unknown)}")
        with self._guard:
            session = self._sessions.get(session_id)
            if session is None:
                return
            for name, value in updates.items():
                setattr(session, name, value)
            session.updated_at = self._clock()

    def update_phase(self, session_id: str, phase: Phase) -> None:
        with self._guard:
            session = self._sessions.get(session_id)
            if session is None:
                return
            session.phase = Phase(phase)
            session.updated_at = self._clock()

    def increment_confirmation_attempts(self, session_id: str) -> int:
        """Bump the attempt counter and return the new count (0 for unknown ids)."""
        with self._guard:
            session = self._sessions.get(session_id)
            if session is None:
                return 0
            session.confirmation_attempts += 1
            session.updated_at = self._clock()
            return session.confirmation_attempts

    def delete(self, session_id: str) -> bool:
        with self._guard:
            return self._sessions.pop(session_id, None) is not None

    def list(self) -> list[ConversationSession]:
        with self._guard:
            return [s.model_copy(deep=True) for s in self._sessions.values()]

    def __contains__(self, session_id: object) -> bool:
        with self._guard:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    # Retention -------------------------------------------------------------

    def _is_expired(self, session: ConversationSession, cutoff: datetime) -> bool:
        return session.created_at < cutoff

    def evict_expired(self) -> int:
        """Remove sessions created before ``now - retention``.

        Expiry is re-checked at deletion time, and sessions with a turn in
        flight (lock held) are left for the next sweep.
        """
        cutoff = self._clock() - self.retention
        with self._guard:
            candidates = [
                sid for sid, s in self._sessions.items() if self._is_expired(s, cutoff)
            ]

        removed = 0
        for sid in candidates:
            with self._guard:
                if sid in self._locks:
                    continue
                session = self._sessions.get(sid)
                if session is None or not self._is_expired(session, cutoff):
                    continue
                del self._sessions[sid]
                removed += 1
        return removed
