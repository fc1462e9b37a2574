"""Periodic eviction of expired sessions."""

from __future__ import annotations

from typing import Optional

import anyio
from anyio.abc import TaskStatus

from intakebot.conversation.store import SessionStore
from intakebot.observability.logging import get_logger

logger = get_logger(__name__)

__all__ = ["SessionSweeper", "DEFAULT_SWEEP_INTERVAL_SECONDS"]

DEFAULT_SWEEP_INTERVAL_SECONDS = 3600.0


class SessionSweeper:
    """Runs ``SessionStore.evict_expired`` on a fixed interval until stopped."""

    def __init__(
        self, store: SessionStore, *, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.store = store
        self.interval_seconds = interval_seconds
        self._stopped = False
        self._stop_event: Optional[anyio.Event] = None

    def sweep_once(self) -> int:
        removed = self.store.evict_expired()
        if removed:
            logger.info("sessions_evicted", count=removed, remaining=len(self.store))
        return removed

    async def run(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        """Sweep every ``interval_seconds``; returns once :meth:`stop` is called."""
        # Events must be created inside the running event loop.
        stop_event = self._stop_event = anyio.Event()
        if self._stopped:
            stop_event.set()

        logger.info("session_sweeper_started", interval_seconds=self.interval_seconds)
        task_status.started()
        while not stop_event.is_set():
            with anyio.move_on_after(self.interval_seconds):
                await stop_event.wait()
            if stop_event.is_set():
                break
            self.sweep_once()
        logger.info("session_sweeper_stopped")

    def stop(self) -> None:
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()
