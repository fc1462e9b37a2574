"""intakebot observability module - structured logging.

Usage:
    from intakebot.observability import get_logger

    logger = get_logger(__name__)
    logger.info("phase_transition", session_id=session_id, phase="gathering")
"""

from __future__ import annotations

from intakebot.observability.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "init_observability",
]

_OBSERVABILITY_INITIALIZED = False


def init_observability() -> None:
    """Initialize logging for the process (idempotent).

    This is intentionally *not* executed on import so `intakebot` can be used as a
    library without mutating global logging configuration.
    """
    global _OBSERVABILITY_INITIALIZED
    if _OBSERVABILITY_INITIALIZED:
        return
    from intakebot.config import settings

    configure_logging(level=settings.log_level, json_output=settings.log_json)
    _OBSERVABILITY_INITIALIZED = True
