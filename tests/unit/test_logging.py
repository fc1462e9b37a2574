from __future__ import annotations

import json
import logging

import structlog

import intakebot.observability as observability
from intakebot.observability.logging import (
    _add_session_id,
    configure_logging,
    get_session_id,
    session_id_var,
)


def test_session_id_context_propagation() -> None:
    """session_id_var should propagate via contextvars helper."""

    token = session_id_var.set("test-session-id")
    try:
        assert get_session_id() == "test-session-id"
        assert _add_session_id(None, "info", {"event": "x"})["session_id"] == "test-session-id"
        # An explicit session_id on the event wins.
        assert _add_session_id(None, "info", {"session_id": "other"})["session_id"] == "other"
    finally:
        session_id_var.reset(token)

    assert "session_id" not in _add_session_id(None, "info", {"event": "x"})


def test_structlog_json_output_contains_required_fields(caplog) -> None:
    """Ensure log entries are valid JSON and include core fields."""

    configure_logging(level="INFO", json_output=True)
    log = structlog.get_logger("intakebot.tests.json_output")

    token = session_id_var.set("abc-123")
    try:
        with caplog.at_level(logging.INFO):
            log.info("phase_transition", from_phase="gathering", to_phase="confirmation_first")
    finally:
        session_id_var.reset(token)

    entries = [json.loads(r.getMessage()) for r in caplog.records if "phase_transition" in r.getMessage()]
    assert entries
    entry = entries[-1]
    assert entry["event"] == "phase_transition"
    assert entry["session_id"] == "abc-123"
    assert entry["level"] == "info"
    assert "timestamp" in entry


def test_init_observability_is_idempotent(monkeypatch) -> None:
    calls: list[tuple[str, bool]] = []
    monkeypatch.setattr(observability, "_OBSERVABILITY_INITIALIZED", False)
    monkeypatch.setattr(
        observability,
        "configure_logging",
        lambda *, level, json_output: calls.append((level, json_output)),
    )
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_JSON", "false")

    observability.init_observability()
    observability.init_observability()

    assert calls == [("WARNING", False)]
