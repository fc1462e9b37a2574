"""Wiring: build the oracle and conversation components from settings."""

from __future__ import annotations

from datetime import timedelta

from intakebot.config import Settings, effective_oracle_provider, get_settings
from intakebot.conversation.classifier import IntentClassifier
from intakebot.conversation.cleanup import SessionSweeper
from intakebot.conversation.confirmation import ConfirmationAnalyzer
from intakebot.conversation.extractor import RequirementsExtractor
from intakebot.conversation.generator import ResponseGenerator
from intakebot.conversation.orchestrator import ConversationOrchestrator
from intakebot.conversation.store import SessionStore
from intakebot.errors import ConfigurationError
from intakebot.observability.logging import get_logger
from intakebot.oracle.fake import FakeOracle
from intakebot.oracle.protocols import SemanticOracle
from intakebot.resilience.circuit_breaker import CircuitBreaker

logger = get_logger(__name__)

__all__ = ["create_oracle", "create_store", "create_orchestrator", "create_sweeper"]


def create_oracle(settings: Settings | None = None) -> SemanticOracle:
    """Select the oracle implementation for the configured provider mode."""
    settings = settings or get_settings()
    mode = effective_oracle_provider(settings)

    if settings.environment == "production" and mode != "real":
        raise ConfigurationError(
            "Cannot use LLAMA_STACK_PROVIDER!=real in production. "
            "Set LLAMA_STACK_PROVIDER=real or ENVIRONMENT != production"
        )
    if mode == "off":
        raise ConfigurationError("LLAMA_STACK_PROVIDER=off: the semantic oracle is disabled")
    if mode == "fake":
        logger.info("oracle_selected", provider="fake")
        return FakeOracle()

    # Imported here so fake/offline runs never load the SDK.
    from intakebot.oracle.llama_stack import LlamaStackOracle

    breaker = None
    if settings.circuit_breaker_enabled:
        breaker = CircuitBreaker(
            failure_threshold=settings.circuit_breaker_failure_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_timeout,
        )
    logger.info("oracle_selected", provider="llama_stack", model=settings.llama_stack_model)
    return LlamaStackOracle(
        model_id=settings.llama_stack_model,
        timeout_seconds=settings.oracle_timeout_seconds,
        circuit_breaker=breaker,
    )


def create_store(settings: Settings | None = None) -> SessionStore:
    settings = settings or get_settings()
    return SessionStore(retention=timedelta(hours=settings.session_retention_hours))


def create_orchestrator(
    settings: Settings | None = None,
    *,
    oracle: SemanticOracle | None = None,
    store: SessionStore | None = None,
) -> ConversationOrchestrator:
    settings = settings or get_settings()
    oracle = oracle or create_oracle(settings)
    return ConversationOrchestrator(
        store=store or create_store(settings),
        classifier=IntentClassifier(oracle, history_lines=settings.classifier_history_lines),
        extractor=RequirementsExtractor(oracle),
        analyzer=ConfirmationAnalyzer(oracle),
        generator=ResponseGenerator(oracle, history_messages=settings.question_history_messages),
    )


def create_sweeper(store: SessionStore, settings: Settings | None = None) -> SessionSweeper:
    settings = settings or get_settings()
    return SessionSweeper(store, interval_seconds=settings.session_sweep_interval_seconds)
