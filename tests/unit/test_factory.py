"""Tests for component wiring."""

from __future__ import annotations

import pytest

from intakebot.config import Settings
from intakebot.conversation.orchestrator import ConversationOrchestrator
from intakebot.errors import ConfigurationError
from intakebot.factory import create_oracle, create_orchestrator, create_store, create_sweeper
from intakebot.oracle.fake import FakeOracle


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_fake_provider_builds_fake_oracle():
    assert isinstance(create_oracle(_settings(llama_stack_provider="fake")), FakeOracle)


def test_use_fake_providers_downgrades_real():
    oracle = create_oracle(_settings(llama_stack_provider="real", use_fake_providers=True))
    assert isinstance(oracle, FakeOracle)


def test_off_provider_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        create_oracle(_settings(llama_stack_provider="off"))


def test_production_requires_real_provider():
    with pytest.raises(ConfigurationError):
        create_oracle(_settings(environment="production", llama_stack_provider="fake"))


def test_real_provider_builds_llama_stack_oracle_with_breaker():
    from intakebot.oracle.llama_stack import LlamaStackOracle

    oracle = create_oracle(
        _settings(
            llama_stack_provider="real",
            llama_stack_model="m1",
            oracle_timeout_seconds=3,
            circuit_breaker_failure_threshold=7,
        )
    )

    assert isinstance(oracle, LlamaStackOracle)
    assert oracle.model_id == "m1"
    assert oracle.timeout_seconds == 3
    assert oracle.circuit_breaker is not None
    assert oracle.circuit_breaker.failure_threshold == 7


def test_real_provider_without_breaker():
    oracle = create_oracle(_settings(llama_stack_provider="real", circuit_breaker_enabled=False))
    assert oracle.circuit_breaker is None


def test_store_and_sweeper_follow_settings():
    settings = _settings(session_retention_hours=2, session_sweep_interval_seconds=30)
    store = create_store(settings)
    assert store.retention.total_seconds() == 7200
    assert create_sweeper(store, settings).interval_seconds == 30


def test_create_orchestrator_uses_given_oracle():
    oracle = FakeOracle()
    orchestrator = create_orchestrator(_settings(llama_stack_provider="fake"), oracle=oracle)
    assert isinstance(orchestrator, ConversationOrchestrator)
