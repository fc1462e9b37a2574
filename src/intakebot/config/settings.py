"""Application settings using Pydantic."""

import os
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(
        default=os.getenv("ENVIRONMENT", "development"),
        description="Deployment environment (development|test|production)",
    )

    # Llama Stack Configuration (semantic oracle)
    llama_stack_url: str = "http://localhost:5001"
    llama_stack_model: str = "openai/gpt-4o-mini"
    llama_stack_provider: Literal["real", "fake", "off"] = Field(
        default="real",
        description=(
            "Oracle provider mode: real=call Llama Stack, fake=offline heuristics, off=disable."
        ),
    )
    use_fake_providers: bool = Field(
        default=False,
        description=(
            "Convenience switch: treat the oracle as fake in dev/tests. "
            "Overrides llama_stack_provider=real (off still disables)."
        ),
    )
    oracle_timeout_seconds: float = Field(
        default=10.0,
        description="Per-call timeout for oracle inference; expiry is a transport failure.",
    )

    # Conversation tuning
    classifier_history_lines: int = Field(
        default=10,
        description="Most recent transcript lines sent to the intent classifier.",
    )
    question_history_messages: int = Field(
        default=6,
        description="Most recent messages included when generating the next question.",
    )

    # Session retention
    session_retention_hours: float = Field(
        default=24.0,
        description="Sessions older than this (measured from creation) are evicted.",
    )
    session_sweep_interval_seconds: float = Field(
        default=3600.0,
        description="Interval between background eviction sweeps.",
    )

    # Circuit Breaker Configuration
    circuit_breaker_enabled: bool = Field(
        default=True,
        description="Enable circuit breaker for oracle calls.",
    )
    circuit_breaker_failure_threshold: int = Field(
        default=5,
        description="Number of failures before opening circuit.",
    )
    circuit_breaker_recovery_timeout: float = Field(
        default=30.0,
        description="Seconds to wait before attempting recovery (half-open state).",
    )

    # Observability
    log_level: str = "INFO"
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON lines; false switches to the console renderer.",
    )

    @field_validator(
        "oracle_timeout_seconds", "session_retention_hours", "session_sweep_interval_seconds"
    )
    @classmethod
    def _must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("classifier_history_lines", "question_history_messages")
    @classmethod
    def _non_negative_window(cls, v: int) -> int:
        if v < 0:
            raise ValueError("history windows cannot be negative")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: Any) -> str:
        return str(v or "INFO").upper()

    @model_validator(mode="after")
    def validate_model(self) -> "Settings":
        """Ensure a model is configured."""
        if not self.llama_stack_model:
            raise ValueError("LLAMA_STACK_MODEL must be configured")
        return self


# Global settings instance
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Lazily construct Settings so tests and CLIs can set env vars before first access.
    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


class _SettingsProxy:
    """Lazy proxy for Settings.

    This avoids eager settings instantiation at import time, which can make tests
    order-dependent when env vars are changed during `pytest_configure()`.
    """

    def __getattr__(self, name: str) -> Any:
        return getattr(get_settings(), name)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SettingsProxy {get_settings()!r}>"


settings = _SettingsProxy()
