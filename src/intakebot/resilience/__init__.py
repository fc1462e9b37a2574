"""Resilience primitives for outbound oracle calls."""

from intakebot.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerError, CircuitState

__all__ = ["CircuitBreaker", "CircuitBreakerError", "CircuitState"]
