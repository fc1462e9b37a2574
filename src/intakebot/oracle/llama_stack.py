"""Llama Stack implementation of the semantic oracle.

Direct SDK usage stays in this module so the conversation core depends only on
the small :class:`~intakebot.oracle.protocols.SemanticOracle` protocol.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import anyio
from llama_stack_client import APIError, AsyncLlamaStackClient

from intakebot.config import settings
from intakebot.errors import OracleTransportError
from intakebot.observability.logging import get_logger
from intakebot.oracle.protocols import OraclePurpose
from intakebot.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerError

logger = get_logger(__name__)

__all__ = ["LlamaStackOracle", "get_async_client", "clear_client_cache"]


@lru_cache(maxsize=1)
def get_async_client() -> AsyncLlamaStackClient:
    """Cached async client for the configured Llama Stack endpoint."""
    logger.info("llama_stack_client_created", url=settings.llama_stack_url)
    return AsyncLlamaStackClient(
        base_url=settings.llama_stack_url,
        timeout=settings.oracle_timeout_seconds,
        max_retries=0,
    )


def clear_client_cache() -> None:
    """Drop the cached client (useful for tests and settings reloads)."""
    get_async_client.cache_clear()


class LlamaStackOracle:
    """Oracle backed by Llama Stack chat completions.

    Every call is bounded by ``timeout_seconds``. Timeouts, connection errors,
    upstream error statuses and an open circuit all raise OracleTransportError.
    """

    def __init__(
        self,
        client: AsyncLlamaStackClient | None = None,
        *,
        model_id: str | None = None,
        timeout_seconds: float | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self._client = client
        self.model_id = model_id or settings.llama_stack_model
        self.timeout_seconds = timeout_seconds or settings.oracle_timeout_seconds
        self.circuit_breaker = circuit_breaker

    def _get_client(self) -> AsyncLlamaStackClient:
        return self._client or get_async_client()

    async def _complete(self, prompt: str, max_tokens: int | None) -> Any:
        kwargs: dict[str, Any] = {
            "model": self.model_id,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        with anyio.fail_after(self.timeout_seconds):
            return await self._get_client().chat.completions.create(**kwargs)

    async def infer(
        self, prompt: str, *, purpose: OraclePurpose, max_tokens: int | None = None
    ) -> str:
        try:
            if self.circuit_breaker is not None:
                response = await self.circuit_breaker.call(self._complete, prompt, max_tokens)
            else:
                response = await self._complete(prompt, max_tokens)
        except TimeoutError as exc:
            logger.warning(
                "oracle_timeout", purpose=purpose, timeout_seconds=self.timeout_seconds
            )
            raise OracleTransportError(
                f"Oracle did not answer within {self.timeout_seconds}s",
                purpose=purpose,
                cause=exc,
            ) from exc
        except CircuitBreakerError as exc:
            raise OracleTransportError(str(exc), purpose=purpose, cause=exc) from exc
        except APIError as exc:
            logger.warning("oracle_request_failed", purpose=purpose, error=str(exc))
            raise OracleTransportError(
                f"Oracle request failed: {exc}", purpose=purpose, cause=exc
            ) from exc

        content = _extract_content(response)
        logger.debug("oracle_answered", purpose=purpose, chars=len(content))
        return content


def _extract_content(response: object) -> str:
    choices = getattr(response, "choices", None)
    if choices:
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) if message else None
        if content:
            return str(content)
    content = getattr(response, "content", None)
    return str(content) if content else ""
