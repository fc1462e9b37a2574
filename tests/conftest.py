"""Pytest configuration and shared fixtures."""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Union

import httpx
import pytest

# Ensure source tree is importable without editable install
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


def pytest_configure(config):
    """Configure pytest markers and environment for tests."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")

    # These MUST override any developer shell/.env values to keep the test run deterministic.
    os.environ["ENVIRONMENT"] = "test"
    os.environ["USE_FAKE_PROVIDERS"] = "false"
    os.environ["LLAMA_STACK_PROVIDER"] = "fake"
    os.environ["LOG_JSON"] = "true"


@pytest.fixture(autouse=True)
def block_external_http(monkeypatch):
    """Fail the fast lane if code tries to hit the public internet.

    Allowlist only localhost/loopback for local services.
    """

    allowed_hosts = {"localhost", "127.0.0.1", "0.0.0.0"}

    async def _async_guard(self, method, url, *args, **kwargs):  # type: ignore[no-untyped-def]
        u = httpx.URL(url) if not isinstance(url, httpx.URL) else url
        if u.scheme in {"http", "https"} and (u.host or "") not in allowed_hosts:
            raise RuntimeError(f"External HTTP blocked in tests: {u!s}")
        return await _orig_async_request(self, method, url, *args, **kwargs)

    def _sync_guard(self, method, url, *args, **kwargs):  # type: ignore[no-untyped-def]
        u = httpx.URL(url) if not isinstance(url, httpx.URL) else url
        if u.scheme in {"http", "https"} and (u.host or "") not in allowed_hosts:
            raise RuntimeError(f"External HTTP blocked in tests: {u!s}")
        return _orig_sync_request(self, method, url, *args, **kwargs)

    _orig_async_request = httpx.AsyncClient.request
    _orig_sync_request = httpx.Client.request
    monkeypatch.setattr(httpx.AsyncClient, "request", _async_guard, raising=True)
    monkeypatch.setattr(httpx.Client, "request", _sync_guard, raising=True)

    yield


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so per-test env changes are picked up."""
    from intakebot.config import reset_settings_cache

    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio tests on asyncio."""
    return "asyncio"


Reply = Union[str, dict, Exception, Callable[[str], str]]


class ScriptedOracle:
    """Oracle double answering from per-purpose queues.

    Each queued reply may be a string, a dict (sent as JSON), an exception to
    raise, or a callable receiving the prompt. When a queue runs dry the
    ``default`` entry for that purpose is reused.
    """

    def __init__(self, **defaults: Reply) -> None:
        self.defaults: dict[str, Reply] = dict(defaults)
        self.queues: dict[str, list[Reply]] = {}
        self.calls: list[tuple[str, str, Any]] = []

    def queue(self, purpose: str, *replies: Reply) -> "ScriptedOracle":
        self.queues.setdefault(purpose, []).extend(replies)
        return self

    def purposes(self) -> list[str]:
        return [purpose for purpose, _, _ in self.calls]

    async def infer(self, prompt: str, *, purpose: str, max_tokens: int | None = None) -> str:
        self.calls.append((purpose, prompt, max_tokens))
        pending = self.queues.get(purpose)
        if pending:
            reply = pending.pop(0)
        elif purpose in self.defaults:
            reply = self.defaults[purpose]
        else:
            raise AssertionError(f"unexpected oracle call: {purpose}")

        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prompt)
        if isinstance(reply, dict):
            return json.dumps(reply)
        return reply


@pytest.fixture
def scripted_oracle() -> ScriptedOracle:
    return ScriptedOracle(
        classify={"primaryIntent": "web_development", "confidence": 90, "reasoning": "site"},
        question="What platform would you like to use?",
        summary="Let me confirm what I've gathered:\n- stuff\nIs this accurate?",
    )


@pytest.fixture
def oracle_factory() -> Callable[..., ScriptedOracle]:
    return ScriptedOracle
