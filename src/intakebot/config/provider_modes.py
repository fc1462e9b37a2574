"""Oracle provider mode resolution.

``llama_stack_provider`` picks the oracle ("real" | "fake" | "off");
``use_fake_providers`` is a dev/test switch that turns "real" into "fake" but
never re-enables an oracle that is "off".
"""

from __future__ import annotations

from typing import Literal

from intakebot.config.settings import Settings

ProviderMode = Literal["real", "fake", "off"]

_MODES: frozenset[str] = frozenset({"real", "fake", "off"})
_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})


def _coerce_mode(value: object, *, default: ProviderMode) -> ProviderMode:
    """Normalize a mode string; anything unrecognised becomes ``default``."""
    if isinstance(value, str) and value.strip().lower() in _MODES:
        return value.strip().lower()  # type: ignore[return-value]
    return default


def _coerce_flag(value: object, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    return default


def effective_oracle_provider(settings: Settings) -> ProviderMode:
    """The oracle mode actually in force for ``settings``."""
    mode = _coerce_mode(getattr(settings, "llama_stack_provider", "real"), default="real")
    use_fake = _coerce_flag(getattr(settings, "use_fake_providers", False), default=False)
    if mode == "real" and use_fake:
        return "fake"
    return mode
