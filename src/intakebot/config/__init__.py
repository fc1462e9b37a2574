"""intakebot configuration module."""

from intakebot.config.provider_modes import ProviderMode, effective_oracle_provider
from intakebot.config.settings import Settings, get_settings, reset_settings_cache, settings

__all__ = [
    "settings",
    "Settings",
    "get_settings",
    "reset_settings_cache",
    "ProviderMode",
    "effective_oracle_provider",
]
